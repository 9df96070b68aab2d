from __future__ import annotations

import math
from typing import Generic, TypeVar

from anyio import (
    BrokenResourceError,
    ClosedResourceError,
    EndOfStream,
    WouldBlock,
    create_memory_object_stream,
    fail_after,
)
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from ..errors import ChannelClosedError, NatsTimeoutError

T = TypeVar("T")


class MemoryChannel(Generic[T]):
    """A closable FIFO queue for anyio tasks.

    This is the event loop counterpart of `natsub.core.channel.Channel`,
    built on an unbounded memory object stream. Items must be pushed
    from the event loop thread.
    """

    __slots__ = ["name", "_send", "_receive", "_closed", "_draining"]

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._send: MemoryObjectSendStream[T]
        self._receive: MemoryObjectReceiveStream[T]
        self._send, self._receive = create_memory_object_stream(math.inf)
        self._closed = False
        self._draining = False

    def __repr__(self) -> str:
        return f"<MemoryChannel name={self.name!r} pending={len(self)} closed={self._closed}>"

    def __len__(self) -> int:
        return self._receive.statistics().current_buffer_used

    def is_closed(self) -> bool:
        return self._closed or self._draining

    def push(self, item: T) -> None:
        """Append an item and wake the consumer.

        Raises:
            ChannelClosedError: if the channel is closed or draining.
        """
        try:
            self._send.send_nowait(item)
        except (ClosedResourceError, BrokenResourceError):
            raise ChannelClosedError(self.name) from None

    async def pull(self, timeout: float | None = None) -> T:
        """Remove and return the oldest item.

        Args:
            timeout: Maximum number of seconds to wait. `None` or a negative
                value waits forever, `0` only returns an already pending item.

        Raises:
            NatsTimeoutError: if no item arrived within `timeout`.
            ChannelClosedError: if the channel is closed, or draining and empty.
        """
        try:
            try:
                return self._receive.receive_nowait()
            except WouldBlock:
                pass
            if timeout is None or timeout < 0:
                return await self._receive.receive()
            try:
                with fail_after(timeout):
                    return await self._receive.receive()
            except TimeoutError:
                raise NatsTimeoutError() from None
        except (EndOfStream, ClosedResourceError):
            raise ChannelClosedError(self.name) from None

    def close(self, drain: bool = False) -> None:
        """Close the channel and wake all pending pulls.

        Args:
            drain: When True, pending items can still be pulled.
        """
        self._draining = True
        # Closing the send side wakes up waiting receivers
        self._send.close()
        if not drain:
            self._closed = True
            self._receive.close()
