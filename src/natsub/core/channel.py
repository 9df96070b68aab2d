from __future__ import annotations

import threading
from collections import deque
from time import monotonic
from typing import Generic, TypeVar

from ..errors import ChannelClosedError, NatsTimeoutError

T = TypeVar("T")


class Channel(Generic[T]):
    """A closable blocking FIFO queue.

    A channel hands items from a single producer to a single consumer.
    Pushing never blocks. Pulling blocks until an item is available,
    the timeout elapses or the channel is closed.

    A channel can be closed in two ways:
    - `close()` discards pending items and wakes all blocked pulls.
    - `close(drain=True)` refuses new items but lets the consumer pull
      the pending ones before failing.
    """

    __slots__ = ["name", "_items", "_cond", "_closed", "_draining"]

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._items: deque[T] = deque()
        self._cond = threading.Condition(threading.Lock())
        self._closed = False
        self._draining = False

    def __repr__(self) -> str:
        return f"<Channel name={self.name!r} pending={len(self._items)} closed={self._closed}>"

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def is_closed(self) -> bool:
        """Return True if the channel no longer accepts items."""
        with self._cond:
            return self._closed or self._draining

    def push(self, item: T) -> None:
        """Append an item and wake the consumer.

        Raises:
            ChannelClosedError: if the channel is closed or draining.
        """
        with self._cond:
            if self._closed or self._draining:
                raise ChannelClosedError(self.name)
            self._items.append(item)
            self._cond.notify()

    def pull(self, timeout: float | None = None) -> T:
        """Remove and return the oldest item.

        Args:
            timeout: Maximum number of seconds to wait. `None` or a negative
                value waits forever, `0` only returns an already pending item.

        Raises:
            NatsTimeoutError: if no item arrived within `timeout`.
            ChannelClosedError: if the channel is closed, or draining and empty.
        """
        forever = timeout is None or timeout < 0
        deadline = 0.0 if forever else monotonic() + timeout  # type: ignore[operator]
        with self._cond:
            while True:
                if self._closed:
                    raise ChannelClosedError(self.name)
                if self._items:
                    return self._items.popleft()
                if self._draining:
                    self._closed = True
                    raise ChannelClosedError(self.name)
                if forever:
                    self._cond.wait()
                    continue
                remaining = deadline - monotonic()
                if remaining <= 0:
                    raise NatsTimeoutError()
                # Spurious wakeups are handled by looping
                self._cond.wait(remaining)

    def close(self, drain: bool = False) -> None:
        """Close the channel and wake all blocked pulls.

        Args:
            drain: When True, pending items can still be pulled.
        """
        with self._cond:
            if drain:
                self._draining = True
            else:
                self._closed = True
                self._items.clear()
            self._cond.notify_all()
