from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Awaitable, Callable, Union

from anyio import TASK_STATUS_IGNORED
from anyio.abc import TaskStatus

from ..core.subscription import Delivery
from ..core.subscription import Subscription as SubscriptionABC
from ..errors import (
    BadCallbackTypeError,
    BadSubscriptionError,
    ChannelClosedError,
    MaxMessagesReachedError,
)
from .channel import MemoryChannel

if TYPE_CHECKING:
    from ..core.connection import Connection
    from ..core.msg import Msg
    from ..options import SubscriptionOptions

    Handler = Callable[[Msg], Union[Awaitable[None], None]]


logger = logging.getLogger("natsub.aio.subscription")


class Subscription(SubscriptionABC):
    """Base class of subscriptions consumed from anyio tasks.

    Messages must be observed from the event loop thread.
    """

    def _new_channel(self, name: str) -> MemoryChannel[Msg]:
        return MemoryChannel(name)

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.unsubscribe()


class SubscriptionIterator(Subscription):
    """A subscription consumed by awaiting messages."""

    def start(self) -> None:
        self._send_subscription()

    async def next_message(self, timeout: float | None = None) -> Msg:
        """Wait for the next message.

        Args:
            timeout: Maximum number of seconds to wait. `None` or a negative
                value waits forever.

        Raises:
            ConnectionClosedError: if the connection is closed.
            MaxMessagesReachedError: if the maximum number of messages was delivered.
            BadSubscriptionError: if the subscription is closed.
            SubscriptionSlowConsumerError: once, after messages were dropped.
            NatsTimeoutError: if no message arrived within `timeout`.
        """
        conn, channel, max_msgs = self._check_next()
        try:
            msg = await channel.pull(timeout)  # type: ignore[misc]
        except ChannelClosedError:
            raise self._channel_closed_error() from None
        return self._tally_pulled(msg, conn, max_msgs)

    async def messages(self) -> AsyncIterator[Msg]:
        """Iterate over messages until the subscription is closed
        or reaches its maximum of messages."""
        while True:
            try:
                msg = await self.next_message()
            except (MaxMessagesReachedError, BadSubscriptionError):
                return
            yield msg


class SubscriptionWorker(Subscription):
    """A subscription delivering messages to a handler from its own task.

    The worker is started within an anyio task group:

    ```python
    async with create_task_group() as tg:
        await tg.start(sub)
    ```

    The handler may be a coroutine function. The task exits once the
    subscription is unsubscribed, drained or closed.
    """

    def __init__(
        self,
        conn: Connection,
        sid: int,
        subject: str,
        handler: Handler,
        queue: str | None = None,
        options: SubscriptionOptions | None = None,
    ) -> None:
        if not callable(handler):
            raise BadCallbackTypeError(f"handler must be callable, got {handler!r}")
        super().__init__(conn, sid, subject, queue, options)
        self._handler = handler
        self._running = False

    def _is_receiving(self) -> bool:
        return self._started

    def is_started(self) -> bool:
        with self._lock:
            return self._started

    def set_handler(self, handler: Handler) -> None:
        """Replace the message handler."""
        if not callable(handler):
            raise BadCallbackTypeError(f"handler must be callable, got {handler!r}")
        with self._lock:
            self._check_valid()
            self._handler = handler

    def start(self) -> None:
        """Send the subscription to the server.

        Messages are only accepted once started. Starting a started
        subscription does nothing.
        """
        self._send_subscription()

    async def __call__(self, *, task_status: TaskStatus[None] = TASK_STATUS_IGNORED) -> None:
        """Start the subscription and deliver messages until it is closed."""
        with self._lock:
            running = self._running
            self._running = True
        if running:
            task_status.started()
            return
        try:
            self.start()
            task_status.started()
            await self._wait_for_msgs()
        finally:
            with self._lock:
                self._running = False
            self._finish_drain()

    async def _wait_for_msgs(self) -> None:
        channel: MemoryChannel[Msg] = self._channel  # type: ignore[assignment]
        while True:
            try:
                msg = await channel.pull()
            except ChannelClosedError:
                return
            if not await self.process_msg(msg):
                return

    async def process_msg(self, msg: Msg) -> bool:  # type: ignore[override]
        """Dispatch a message to the handler, awaiting it when it returns an awaitable."""
        delivery = self._begin_delivery(msg)
        if not isinstance(delivery, Delivery):
            return delivery
        if delivery.should_deliver():
            try:
                result: Any = delivery.handler(msg)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.error(
                    "Unhandled exception caught in subscription callback", exc_info=exc
                )
            if delivery.is_last():
                self._complete_at_max()
        return True

    def _stop_worker(self) -> None:
        with self._lock:
            self._handler = None
            self._started = False
            channel = self._channel
        channel.close()

    def unsubscribe(self) -> None:
        self._stop_worker()
        super().unsubscribe()

    def auto_unsubscribe(self, max_msgs: int) -> None:
        self.start()
        super().auto_unsubscribe(max_msgs)

    def close(self) -> None:
        self._stop_worker()
        super().close()
