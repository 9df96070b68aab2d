from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Iterator

from ..core.channel import Channel
from ..core.subscription import Subscription
from ..errors import (
    BadCallbackTypeError,
    BadSubscriptionError,
    ChannelClosedError,
    MaxMessagesReachedError,
)

if TYPE_CHECKING:
    from ..core.connection import Connection
    from ..core.msg import Msg
    from ..options import SubscriptionOptions

logger = logging.getLogger("natsub.io.subscription")


class SyncSubscription(Subscription):
    """A subscription consumed by pulling messages from the caller's thread."""

    def _new_channel(self, name: str) -> Channel[Msg]:
        return Channel(name)

    def start(self) -> None:
        self._send_subscription()

    def process_msg(self, msg: Msg) -> bool:
        # Messages are pulled, never dispatched
        with self._lock:
            return not self._closed

    def next_message(self, timeout: float | None = None) -> Msg:
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
            msg = channel.pull(timeout)
        except ChannelClosedError:
            raise self._channel_closed_error() from None
        return self._tally_pulled(msg, conn, max_msgs)

    def __iter__(self) -> Iterator[Msg]:
        return self

    def __next__(self) -> Msg:
        try:
            return self.next_message()
        except (MaxMessagesReachedError, BadSubscriptionError):
            raise StopIteration from None

    def __enter__(self) -> SyncSubscription:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.unsubscribe()


class AsyncSubscription(Subscription):
    """A subscription delivering messages to a handler.

    Each started subscription owns a dedicated worker thread which pulls
    messages from the channel and invokes the handler, so that a slow
    handler never delays other subscriptions. Unsubscribing closes the
    channel: the worker finishes the handler call in progress, if any,
    then exits.
    """

    def __init__(
        self,
        conn: Connection,
        sid: int,
        subject: str,
        queue: str | None = None,
        handler: Callable[[Msg], Any] | None = None,
        options: SubscriptionOptions | None = None,
    ) -> None:
        super().__init__(conn, sid, subject, queue, options)
        self._worker: threading.Thread | None = None
        if handler is not None:
            self.set_handler(handler)

    def _new_channel(self, name: str) -> Channel[Msg]:
        return Channel(name)

    def _is_receiving(self) -> bool:
        return self._started

    def is_started(self) -> bool:
        with self._lock:
            return self._started

    def handler(self) -> Callable[[Msg], Any] | None:
        with self._lock:
            return self._handler

    def set_handler(self, handler: Callable[[Msg], Any]) -> None:
        """Register the message handler, replacing the previous one.

        The subscription is started if needed.

        Raises:
            BadCallbackTypeError: if `handler` is not callable.
            BadSubscriptionError: if the subscription is closed.
        """
        if not callable(handler):
            raise BadCallbackTypeError(f"handler must be callable, got {handler!r}")
        with self._lock:
            self._check_valid()
            self._handler = handler
        self.start()

    def start(self) -> None:
        """Send the subscription to the server and launch the delivery worker.

        Starting a started subscription does nothing.

        Raises:
            BadSubscriptionError: if the subscription is closed or detached.
        """
        if self._send_subscription():
            self._start_worker()

    def _start_worker(self) -> None:
        with self._lock:
            if self._worker is not None:
                return
            self._worker = worker = threading.Thread(
                target=self._run,
                name=f"natsub-subscription-{self._sid}",
                daemon=True,
            )
        logger.debug("starting delivery worker for subscription %s", self._sid)
        worker.start()

    def _run(self) -> None:
        channel = self._channel
        try:
            while True:
                try:
                    msg = channel.pull()
                except ChannelClosedError:
                    return
                if not self.process_msg(msg):
                    return
        finally:
            self._finish_drain()
            logger.debug("delivery worker for subscription %s exited", self._sid)

    def _stop_worker(self) -> None:
        with self._lock:
            self._handler = None
            self._started = False
            channel = self._channel
        channel.close()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait until the delivery worker exits.

        Returns:
            True if the worker is not running anymore.
        """
        with self._lock:
            worker = self._worker
        if worker is None:
            return True
        if worker is not threading.current_thread():
            worker.join(timeout)
        return not worker.is_alive()

    def unsubscribe(self) -> None:
        self._stop_worker()
        super().unsubscribe()

    def auto_unsubscribe(self, max_msgs: int) -> None:
        self.start()
        super().auto_unsubscribe(max_msgs)

    def close(self) -> None:
        self._stop_worker()
        super().close()
