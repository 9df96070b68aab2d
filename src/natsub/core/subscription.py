from __future__ import annotations

import abc
import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Union

from ..errors import (
    BadSubscriptionError,
    ChannelClosedError,
    ConnectionClosedError,
    MaxMessagesReachedError,
    NatsError,
    SubscriptionClosedError,
    SubscriptionSlowConsumerError,
)
from ..options import SubscriptionOptions, check_pending_limits

if TYPE_CHECKING:
    from ..aio.channel import MemoryChannel
    from .channel import Channel
    from .connection import Connection
    from .msg import Msg

    AnyChannel = Union[Channel[Msg], MemoryChannel[Msg]]


logger = logging.getLogger("natsub.core.subscription")


class SubscriptionState(str, Enum):
    """Subscription state.

    `CLOSED` is terminal.
    """

    OPEN = "OPEN"
    DRAINING = "DRAINING"
    CLOSED = "CLOSED"


class SubscriptionStatistics:
    __slots__ = [
        "received",
        "pending_msgs",
        "pending_bytes",
        "max_pending_msgs",
        "max_pending_bytes",
        "delivered",
        "dropped",
    ]

    def __init__(self) -> None:
        self.received = 0
        self.pending_msgs = 0
        self.pending_bytes = 0
        self.max_pending_msgs = 0
        self.max_pending_bytes = 0
        self.delivered = 0
        self.dropped = 0

    def observe_message_received(self, msg: Msg) -> None:
        self.received += 1
        self.pending_msgs += 1
        self.pending_bytes += msg.size()
        if self.pending_msgs > self.max_pending_msgs:
            self.max_pending_msgs = self.pending_msgs
        if self.pending_bytes > self.max_pending_bytes:
            self.max_pending_bytes = self.pending_bytes

    def observe_message_dropped(self, msg: Msg) -> None:
        self.pending_msgs -= 1
        self.pending_bytes -= msg.size()
        self.dropped += 1

    def observe_message_processed(self, msg: Msg) -> None:
        self.pending_msgs -= 1
        self.pending_bytes -= msg.size()
        self.delivered += 1


class Delivery:
    """Outcome of the delivery tally of a message about to be dispatched."""

    __slots__ = ["handler", "delivered", "max_msgs"]

    def __init__(self, handler: Callable[[Msg], Any], delivered: int, max_msgs: int) -> None:
        self.handler = handler
        self.delivered = delivered
        self.max_msgs = max_msgs

    def should_deliver(self) -> bool:
        # When two messages were in flight as the limit was reached,
        # the one exceeding it is not delivered.
        return self.max_msgs <= 0 or self.delivered <= self.max_msgs

    def is_last(self) -> bool:
        return self.max_msgs > 0 and self.delivered == self.max_msgs


class Subscription(metaclass=abc.ABCMeta):
    """State and delivery accounting shared by all subscriptions.

    The subscription lock protects the counters and the flags. It is
    never held while waiting on the channel or while running a handler,
    so handlers may call back into the subscription (to unsubscribe for
    example).

    Messages enter through `observe` (called by the routing table of the
    connection) and are consumed either by pulling (`next_message` in
    subclasses) or by a delivery worker calling `process_msg`. Both paths
    increment the delivered count exactly once per message.
    """

    def __init__(
        self,
        conn: Connection,
        sid: int,
        subject: str,
        queue: str | None = None,
        options: SubscriptionOptions | None = None,
    ) -> None:
        options = options or SubscriptionOptions()
        self._lock = threading.Lock()
        self._conn: Connection | None = conn
        self._sid = sid
        self._subject = subject
        self._queue = queue
        self._max = options.max_msgs
        self._pending_msgs_limit = options.pending_msgs_limit
        self._pending_bytes_limit = options.pending_bytes_limit
        self._stats = SubscriptionStatistics()
        self._closed = False
        self._conn_closed = False
        self._draining = False
        self._slow_consumer = False
        self._started = False
        self._handler: Callable[[Msg], Any] | None = None
        self._channel: AnyChannel = self._new_channel(self._channel_name())

    @abc.abstractmethod
    def _new_channel(self, name: str) -> AnyChannel:
        """Create the channel holding the messages waiting for delivery."""
        raise NotImplementedError

    @abc.abstractmethod
    def start(self) -> None:
        """Express interest in the subject to the server."""
        raise NotImplementedError

    def _channel_name(self) -> str:
        if self._queue:
            return f"{self._subject} (queue: {self._queue})"
        return self._subject

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} sid={self._sid} subject={self._subject} "
            f"queue={self._queue} state={self.state().value}>"
        )

    def sid(self) -> int:
        return self._sid

    def subject(self) -> str:
        return self._subject

    def queue(self) -> str | None:
        return self._queue or None

    def statistics(self) -> SubscriptionStatistics:
        return self._stats

    def connection(self) -> Connection | None:
        with self._lock:
            return self._conn

    def delivered(self) -> int:
        with self._lock:
            return self._stats.delivered

    def max_msgs(self) -> int:
        with self._lock:
            return self._max

    def is_valid(self) -> bool:
        """Return True while the subscription is attached to a connection and not closed."""
        with self._lock:
            return self._conn is not None and not self._closed

    def state(self) -> SubscriptionState:
        with self._lock:
            if self._closed:
                return SubscriptionState.CLOSED
            if self._draining:
                return SubscriptionState.DRAINING
            return SubscriptionState.OPEN

    def queued_msgs(self) -> int:
        """Return the number of messages waiting in the channel."""
        with self._lock:
            self._check_valid()
            channel = self._channel
        return len(channel)

    def pending_limits(self) -> tuple[int, int]:
        with self._lock:
            return self._pending_msgs_limit, self._pending_bytes_limit

    def set_pending_limits(self, msgs_limit: int, bytes_limit: int) -> None:
        """Change the pending limits used to detect slow consumers.

        A negative limit disables the corresponding check.

        Raises:
            ValueError: if a limit is zero.
            BadSubscriptionError: if the subscription is closed.
        """
        check_pending_limits(msgs_limit, bytes_limit)
        with self._lock:
            self._check_valid()
            self._pending_msgs_limit = msgs_limit
            self._pending_bytes_limit = bytes_limit

    def mark_slow_consumer(self) -> None:
        """Flag the subscription as a slow consumer.

        Pulling consumers see the flag once as a `SubscriptionSlowConsumerError`.
        """
        with self._lock:
            self._slow_consumer = True

    def is_slow_consumer(self) -> bool:
        with self._lock:
            return self._slow_consumer

    # Ingestion

    def _is_receiving(self) -> bool:
        """Return True when a consumer exists. Caller must hold the lock."""
        return True

    def _exceeds_pending_limits(self) -> bool:
        """Caller must hold the lock."""
        stats = self._stats
        if self._pending_msgs_limit > 0 and stats.pending_msgs > self._pending_msgs_limit:
            return True
        if self._pending_bytes_limit > 0 and stats.pending_bytes > self._pending_bytes_limit:
            return True
        return False

    def observe(self, msg: Msg) -> bool:
        """Accept an inbound message routed to this subscription.

        Returns:
            False when the subscription does not accept messages anymore,
            in which case the caller should stop routing messages to it.
        """
        with self._lock:
            if self._closed:
                return False
            if not self._is_receiving():
                # Nobody is listening yet, the message is discarded
                return True
            if self._conn is None or self._conn_closed:
                return False
            if self._max > 0 and self._stats.received >= self._max:
                # Queued messages stay deliverable, then the channel reads closed
                self._draining = True
                self._channel.close(drain=True)
                return False
            self._stats.observe_message_received(msg)
            if not self._exceeds_pending_limits():
                try:
                    self._channel.push(msg)
                except ChannelClosedError:
                    self._stats.observe_message_dropped(msg)
                    return False
                return True
            self._stats.observe_message_dropped(msg)
            first_drop = not self._slow_consumer
            self._slow_consumer = True
        if first_drop:
            logger.warning(
                "subscription %s on %s is a slow consumer, dropping messages",
                self._sid,
                self._subject,
            )
        return True

    # Delivery accounting

    def _tally_delivered(self, msg: Msg) -> int:
        """Count a delivered message. Caller must hold the lock.

        Returns:
            The delivered count including this message.
        """
        self._stats.observe_message_processed(msg)
        delivered = self._stats.delivered
        if self._max > 0 and delivered >= self._max:
            self._draining = True
        return delivered

    def _begin_delivery(self, msg: Msg) -> Delivery | bool:
        """Run the checks and the tally preceding the dispatch of a message.

        Returns:
            A `Delivery` when the handler must be considered, otherwise
            the value `process_msg` must return.
        """
        with self._lock:
            if self._closed:
                self._stats.observe_message_dropped(msg)
                return False
            handler = self._handler
            if handler is None:
                # Nobody is listening, the message is discarded
                self._stats.observe_message_dropped(msg)
                return True
            if self._conn is None or self._conn_closed:
                self._stats.observe_message_dropped(msg)
                return False
            slow_consumer = self._slow_consumer
            self._slow_consumer = False
            delivery = Delivery(handler, self._tally_delivered(msg), self._max)
        if slow_consumer:
            logger.warning(
                "subscription %s on %s was a slow consumer, messages were dropped",
                self._sid,
                self._subject,
            )
        return delivery

    def _complete_at_max(self) -> None:
        """Unsubscribe once the last allowed message has been delivered."""
        logger.debug("subscription %s reached its maximum of messages", self._sid)
        self.unsubscribe()
        with self._lock:
            self._conn = None

    def process_msg(self, msg: Msg) -> bool:
        """Dispatch a message to the registered handler.

        The handler runs outside of the lock. Its exceptions are logged and
        discarded so that the next messages are still delivered. When the
        delivered count reaches the maximum, the subscription unsubscribes
        itself right after the handler returns.

        Subscriptions without handler discard the message.

        Returns:
            False when the subscription is closed or detached from its
            connection.
        """
        delivery = self._begin_delivery(msg)
        if not isinstance(delivery, Delivery):
            return delivery
        if delivery.should_deliver():
            try:
                delivery.handler(msg)
            except Exception as exc:
                logger.error(
                    "Unhandled exception caught in subscription callback", exc_info=exc
                )
            if delivery.is_last():
                self._complete_at_max()
        return True

    # Pull helpers

    def _check_next(self) -> tuple[Connection | None, AnyChannel, int]:
        """Validate that a message can be pulled.

        Returns:
            The connection, channel and maximum to use for the pull.
        """
        with self._lock:
            if self._conn_closed:
                raise ConnectionClosedError()
            if self._max > 0 and self._stats.delivered >= self._max:
                raise MaxMessagesReachedError()
            if self._closed:
                raise BadSubscriptionError(f"subscription {self._sid} is closed")
            if self._slow_consumer:
                self._slow_consumer = False
                raise SubscriptionSlowConsumerError(self)
            return self._conn, self._channel, self._max

    def _tally_pulled(self, msg: Msg, conn: Connection | None, max_msgs: int) -> Msg:
        with self._lock:
            delivered = self._tally_delivered(msg)
        if max_msgs > 0 and delivered == max_msgs:
            self._remove_at_max(conn)
        if max_msgs > 0 and delivered > max_msgs:
            raise MaxMessagesReachedError()
        return msg

    def _remove_at_max(self, conn: Connection | None) -> None:
        with self._lock:
            self._closed = True
            self._draining = False
            channel = self._channel
        channel.close()
        if conn is None:
            return
        try:
            conn.remove_subscription(self)
        except Exception:
            logger.warning(
                "failed to remove subscription %s from connection",
                self._sid,
                exc_info=True,
            )

    def _finish_drain(self) -> None:
        with self._lock:
            if self._draining:
                self._closed = True
                self._draining = False

    def _channel_closed_error(self) -> NatsError:
        """Return the error explaining why the channel was found closed."""
        self._finish_drain()
        with self._lock:
            if self._conn_closed:
                return ConnectionClosedError()
            if self._max > 0 and self._stats.received >= self._max:
                return MaxMessagesReachedError()
        return SubscriptionClosedError(f"subscription {self._sid} is closed")

    # Lifecycle

    def _check_valid(self) -> Connection:
        """Return the connection of an open subscription. Caller must hold the lock."""
        conn = self._conn
        if conn is None or self._closed:
            raise BadSubscriptionError(f"subscription {self._sid} is closed")
        return conn

    def _send_subscription(self) -> bool:
        """Send the SUB frame unless the subscription was already started.

        Returns:
            True when the frame was sent by this call.

        Raises:
            BadSubscriptionError: if the subscription is closed or detached.
        """
        with self._lock:
            if self._started:
                return False
            conn = self._check_valid()
            self._started = True
        try:
            conn.send_subscription_message(self)
        except BaseException:
            with self._lock:
                self._started = False
            raise
        return True

    def unsubscribe(self) -> None:
        """Remove interest in the subject and discard pending messages.

        Calling it on a closed subscription does nothing.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._draining = False
            conn = self._conn
            channel = self._channel
        channel.close()
        if conn is None:
            return
        conn.remove_subscription(self)
        if not conn.is_closed():
            conn.send_unsubscribe_message(self)

    def auto_unsubscribe(self, max_msgs: int) -> None:
        """Unsubscribe automatically once `max_msgs` messages have been delivered.

        The limit counts messages delivered since the subscription started.

        Raises:
            ValueError: if `max_msgs` is not positive.
            ConnectionClosedError: if the connection is closed.
            BadSubscriptionError: if the subscription is closed.
        """
        if max_msgs <= 0:
            raise ValueError("max_msgs must be greater than zero")
        with self._lock:
            conn = self._conn
            if conn is None:
                raise BadSubscriptionError(f"subscription {self._sid} is detached")
            if self._conn_closed:
                raise ConnectionClosedError()
            if self._closed:
                raise BadSubscriptionError(f"subscription {self._sid} is closed")
        if conn.is_closed():
            raise ConnectionClosedError()
        with self._lock:
            self._max = max_msgs
            reached = self._stats.delivered >= max_msgs
        if reached:
            self.unsubscribe()
            return
        conn.send_unsubscribe_message(self, max_msgs)

    def drain(self) -> None:
        """Remove interest in the subject, but keep pending messages deliverable.

        The subscription is closed once its consumer emptied the channel.

        Raises:
            BadSubscriptionError: if the subscription is closed.
        """
        with self._lock:
            conn = self._check_valid()
            if self._draining:
                return
            self._draining = True
            channel = self._channel
        channel.close(drain=True)
        conn.remove_subscription(self)
        if not conn.is_closed():
            conn.send_unsubscribe_message(self)

    def close(self) -> None:
        """Close the subscription because its connection is closed."""
        with self._lock:
            self._closed = True
            self._conn_closed = True
            self._draining = False
            channel = self._channel
        channel.close()
