from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .core.subscription import Subscription


class NatsError(Exception):
    """Base class for all exceptions raised by this library."""

    pass


class NatsTimeoutError(NatsError, TimeoutError):
    """Error raised when no value arrived within the requested window."""

    def __init__(self, msg: str = "timeout") -> None:
        super().__init__(msg)


# Channel errors


class ChannelClosedError(NatsError):
    """Error raised when pushing to or pulling from a closed channel."""

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        super().__init__(f"channel {name} is closed" if name else "channel is closed")


# Connection errors


class ConnectionError(NatsError):
    """Base class for all exceptions raised by the connection."""

    pass


class ConnectionClosedError(ConnectionError):
    """Error raised when the connection is closed."""

    pass


# Client errors


class NatsClientError(NatsError):
    """Base class for all exceptions raised by the client."""

    pass


class BadCallbackTypeError(NatsClientError):
    """Error raised when the callback type is invalid."""

    pass


class BadSubscriptionError(NatsClientError):
    """Error raised when using a closed or detached subscription."""

    pass


class SubscriptionClosedError(BadSubscriptionError):
    """Error raised when the subscription channel is closed."""

    pass


class MaxMessagesReachedError(NatsClientError):
    """Error raised when the subscription delivered its maximum number of messages."""

    pass


class SubscriptionSlowConsumerError(NatsClientError):
    """Error raised when the subscription is a slow consumer."""

    def __init__(self, sub: Subscription) -> None:
        self.sub = sub
        super().__init__(f"subscription {sub.sid()} is a slow consumer")


class NoRespondersError(NatsClientError):
    """Error raised when no responders were available for a request."""

    pass


class MsgAlreadyAckdError(NatsClientError):
    pass


class NotJetStreamMsgError(NatsClientError):
    pass


class NoReplySubjectError(NatsClientError):
    pass
