from __future__ import annotations

from dataclasses import dataclass

# Default Pending Limits of Subscriptions
DEFAULT_SUB_PENDING_MSGS_LIMIT = 512 * 1024
DEFAULT_SUB_PENDING_BYTES_LIMIT = 128 * 1024 * 1024


def check_pending_limits(pending_msgs_limit: int, pending_bytes_limit: int) -> None:
    if pending_msgs_limit == 0:
        raise ValueError("the pending message limit must not be zero")
    if pending_bytes_limit == 0:
        raise ValueError("the pending bytes limit must not be zero")


@dataclass
class SubscriptionOptions:
    """Subscription options.

    Args:
        `pending_msgs_limit`: the maximum number of messages waiting in the
            subscription channel. Beyond it, messages are dropped and the
            subscription is flagged as a slow consumer. A negative value
            disables the limit.
        `pending_bytes_limit`: the maximum number of payload bytes waiting in
            the subscription channel. A negative value disables the limit.
        `max_msgs`: the number of messages after which the subscription
            unsubscribes automatically. A value lower or equal to zero
            means unbounded.
    """

    pending_msgs_limit: int = DEFAULT_SUB_PENDING_MSGS_LIMIT
    pending_bytes_limit: int = DEFAULT_SUB_PENDING_BYTES_LIMIT
    max_msgs: int = 0

    def __post_init__(self) -> None:
        check_pending_limits(self.pending_msgs_limit, self.pending_bytes_limit)
