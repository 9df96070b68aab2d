from .core import (
    Channel,
    Connection,
    HandoffPool,
    Msg,
    SingleUseHandoff,
    SubscriptionRegistry,
    SubscriptionState,
    SubscriptionStatistics,
    handoff_pool,
)
from .io import AsyncSubscription, RequestReplyInbox, SyncSubscription
from .options import SubscriptionOptions
from .protocol import (
    AckType,
    Status,
    StatusType,
    classify_status,
    encode_ack,
    parse_status,
)

__all__ = [
    "AckType",
    "AsyncSubscription",
    "Channel",
    "Connection",
    "HandoffPool",
    "Msg",
    "RequestReplyInbox",
    "SingleUseHandoff",
    "Status",
    "StatusType",
    "SubscriptionOptions",
    "SubscriptionRegistry",
    "SubscriptionState",
    "SubscriptionStatistics",
    "SyncSubscription",
    "classify_status",
    "encode_ack",
    "handoff_pool",
    "parse_status",
]
