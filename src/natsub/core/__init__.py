from .channel import Channel
from .connection import Connection
from .handoff import HandoffPool, SingleUseHandoff, handoff_pool
from .msg import Msg
from .subscription import Subscription, SubscriptionState, SubscriptionStatistics
from .subscription_registry import SubscriptionRegistry

__all__ = [
    "Channel",
    "Connection",
    "HandoffPool",
    "Msg",
    "SingleUseHandoff",
    "Subscription",
    "SubscriptionRegistry",
    "SubscriptionState",
    "SubscriptionStatistics",
    "handoff_pool",
]
