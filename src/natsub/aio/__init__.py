from .channel import MemoryChannel
from .subscription import Subscription, SubscriptionIterator, SubscriptionWorker

__all__ = [
    "MemoryChannel",
    "Subscription",
    "SubscriptionIterator",
    "SubscriptionWorker",
]
