from .request import RequestReplyInbox
from .subscription import AsyncSubscription, SyncSubscription

__all__ = [
    "AsyncSubscription",
    "RequestReplyInbox",
    "SyncSubscription",
]
