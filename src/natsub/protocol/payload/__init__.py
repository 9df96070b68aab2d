from .ack import AckType
from .message import Message
from .metadata import Metadata, Sequence
from .status import Status, StatusType, default_status_message

__all__ = [
    "AckType",
    "Message",
    "Metadata",
    "Sequence",
    "Status",
    "StatusType",
    "default_status_message",
]
