from .errors import InvalidHeaderError, ProtocolError
from .payload import (
    AckType,
    Message,
    Metadata,
    Sequence,
    Status,
    StatusType,
)
from .serialization import (
    classify_status,
    encode_ack,
    encode_headers,
    parse_headers,
    parse_metadata,
    parse_sequence,
    parse_status,
    status_from_headers,
)

__all__ = [
    "AckType",
    "InvalidHeaderError",
    "Message",
    "Metadata",
    "ProtocolError",
    "Sequence",
    "Status",
    "StatusType",
    "classify_status",
    "encode_ack",
    "encode_headers",
    "parse_headers",
    "parse_metadata",
    "parse_sequence",
    "parse_status",
    "status_from_headers",
]
