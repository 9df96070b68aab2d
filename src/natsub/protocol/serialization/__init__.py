from .ack import encode_ack
from .headers import encode_headers, parse_headers
from .metadata import parse_metadata, parse_sequence
from .status import classify_status, parse_status, status_from_headers

__all__ = [
    "classify_status",
    "encode_ack",
    "encode_headers",
    "parse_headers",
    "parse_metadata",
    "parse_sequence",
    "parse_status",
    "status_from_headers",
]
