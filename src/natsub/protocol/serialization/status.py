from __future__ import annotations

from ..constant import NATS_DESCRIPTION_HDR, NATS_STATUS_HDR
from ..errors import InvalidHeaderError
from ..payload import Status, StatusType


def parse_status(code: int | str | bytes, message: str | None = None) -> Status:
    """Build a status from the code token and optional description of a control frame.

    Args:
        code: The status code token.
        message: The description. When absent, a default description is used.

    Raises:
        InvalidHeaderError: if the code token is not an integer.

    Returns:
        The parsed status.
    """
    if isinstance(code, int):
        return Status(code, message)
    if isinstance(code, bytes):
        code = code.decode(errors="replace")
    try:
        value = int(code.strip())
    except ValueError:
        raise InvalidHeaderError(f"invalid status code: {code!r}") from None
    return Status(value, message)


def classify_status(code: int | str | bytes, message: str | None = None) -> StatusType:
    """Classify a status as flow control, heartbeat, no responders or opaque."""
    return parse_status(code, message).type()


def status_from_headers(hdr: dict[str, str] | None) -> Status | None:
    """Extract the inline status from parsed headers.

    Returns:
        The status, or None when the headers do not hold one.
    """
    if not hdr:
        return None
    code = hdr.get(NATS_STATUS_HDR)
    if code is None:
        return None
    return parse_status(code, hdr.get(NATS_DESCRIPTION_HDR))
