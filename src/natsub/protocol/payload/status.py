from __future__ import annotations

from enum import Enum

from ..constant import (
    NATS_FLOW_CONTROL_TEXT,
    NATS_HEARTBEAT_TEXT,
    NATS_NO_RESPONDERS_TEXT,
    NATS_STATUS_CONTROL,
    NATS_STATUS_NO_RESPONDERS,
)


class StatusType(str, Enum):
    """Classification of a status message."""

    FLOW_CONTROL = "FLOW_CONTROL"
    """The server asks the consumer to acknowledge a flow control request."""

    HEARTBEAT = "HEARTBEAT"
    """An idle heartbeat sent by the server."""

    NO_RESPONDERS = "NO_RESPONDERS"
    """A request was published while nobody was subscribed."""

    OPAQUE = "OPAQUE"
    """Any other status, visible to the application."""


def default_status_message(code: int) -> str:
    if code == NATS_STATUS_NO_RESPONDERS:
        return NATS_NO_RESPONDERS_TEXT
    return f"Server Status Message: {code}"


class Status:
    """A status code and its description.

    Code 100 is shared by flow control requests and idle heartbeats,
    so classification always compares both the code and the message.
    """

    __slots__ = ["code", "message"]

    def __init__(self, code: int, message: str | None = None) -> None:
        self.code = code
        self.message = message if message is not None else default_status_message(code)

    def __repr__(self) -> str:
        return f"Status(code={self.code}, message={self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Status):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code, self.message))

    def _is(self, code: int, text: str) -> bool:
        return self.code == code and self.message == text

    def is_flow_control(self) -> bool:
        return self._is(NATS_STATUS_CONTROL, NATS_FLOW_CONTROL_TEXT)

    def is_heartbeat(self) -> bool:
        return self._is(NATS_STATUS_CONTROL, NATS_HEARTBEAT_TEXT)

    def is_no_responders(self) -> bool:
        return self._is(NATS_STATUS_NO_RESPONDERS, NATS_NO_RESPONDERS_TEXT)

    def type(self) -> StatusType:
        if self.is_flow_control():
            return StatusType.FLOW_CONTROL
        if self.is_heartbeat():
            return StatusType.HEARTBEAT
        if self.is_no_responders():
            return StatusType.NO_RESPONDERS
        return StatusType.OPAQUE
