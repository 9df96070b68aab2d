from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import (
    ConnectionClosedError,
    MsgAlreadyAckdError,
    NoReplySubjectError,
    NotJetStreamMsgError,
)
from ..protocol.constant import JS_ACK_SUBJECT_PREFIX
from ..protocol.payload import AckType, Message, Metadata, Status, StatusType
from ..protocol.serialization import encode_ack, parse_metadata, status_from_headers

if TYPE_CHECKING:
    from .connection import Connection


class Msg:
    """
    Msg represents a message delivered by NATS.
    """

    __slots__ = [
        "_conn",
        "_subject",
        "_reply",
        "_data",
        "_headers",
        "_sid",
        "_last_ack",
    ]

    def __init__(
        self,
        subject: str,
        data: bytes = b"",
        reply: str = "",
        headers: dict[str, str] | None = None,
        sid: int = 0,
        conn: Connection | None = None,
    ) -> None:
        self._conn = conn
        self._subject = subject
        self._reply = reply
        self._data = data
        self._headers = headers or {}
        self._sid = sid
        self._last_ack: AckType | None = None

    @classmethod
    def from_protocol(cls, proto: Message, conn: Connection | None = None) -> Msg:
        return cls(
            subject=proto.subject,
            data=proto.data,
            reply=proto.reply,
            headers=proto.hdr,
            sid=proto.sid,
            conn=conn,
        )

    def __repr__(self) -> str:
        return (
            f"Msg(sid={self._sid}, subject={self._subject}, "
            f"reply={self._reply}, size={self.size()}, "
            f"headers={self._headers})"
        )

    def sid(self) -> int:
        return self._sid

    def subject(self) -> str:
        return self._subject

    def reply(self) -> str:
        return self._reply

    def data(self) -> bytes:
        return self._data

    def size(self) -> int:
        return len(self._data)

    def headers(self) -> dict[str, str]:
        return self._headers

    def status(self) -> Status | None:
        """Returns the inline status of the message, if any.

        Raises:
            InvalidHeaderError: if the status code is not an integer.
        """
        return status_from_headers(self._headers)

    def is_control(self) -> bool:
        """Returns True for flow control, heartbeat and no responders messages.

        Control messages are protocol signals rather than application payloads.
        """
        status = self.status()
        return status is not None and status.type() != StatusType.OPAQUE

    def is_jetstream(self) -> bool:
        return self._reply.startswith(JS_ACK_SUBJECT_PREFIX)

    def metadata(self) -> Metadata:
        """Returns the JetStream metadata found in the reply subject."""
        metadata = parse_metadata(self._reply) if self.is_jetstream() else None
        if metadata is None:
            raise NotJetStreamMsgError()
        return metadata

    def ack(self) -> None:
        """Acknowledge the message."""
        self._ack_reply(AckType.ACK)

    def nak(self, delay: float | None = None) -> None:
        """Ask for redelivery, optionally after `delay` seconds."""
        self._ack_reply(AckType.NAK, int(delay * 1_000_000_000) if delay else 0)

    def in_progress(self) -> None:
        """Reset the redelivery timer of the message."""
        self._ack_reply(AckType.IN_PROGRESS)

    def term(self) -> None:
        """Stop redelivery of the message."""
        self._ack_reply(AckType.TERM)

    def is_acked(self) -> bool:
        return self._last_ack is not None and self._last_ack.terminal

    def _ack_reply(self, ack_type: AckType, delay: int = 0) -> None:
        if not self.is_jetstream():
            raise NotJetStreamMsgError()
        if self.is_acked():
            raise MsgAlreadyAckdError(f"message already acknowledged: {self._last_ack}")
        if self._conn is None:
            raise ConnectionClosedError()
        self._conn.publish(self._reply, encode_ack(ack_type, delay))
        self._last_ack = ack_type

    def respond(
        self,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        respond replies to the inbox of the message if there is one.
        """
        if not self._reply:
            raise NoReplySubjectError()
        if self._conn is None:
            raise ConnectionClosedError()
        self._conn.publish(self._reply, data or b"", headers=headers)
