from __future__ import annotations


class Message:
    """Message contains all data found in a MSG or a HMSG protocol message,
    once decoded by the connection layer."""

    __slots__ = [
        "subject",
        "sid",
        "reply",
        "data",
        "data_length",
        "hdr",
    ]

    def __init__(
        self,
        subject: str,
        sid: int,
        reply: str,
        data: bytes,
        data_length: int,
        hdr: dict[str, str],
    ) -> None:
        self.subject = subject
        self.sid = sid
        self.reply = reply
        self.data = data
        self.data_length = data_length
        self.hdr = hdr
