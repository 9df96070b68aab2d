from __future__ import annotations


class ProtocolError(Exception):
    """Base class for protocol errors."""

    pass


# Parser errors


class ProtocolParserError(ProtocolError):
    """Raised when a protocol parser error occurs."""

    pass


class InvalidHeaderError(ProtocolParserError):
    """Raised when a header block or a status line cannot be parsed."""

    pass
