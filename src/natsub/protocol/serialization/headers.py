from __future__ import annotations

import string
from email.parser import BytesParser

from ..constant import (
    CRLF,
    CRLF_SIZE,
    NATS_DESCRIPTION_HDR,
    NATS_HDR_LINE,
    NATS_HDR_LINE_SIZE,
    NATS_STATUS_HDR,
    SPC,
)
from ..errors import InvalidHeaderError

BYTES_PARSER = BytesParser()


def encode_headers(
    headers: dict[str, str] | None,
    status: int | None = None,
    description: str | None = None,
) -> bytes:
    hdr = bytearray()
    hdr.extend(NATS_HDR_LINE)
    if status is not None:
        hdr.extend(f" {status}".encode())
        if description:
            hdr.extend(f" {description}".encode())
    hdr.extend(CRLF)
    if not headers:
        hdr.extend(CRLF)
        return bytes(hdr)
    for k, v in headers.items():
        key = k.strip()
        if not key:
            # Skip empty keys
            continue
        hdr.extend(key.encode())
        hdr.extend(b": ")
        value = v.strip()
        hdr.extend(value.encode())
        hdr.extend(CRLF)
    hdr.extend(CRLF)
    return bytes(hdr)


def parse_headers(headers: bytes | None) -> dict[str, str]:
    """Parse a header block into a dict.

    An inline status sent by the server is stored under the `Status`
    key, and its description (if any) under the `Description` key:

        NATS/1.0 503\\r\\n\\r\\n
        NATS/1.0 100 Idle Heartbeat\\r\\nNats-Last-Consumer: 1016\\r\\n\\r\\n

    The status code is kept as received; use `parse_status` to
    validate it.

    Raises:
        InvalidHeaderError: when the block does not start with the
            `NATS/1.0` header line.
    """
    if not headers:
        return {}
    if not headers.startswith(NATS_HDR_LINE):
        raise InvalidHeaderError(f"invalid header line: {headers[:16]!r}")

    end_of_line = headers.find(CRLF)
    if end_of_line < 0:
        raise InvalidHeaderError("header line is not terminated")

    hdr: dict[str, str] = {}
    status_line = headers[NATS_HDR_LINE_SIZE:end_of_line]

    # If the first character is an empty space, then this is
    # an inline status message sent by the server.
    if status_line and status_line[0] == SPC:
        code, _, desc = status_line.decode().strip().partition(" ")
        if code:
            hdr[NATS_STATUS_HDR] = code
        desc = desc.strip()
        if desc:
            hdr[NATS_DESCRIPTION_HDR] = desc

    raw_headers = headers[end_of_line + CRLF_SIZE :]
    if not len(raw_headers) > CRLF_SIZE:
        return hdr

    #
    # Example header without status:
    #
    # NATS/1.0\r\nfoo: bar\r\nhello: world
    #
    for k, v in BYTES_PARSER.parsebytes(raw_headers).items():
        key = k.strip()
        if not key or any(c in key for c in string.whitespace):
            continue
        hdr[key] = v.strip()
    return hdr
