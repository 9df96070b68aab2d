from __future__ import annotations

import datetime

from ..constant import (
    JS_ACK_SUBJECT_PREFIX,
    JS_ACK_V1_TOKEN_COUNT,
    JS_ACK_IDX_CON_SEQ,
    JS_ACK_IDX_CONSUMER,
    JS_ACK_IDX_DOMAIN,
    JS_ACK_IDX_NUM_DELIVERED,
    JS_ACK_IDX_NUM_PENDING,
    JS_ACK_IDX_STREAM,
    JS_ACK_IDX_STREAM_SEQ,
    JS_ACK_IDX_TIME,
    JS_ACK_V2_TOKEN_COUNT,
)
from ..payload import Metadata, Sequence


def extract_metadata_fields(reply: str) -> tuple[list[str], str | None] | None:
    """Split a JetStream ack subject into tokens laid out as a V2 subject.

    V1 subjects carry neither a domain nor an account hash. Both are
    inserted as empty tokens so that a single set of indices applies.

    Returns:
        The tokens and the domain, or None when `reply` is not an ack subject.
        The domain is None for V1 subjects, and an empty string when a V2
        subject does not set one.
    """
    if not reply.startswith(JS_ACK_SUBJECT_PREFIX):
        return None
    tokens = reply.split(".")
    if len(tokens) == JS_ACK_V1_TOKEN_COUNT:
        return tokens[:2] + ["", ""] + tokens[2:], None
    # The random token ending V2 subjects is optional
    if len(tokens) < JS_ACK_V2_TOKEN_COUNT - 1:
        return None
    domain = tokens[JS_ACK_IDX_DOMAIN]
    return tokens, "" if domain == "_" else domain


def parse_sequence(reply: str) -> Sequence | None:
    fields = extract_metadata_fields(reply)
    if fields is None:
        return None
    tokens, _ = fields
    return Sequence(
        stream=int(tokens[JS_ACK_IDX_STREAM_SEQ]),
        consumer=int(tokens[JS_ACK_IDX_CON_SEQ]),
    )


def parse_metadata(reply: str) -> Metadata | None:
    """Construct the metadata from the reply string"""
    fields = extract_metadata_fields(reply)
    if fields is None:
        return None
    tokens, domain = fields
    timestamp = datetime.datetime.fromtimestamp(
        int(tokens[JS_ACK_IDX_TIME]) / 1_000_000_000.0,
        tz=datetime.timezone.utc,
    )
    return Metadata(
        stream=tokens[JS_ACK_IDX_STREAM],
        consumer=tokens[JS_ACK_IDX_CONSUMER],
        stream_sequence=int(tokens[JS_ACK_IDX_STREAM_SEQ]),
        consumer_sequence=int(tokens[JS_ACK_IDX_CON_SEQ]),
        num_pending=int(tokens[JS_ACK_IDX_NUM_PENDING]),
        num_delivered=int(tokens[JS_ACK_IDX_NUM_DELIVERED]),
        timestamp=timestamp,
        domain=domain,
    )
