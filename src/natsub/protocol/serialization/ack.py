from __future__ import annotations

import json

from ..payload import AckType


def encode_ack(ack_type: AckType, delay: int = 0) -> bytes:
    """Encode the payload of an acknowledgment.

    Args:
        ack_type: The acknowledgment verb.
        delay: Redelivery delay in nanoseconds. Ignored when lower or equal to 0.

    Returns:
        The verb token, followed by a JSON delay directive when a delay is given.
    """
    if delay <= 0:
        return ack_type.token
    return ack_type.token + b" " + json.dumps({"delay": delay}).encode("ascii")
