from __future__ import annotations

from enum import Enum

from ..constant import JS_ACK_OP_ACK, JS_ACK_OP_NAK, JS_ACK_OP_PROGRESS, JS_ACK_OP_TERM


class AckType(Enum):
    """Acknowledgment verbs understood by a JetStream consumer.

    Each verb carries its protocol token and whether it is terminal,
    i.e. whether it ends redelivery of the acknowledged message.
    """

    ACK = (JS_ACK_OP_ACK, True)
    NAK = (JS_ACK_OP_NAK, True)
    IN_PROGRESS = (JS_ACK_OP_PROGRESS, False)
    TERM = (JS_ACK_OP_TERM, True)

    def __init__(self, token: bytes, terminal: bool) -> None:
        self.token = token
        self.terminal = terminal
