from __future__ import annotations

import datetime


class Sequence:
    __slots__ = ["stream", "consumer"]

    def __init__(self, stream: int, consumer: int) -> None:
        self.stream = stream
        self.consumer = consumer

    def __repr__(self) -> str:
        return f"Sequence(stream={self.stream}, consumer={self.consumer})"


class Metadata:
    """Delivery metadata of a JetStream message, found in its reply subject."""

    __slots__ = [
        "stream",
        "consumer",
        "sequence",
        "num_pending",
        "num_delivered",
        "timestamp",
        "domain",
    ]

    def __init__(
        self,
        stream: str,
        consumer: str,
        stream_sequence: int,
        consumer_sequence: int,
        num_pending: int,
        num_delivered: int,
        timestamp: datetime.datetime,
        domain: str | None,
    ) -> None:
        self.stream = stream
        self.consumer = consumer
        self.sequence = Sequence(stream_sequence, consumer_sequence)
        self.num_pending = num_pending
        self.num_delivered = num_delivered
        self.timestamp = timestamp
        self.domain = domain
