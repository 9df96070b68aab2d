from __future__ import annotations

from typing import Callable

import pytest

from natsub.core.connection import Connection
from natsub.core.msg import Msg
from natsub.core.subscription import Subscription
from natsub.core.subscription_registry import SubscriptionRegistry


def subject_matches(pattern: str, subject: str) -> bool:
    """Match a subject against a pattern using `*` and `>` wildcards."""
    tokens = pattern.split(".")
    candidate = subject.split(".")
    for idx, token in enumerate(tokens):
        if token == ">":
            return len(candidate) > idx
        if idx >= len(candidate):
            return False
        if token != "*" and token != candidate[idx]:
            return False
    return len(tokens) == len(candidate)


class RecordingConnection(Connection):
    """An in-memory connection recording the frames sent by subscriptions.

    Published messages are routed back to matching subscriptions when
    `echo` is True, and a `responder` can answer requests.
    """

    def __init__(self) -> None:
        self.registry = SubscriptionRegistry()
        self.closed = False
        self.echo = False
        self.responder: Callable[[Msg], tuple[bytes, dict[str, str] | None]] | None = None
        self.published: list[tuple[str, bytes, str, dict[str, str] | None]] = []
        self.subscribed: list[int] = []
        self.unsubscribed: list[tuple[int, int]] = []
        self.removed: list[int] = []

    def is_closed(self) -> bool:
        return self.closed

    def publish(
        self,
        subject: str,
        payload: bytes = b"",
        reply: str = "",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.published.append((subject, payload, reply, headers))
        if self.echo:
            self.route(subject, payload, reply=reply, headers=headers)
        if self.responder and reply:
            data, hdr = self.responder(Msg(subject, payload, reply, headers))
            self.route(reply, data, headers=hdr)

    def send_subscription_message(self, sub: Subscription) -> None:
        self.subscribed.append(sub.sid())

    def send_unsubscribe_message(self, sub: Subscription, max_msgs: int = 0) -> None:
        self.unsubscribed.append((sub.sid(), max_msgs))

    def remove_subscription(self, sub: Subscription) -> None:
        self.removed.append(sub.sid())
        self.registry.remove(sub.sid())

    def route(
        self,
        subject: str,
        data: bytes = b"",
        reply: str = "",
        headers: dict[str, str] | None = None,
    ) -> int:
        """Deliver a message to every subscription matching the subject."""
        delivered = 0
        for sub in self.registry.subscriptions():
            if not subject_matches(sub.subject(), subject):
                continue
            msg = Msg(subject, data, reply, headers, sid=sub.sid(), conn=self)
            if self.registry.observe(msg):
                delivered += 1
        return delivered

    def deliver(self, sub: Subscription, data: bytes = b"", **kwargs) -> bool:
        """Deliver a message to a single subscription."""
        msg = Msg(sub.subject(), data, sid=sub.sid(), conn=self, **kwargs)
        return self.registry.observe(msg)

    def close(self) -> None:
        self.closed = True
        self.registry.close_all()


@pytest.fixture
def conn() -> RecordingConnection:
    return RecordingConnection()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
