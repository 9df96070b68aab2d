from __future__ import annotations

import pytest

from natsub.core.handoff import handoff_pool
from natsub.core.msg import Msg
from natsub.core.subscription import SubscriptionState
from natsub.errors import NatsTimeoutError, NoRespondersError
from natsub.io import AsyncSubscription, RequestReplyInbox


class TestRequestReplyInbox:
    @pytest.fixture(autouse=True)
    def setup(self, conn):
        self.conn = conn
        self.inbox = RequestReplyInbox(conn, conn.registry)
        yield
        self.inbox.close()

    def test_request(self):
        self.conn.responder = lambda msg: (msg.data().upper(), None)
        reply = self.inbox.request("svc", b"ping", timeout=5)
        assert reply.data() == b"PING"
        subject, payload, reply_to, _ = self.conn.published[0]
        assert (subject, payload) == ("svc", b"ping")
        assert reply_to.startswith("_INBOX.")
        assert reply.subject() == reply_to

    def test_single_inbox_subscription(self):
        self.conn.responder = lambda msg: (b"pong", None)
        self.inbox.request("svc", timeout=5)
        self.inbox.request("svc", timeout=5)
        sub = self.inbox.subscription()
        assert self.conn.subscribed == [sub.sid()]
        assert sub.subject().endswith(".*")
        assert len(handoff_pool(Msg)) >= 1

    def test_request_with_headers(self):
        self.conn.responder = lambda msg: (b"", {"echo": msg.headers()["foo"]})
        reply = self.inbox.request("svc", headers={"foo": "bar"}, timeout=5)
        assert reply.headers() == {"echo": "bar"}

    def test_no_responders(self):
        self.conn.responder = lambda msg: (b"", {"Status": "503"})
        with pytest.raises(NoRespondersError):
            self.inbox.request("svc", timeout=5)

    def test_timeout(self):
        with pytest.raises(NatsTimeoutError):
            self.inbox.request("svc", timeout=0.05)

    def test_request_to_subscription(self):
        self.conn.echo = True
        service = AsyncSubscription(
            self.conn,
            self.conn.registry.next_sid(),
            "svc",
            handler=lambda msg: msg.respond(b"pong"),
        )
        self.conn.registry.add(service)
        try:
            assert self.inbox.request("svc", b"ping", timeout=5).data() == b"pong"
        finally:
            service.unsubscribe()
            service.wait(5)

    def test_close(self):
        sub = self.inbox.subscription()
        self.inbox.close()
        assert sub.state() == SubscriptionState.CLOSED
        assert self.inbox.subscription() is not sub
