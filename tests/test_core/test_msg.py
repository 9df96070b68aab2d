import datetime

import pytest

from natsub.core.msg import Msg
from natsub.errors import (
    ConnectionClosedError,
    MsgAlreadyAckdError,
    NoReplySubjectError,
    NotJetStreamMsgError,
)
from natsub.protocol import InvalidHeaderError, Message, StatusType

JS_REPLY = "$JS.ACK.orders.worker.1.10.4.1700000000000000000.0"


class TestMsg:
    def test_from_protocol(self):
        proto = Message(
            subject="foo",
            sid=3,
            reply="bar",
            data=b"hello",
            data_length=5,
            hdr={"a": "b"},
        )
        msg = Msg.from_protocol(proto)
        assert msg.subject() == "foo"
        assert msg.sid() == 3
        assert msg.reply() == "bar"
        assert msg.data() == b"hello"
        assert msg.size() == 5
        assert msg.headers() == {"a": "b"}

    def test_no_status(self):
        msg = Msg("foo", b"hello")
        assert msg.status() is None
        assert msg.is_control() is False

    def test_control_message(self):
        msg = Msg("foo", headers={"Status": "100", "Description": "Idle Heartbeat"})
        status = msg.status()
        assert status is not None
        assert status.type() == StatusType.HEARTBEAT
        assert msg.is_control() is True

    def test_opaque_status_is_not_control(self):
        msg = Msg("foo", headers={"Status": "404", "Description": "No Messages"})
        assert msg.is_control() is False

    def test_invalid_status(self):
        msg = Msg("foo", headers={"Status": "abc"})
        with pytest.raises(InvalidHeaderError):
            msg.status()


class TestMsgReply:
    def test_respond(self, conn):
        msg = Msg("foo", b"ping", reply="_INBOX.1", conn=conn)
        msg.respond(b"pong")
        assert conn.published == [("_INBOX.1", b"pong", "", None)]

    def test_respond_without_reply(self, conn):
        msg = Msg("foo", b"ping", conn=conn)
        with pytest.raises(NoReplySubjectError):
            msg.respond(b"pong")

    def test_respond_without_connection(self):
        msg = Msg("foo", b"ping", reply="_INBOX.1")
        with pytest.raises(ConnectionClosedError):
            msg.respond(b"pong")


class TestMsgAck:
    def test_metadata(self, conn):
        msg = Msg("foo", reply=JS_REPLY, conn=conn)
        assert msg.is_jetstream() is True
        metadata = msg.metadata()
        assert metadata.stream == "orders"
        assert metadata.consumer == "worker"
        assert metadata.sequence.stream == 10
        assert metadata.timestamp.tzinfo == datetime.timezone.utc

    def test_metadata_of_core_message(self):
        msg = Msg("foo", reply="_INBOX.1")
        assert msg.is_jetstream() is False
        with pytest.raises(NotJetStreamMsgError):
            msg.metadata()

    def test_ack(self, conn):
        msg = Msg("foo", reply=JS_REPLY, conn=conn)
        msg.ack()
        assert msg.is_acked() is True
        assert conn.published == [(JS_REPLY, b"+ACK", "", None)]

    def test_ack_twice(self, conn):
        msg = Msg("foo", reply=JS_REPLY, conn=conn)
        msg.term()
        with pytest.raises(MsgAlreadyAckdError):
            msg.ack()
        assert len(conn.published) == 1

    def test_in_progress_is_not_terminal(self, conn):
        msg = Msg("foo", reply=JS_REPLY, conn=conn)
        msg.in_progress()
        msg.in_progress()
        assert msg.is_acked() is False
        msg.ack()
        assert [payload for _, payload, _, _ in conn.published] == [
            b"+WPI",
            b"+WPI",
            b"+ACK",
        ]

    def test_nak_with_delay(self, conn):
        msg = Msg("foo", reply=JS_REPLY, conn=conn)
        msg.nak(delay=2)
        assert conn.published[0][1] == b'-NAK {"delay": 2000000000}'

    def test_ack_core_message(self, conn):
        msg = Msg("foo", reply="_INBOX.1", conn=conn)
        with pytest.raises(NotJetStreamMsgError):
            msg.ack()
        assert conn.published == []

    def test_ack_without_connection(self):
        msg = Msg("foo", reply=JS_REPLY)
        with pytest.raises(ConnectionClosedError):
            msg.ack()
