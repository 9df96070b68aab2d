import datetime

from natsub.protocol import parse_metadata, parse_sequence


class TestParseMetadata:
    def test_not_jetstream(self):
        assert parse_metadata("_INBOX.abc") is None
        assert parse_sequence("foo.bar") is None

    def test_v1(self):
        metadata = parse_metadata("$JS.ACK.orders.worker.2.10.4.1700000000000000000.7")
        assert metadata is not None
        assert metadata.stream == "orders"
        assert metadata.consumer == "worker"
        assert metadata.num_delivered == 2
        assert metadata.sequence.stream == 10
        assert metadata.sequence.consumer == 4
        assert metadata.num_pending == 7
        assert metadata.domain is None
        assert metadata.timestamp == datetime.datetime.fromtimestamp(
            1700000000, tz=datetime.timezone.utc
        )

    def test_v2_without_domain(self):
        metadata = parse_metadata(
            "$JS.ACK._.hash.orders.worker.1.11.5.1700000000000000000.0.token"
        )
        assert metadata is not None
        assert metadata.domain == ""
        assert metadata.stream == "orders"
        assert metadata.sequence.stream == 11
        assert metadata.sequence.consumer == 5

    def test_v2_with_domain(self):
        metadata = parse_metadata(
            "$JS.ACK.hub.hash.orders.worker.1.11.5.1700000000000000000.0.token"
        )
        assert metadata is not None
        assert metadata.domain == "hub"

    def test_sequence(self):
        sequence = parse_sequence("$JS.ACK.orders.worker.2.10.4.1700000000000000000.7")
        assert sequence is not None
        assert (sequence.stream, sequence.consumer) == (10, 4)
