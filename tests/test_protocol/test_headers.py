import pytest

from natsub.protocol import InvalidHeaderError, encode_headers, parse_headers


class TestParseHeaders:
    def test_empty(self):
        assert parse_headers(None) == {}
        assert parse_headers(b"") == {}

    def test_headers_without_status(self):
        hdr = parse_headers(b"NATS/1.0\r\nfoo: bar\r\nhello: world\r\n\r\n")
        assert hdr == {"foo": "bar", "hello": "world"}

    def test_inline_status(self):
        assert parse_headers(b"NATS/1.0 503\r\n\r\n") == {"Status": "503"}

    def test_inline_status_with_description(self):
        hdr = parse_headers(b"NATS/1.0 100 FlowControl Request\r\n\r\n")
        assert hdr == {"Status": "100", "Description": "FlowControl Request"}

    def test_inline_status_with_headers(self):
        hdr = parse_headers(
            b"NATS/1.0 100 Idle Heartbeat\r\n"
            b"Nats-Last-Consumer: 1016\r\n"
            b"Nats-Last-Stream: 1024\r\n\r\n"
        )
        assert hdr == {
            "Status": "100",
            "Description": "Idle Heartbeat",
            "Nats-Last-Consumer": "1016",
            "Nats-Last-Stream": "1024",
        }

    def test_invalid_header_line(self):
        with pytest.raises(InvalidHeaderError):
            parse_headers(b"HTTP/1.1 200 OK\r\n\r\n")

    def test_unterminated_header_line(self):
        with pytest.raises(InvalidHeaderError):
            parse_headers(b"NATS/1.0 100")


class TestEncodeHeaders:
    def test_no_headers(self):
        assert encode_headers(None) == b"NATS/1.0\r\n\r\n"

    def test_headers(self):
        assert encode_headers({" foo ": " bar ", "": "skipped"}) == (
            b"NATS/1.0\r\nfoo: bar\r\n\r\n"
        )

    def test_status(self):
        raw = encode_headers(None, status=100, description="Idle Heartbeat")
        assert raw == b"NATS/1.0 100 Idle Heartbeat\r\n\r\n"
        assert parse_headers(raw) == {"Status": "100", "Description": "Idle Heartbeat"}
