from natsub.protocol import AckType, encode_ack


class TestAckType:
    def test_tokens(self):
        assert AckType.ACK.token == b"+ACK"
        assert AckType.NAK.token == b"-NAK"
        assert AckType.IN_PROGRESS.token == b"+WPI"
        assert AckType.TERM.token == b"+TERM"

    def test_terminal(self):
        assert AckType.ACK.terminal is True
        assert AckType.NAK.terminal is True
        assert AckType.TERM.terminal is True
        assert AckType.IN_PROGRESS.terminal is False


class TestEncodeAck:
    def test_without_delay(self):
        assert encode_ack(AckType.ACK) == b"+ACK"
        assert encode_ack(AckType.ACK, 0) == b"+ACK"

    def test_negative_delay_is_ignored(self):
        assert encode_ack(AckType.NAK, -1) == b"-NAK"

    def test_with_delay(self):
        assert encode_ack(AckType.TERM, 5000000) == b'+TERM {"delay": 5000000}'
        assert encode_ack(AckType.NAK, 1) == b'-NAK {"delay": 1}'
