from __future__ import annotations

# Protocol syntax
CRLF = b"\r\n"
SPC = 32

# Sizes
CRLF_SIZE = len(CRLF)

# JetStream ack subjects
JS_ACK_SUBJECT_PREFIX = "$JS.ACK."

# $JS.ACK.<stream>.<consumer>.<delivered>.<sseq>.<cseq>.<tm>.<pending>
JS_ACK_V1_TOKEN_COUNT = 9

# $JS.ACK.<domain>.<account hash>.<stream>.<consumer>.<delivered>.<sseq>.
#   <cseq>.<tm>.<pending>.<token>
JS_ACK_V2_TOKEN_COUNT = 12

# Token indices, V1 subjects are shifted to this layout when parsed
JS_ACK_IDX_DOMAIN = 2
JS_ACK_IDX_STREAM = 4
JS_ACK_IDX_CONSUMER = 5
JS_ACK_IDX_NUM_DELIVERED = 6
JS_ACK_IDX_STREAM_SEQ = 7
JS_ACK_IDX_CON_SEQ = 8
JS_ACK_IDX_TIME = 9
JS_ACK_IDX_NUM_PENDING = 10

# Ack verbs
JS_ACK_OP_ACK = b"+ACK"
JS_ACK_OP_NAK = b"-NAK"
JS_ACK_OP_PROGRESS = b"+WPI"
JS_ACK_OP_TERM = b"+TERM"

# Headers
NATS_HDR_LINE = b"NATS/1.0"
NATS_HDR_LINE_SIZE = len(NATS_HDR_LINE)
NATS_STATUS_HDR = "Status"
NATS_DESCRIPTION_HDR = "Description"

# Status codes and descriptions
NATS_STATUS_CONTROL = 100
NATS_STATUS_NO_RESPONDERS = 503
NATS_FLOW_CONTROL_TEXT = "FlowControl Request"
NATS_HEARTBEAT_TEXT = "Idle Heartbeat"
NATS_NO_RESPONDERS_TEXT = "No Responders Available For Request"
