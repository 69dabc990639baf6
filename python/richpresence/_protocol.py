"""IPC protocol constants for the presence host's local RPC channel."""

import struct

# ─── Wire format ──────────────────────────────────────────────────────────────

# Header struct: op_code(u32) + payload_len(u32), both little-endian
HEADER_FMT = "<II"
HEADER_SIZE = 8
assert struct.calcsize(HEADER_FMT) == HEADER_SIZE

MAX_PAYLOAD_SIZE = 16 * 1024 * 1024  # 16 MiB

RPC_VERSION = 1

# ─── Op codes ─────────────────────────────────────────────────────────────────

OP_HANDSHAKE = 0
OP_FRAME = 1      # command, command response, READY dispatch
OP_DISPATCH = 2   # unsolicited, never a command response

# ─── Commands / markers ───────────────────────────────────────────────────────

CMD_SET_ACTIVITY = "SET_ACTIVITY"
ERROR_MARKER = '"evt":"ERROR"'
EVT_ERROR = "ERROR"

# ─── Endpoint naming ──────────────────────────────────────────────────────────

IPC_NAME = "discord-ipc"
IPC_SLOTS = 10

# ─── Timing (seconds) ─────────────────────────────────────────────────────────

DEFAULT_RECONNECT_INTERVAL = 5.0
DEFAULT_POLL_INTERVAL = 0.1
IDLE_INTERVAL = 0.1
DEFAULT_IO_TIMEOUT = 5.0

# ─── Activity limits ──────────────────────────────────────────────────────────

MAX_BUTTONS = 2
MAX_BUTTON_LABEL = 32   # exclusive
MAX_BUTTON_URL = 512    # exclusive
