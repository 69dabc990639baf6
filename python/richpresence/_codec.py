"""Frame codec and JSON payload builders.

Wire format per frame: [op_code: u32 LE] [len: u32 LE] [payload: len bytes]
The payload is UTF-8 JSON text.
"""

import json
import struct
from typing import TYPE_CHECKING, Any, Optional, Tuple, Union

from . import _protocol as P
from ._errors import ProtocolError, ReadFailedError
from ._message import IpcMessage

if TYPE_CHECKING:
    from ._activity import Activity
    from ._transport import Transport


# ─── Frames ───────────────────────────────────────────────────────────────────

def encode_frame(op_code: int, payload: Union[str, bytes] = b"") -> bytes:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return struct.pack(P.HEADER_FMT, op_code, len(payload)) + payload


def decode_header(data: bytes) -> Tuple[int, int]:
    """Returns (op_code, payload_len)."""
    if len(data) < P.HEADER_SIZE:
        raise ReadFailedError(
            f"Short frame header: {len(data)} of {P.HEADER_SIZE} bytes"
        )
    return struct.unpack_from(P.HEADER_FMT, data, 0)


def read_frame(transport: "Transport", peek: bool = False) -> Optional[IpcMessage]:
    """Read one frame from the transport.

    With ``peek`` set, returns None instead of blocking when the transport
    has nothing buffered. Once a header has been consumed the payload is
    read in full; a short read anywhere raises ReadFailedError.
    """
    header = transport.read(P.HEADER_SIZE, peek=peek)
    if header is None:
        return None
    if len(header) != P.HEADER_SIZE:
        raise ReadFailedError(
            f"Short read: {len(header)} of {P.HEADER_SIZE} header bytes"
        )

    op_code, payload_len = decode_header(header)
    if payload_len > P.MAX_PAYLOAD_SIZE:
        raise ProtocolError(f"Payload too large: {payload_len}")

    payload = b""
    if payload_len > 0:
        payload = transport.read(payload_len)
        if payload is None or len(payload) != payload_len:
            got = 0 if payload is None else len(payload)
            raise ReadFailedError(f"Short read: {got} of {payload_len} payload bytes")

    return IpcMessage.from_frame(op_code, payload)


# ─── Payloads ─────────────────────────────────────────────────────────────────

def dumps(obj: Any) -> str:
    """Compact JSON, members kept in insertion order."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def encode_handshake(client_id: int) -> str:
    # client_id is a string here, unlike the numeric client_id in activities.
    return dumps({"v": P.RPC_VERSION, "client_id": str(client_id)})


def encode_set_activity(pid: int, activity: Optional["Activity"], nonce: str) -> str:
    """SET_ACTIVITY command. ``activity=None`` sends ``{}`` and clears presence."""
    return dumps({
        "cmd": P.CMD_SET_ACTIVITY,
        "args": {
            "pid": pid,
            "activity": activity.to_dict() if activity is not None else {},
        },
        "nonce": nonce,
    })
