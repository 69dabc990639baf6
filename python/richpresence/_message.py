"""Wire message value type and correlation-token generation."""

import json
import random
from typing import Any, Optional, Union

from . import _protocol as P


class IpcMessage:
    """One framed message: op code, UTF-8 JSON text and its extracted nonce."""

    __slots__ = ("op_code", "payload", "nonce")

    def __init__(self, op_code: int, payload: str = "", nonce: str = "") -> None:
        self.op_code = op_code
        self.payload = payload
        self.nonce = nonce

    @classmethod
    def from_frame(cls, op_code: int, raw: Union[bytes, str]) -> "IpcMessage":
        """Build a message from a decoded frame, pulling out its ``nonce``."""
        if isinstance(raw, bytes):
            text = raw.decode("utf-8", errors="replace")
        else:
            text = raw
        nonce = ""
        data = _parse(text)
        if isinstance(data, dict):
            value = data.get("nonce")
            if isinstance(value, str):
                nonce = value
        return cls(op_code, text, nonce)

    @property
    def data(self) -> Optional[Any]:
        """Parsed JSON payload, or None if the payload is not valid JSON."""
        return _parse(self.payload)

    @property
    def is_error(self) -> bool:
        if P.ERROR_MARKER in self.payload:
            return True
        data = self.data
        return isinstance(data, dict) and data.get("evt") == P.EVT_ERROR

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IpcMessage):
            return NotImplemented
        return (self.op_code, self.payload, self.nonce) == (
            other.op_code, other.payload, other.nonce
        )

    def __repr__(self) -> str:
        return f"Nonce:{self.nonce or 'NONE'} Op:{self.op_code} Msg:{self.payload}"


def _parse(text: str) -> Optional[Any]:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


_HEX = "0123456789abcdef"


class NonceGenerator:
    """Produces random version-4 style correlation tokens.

    The generator owns its own ``random.Random`` so tests can inject a
    seeded instance and get a reproducible token sequence.
    """

    __slots__ = ("_rng",)

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def _digits(self, n: int) -> str:
        return "".join(_HEX[self._rng.randrange(16)] for _ in range(n))

    def next(self) -> str:
        return "-".join((
            self._digits(8),
            self._digits(4),
            "4" + self._digits(3),
            self._digits(4),
            self._digits(12),
        ))
