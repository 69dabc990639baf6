"""Client settings, with optional overrides from the environment.

Environment variables (read by ``ClientSettings.from_env``)::

    RICHPRESENCE_AUTO_RECONNECT=0        # disable reconnect attempts
    RICHPRESENCE_RECONNECT_INTERVAL=10   # seconds between attempts
    RICHPRESENCE_POLL_INTERVAL=0.05      # seconds between loop iterations
"""

import os
from typing import Optional

from . import _protocol as P

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


class ClientSettings:
    """Loop behaviour of a ``Client``."""

    __slots__ = ("_auto_reconnect", "_reconnect_interval", "_poll_interval")

    def __init__(
        self,
        auto_reconnect: bool = True,
        reconnect_interval: float = P.DEFAULT_RECONNECT_INTERVAL,
        poll_interval: float = P.DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.auto_reconnect = auto_reconnect
        self.reconnect_interval = reconnect_interval
        self.poll_interval = poll_interval

    @property
    def auto_reconnect(self) -> bool:
        return self._auto_reconnect

    @auto_reconnect.setter
    def auto_reconnect(self, value: bool) -> None:
        self._auto_reconnect = bool(value)

    @property
    def reconnect_interval(self) -> float:
        """Seconds to wait after a failed reconnect attempt."""
        return self._reconnect_interval

    @reconnect_interval.setter
    def reconnect_interval(self, value: float) -> None:
        self._reconnect_interval = _interval("reconnect_interval", value)

    @property
    def poll_interval(self) -> float:
        """Seconds between loop iterations while connected."""
        return self._poll_interval

    @poll_interval.setter
    def poll_interval(self, value: float) -> None:
        self._poll_interval = _interval("poll_interval", value)

    @classmethod
    def from_env(cls, base: Optional["ClientSettings"] = None) -> "ClientSettings":
        s = base if base is not None else cls()
        flag = os.environ.get("RICHPRESENCE_AUTO_RECONNECT", "").strip().lower()
        if flag in _TRUE:
            s.auto_reconnect = True
        elif flag in _FALSE:
            s.auto_reconnect = False
        elif flag:
            raise ValueError(f"RICHPRESENCE_AUTO_RECONNECT: not a boolean: {flag!r}")

        for var, attr in (
            ("RICHPRESENCE_RECONNECT_INTERVAL", "reconnect_interval"),
            ("RICHPRESENCE_POLL_INTERVAL", "poll_interval"),
        ):
            raw = os.environ.get(var, "").strip()
            if raw:
                try:
                    setattr(s, attr, float(raw))
                except ValueError as e:
                    raise ValueError(f"{var}: {e}") from e
        return s

    def __repr__(self) -> str:
        return (
            f"ClientSettings(auto_reconnect={self._auto_reconnect}, "
            f"reconnect_interval={self._reconnect_interval}, "
            f"poll_interval={self._poll_interval})"
        )


def _interval(name: str, value: float) -> float:
    value = float(value)
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value
