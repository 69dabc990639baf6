"""richpresence client logger.

Usage from any module::

    from ._log import log

    log.debug("opening %s", path)
    log.warning("reconnect failed: %s", result)

Enable via environment variable::

    RICHPRESENCE_LOG=DEBUG python my_script.py   # all messages
    RICHPRESENCE_LOG=TRACE python my_script.py   # including raw frames
    RICHPRESENCE_LOG=1     python my_script.py   # alias for DEBUG

Or programmatically::

    import logging
    logging.getLogger("richpresence").setLevel(logging.DEBUG)
"""

import enum
import logging
import os
from typing import Optional, TextIO

log = logging.getLogger("richpresence")

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class LogLevel(enum.IntEnum):
    """Severity attached to log events handed to the host application."""

    TRACE = TRACE
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR

    def __str__(self) -> str:
        return self.name


_LEVEL_COLORS = {
    "TRACE": "\033[35m",
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"

_FORMAT = "[richpresence %(levelname)s] %(message)s (%(filename)s:%(lineno)d)"
_ALIASES = {"1": "DEBUG", "0": "WARNING", "TRUE": "DEBUG", "FALSE": "WARNING"}


class ColoredFormatter(logging.Formatter):
    """Colors the level name when ``stream`` is a terminal."""

    def __init__(self, fmt: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
        super().__init__(fmt)
        isatty = getattr(stream, "isatty", None)
        self._colored = bool(isatty and isatty())

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelname)
        if self._colored and color:
            # Other handlers see the same record; color a copy.
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{_RESET}"
        return super().format(record)


def _level_from_env(value: str) -> Optional[int]:
    name = value.strip().upper()
    if not name:
        return None
    name = _ALIASES.get(name, name)
    if name == "TRACE":
        return TRACE
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else None


_env_level = _level_from_env(os.environ.get("RICHPRESENCE_LOG", ""))
if _env_level is not None:
    log.setLevel(_env_level)
    if not log.handlers:
        _handler = logging.StreamHandler()
        _handler.setFormatter(ColoredFormatter(_FORMAT, stream=_handler.stream))
        log.addHandler(_handler)
