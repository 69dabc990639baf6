"""Windows named pipe transport.

The pipe is opened as an unbuffered file; ``PeekNamedPipe`` provides the
non-blocking availability check and ``CancelIoEx`` interrupts a reader
blocked on another thread.
"""

import ctypes
from ctypes import wintypes
from typing import BinaryIO, Optional

from . import _protocol as P
from ._errors import (
    ChannelNotOpenError,
    OpenFailedError,
    ReadFailedError,
    WriteFailedError,
)
from ._locate import pipe_path
from ._log import log
from ._transport import Transport


def _kernel32():
    k32 = ctypes.WinDLL("kernel32", use_last_error=True)
    k32.PeekNamedPipe.argtypes = [
        wintypes.HANDLE, wintypes.LPVOID, wintypes.DWORD,
        wintypes.LPDWORD, wintypes.LPDWORD, wintypes.LPDWORD,
    ]
    k32.PeekNamedPipe.restype = wintypes.BOOL
    k32.CancelIoEx.argtypes = [wintypes.HANDLE, wintypes.LPVOID]
    k32.CancelIoEx.restype = wintypes.BOOL
    return k32


class NamedPipeTransport(Transport):
    """``\\\\?\\pipe\\discord-ipc-N`` connection to the presence host."""

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = path
        self._pipe: Optional[BinaryIO] = None
        self._k32 = None

    def open(self) -> None:
        if self._pipe is not None:
            return
        if self._k32 is None:
            self._k32 = _kernel32()
        candidates = [self._path] if self._path else [pipe_path(i) for i in range(P.IPC_SLOTS)]
        last_err: Optional[OSError] = None
        for path in candidates:
            try:
                self._pipe = open(path, "r+b", buffering=0)
                log.debug("opened %s", path)
                return
            except OSError as e:
                last_err = e
        raise OpenFailedError(f"Failed to open named pipe: {last_err}") from last_err

    def close(self) -> None:
        if self._pipe is not None:
            try:
                self._pipe.close()
            except OSError:
                pass
            self._pipe = None

    @property
    def is_open(self) -> bool:
        return self._pipe is not None

    def _handle(self) -> int:
        import msvcrt
        return msvcrt.get_osfhandle(self._pipe.fileno())

    def _available(self) -> int:
        avail = wintypes.DWORD(0)
        ok = self._k32.PeekNamedPipe(
            self._handle(), None, 0, None, ctypes.byref(avail), None
        )
        if not ok:
            raise ReadFailedError(
                f"PeekNamedPipe failed: error {ctypes.get_last_error()}"
            )
        return avail.value

    def read(self, nbytes: int, peek: bool = False) -> Optional[bytes]:
        if self._pipe is None:
            raise ChannelNotOpenError("Not connected")
        if peek and self._available() == 0:
            return None

        buf = bytearray()
        while len(buf) < nbytes:
            try:
                chunk = self._pipe.read(nbytes - len(buf))
            except OSError as e:
                raise ReadFailedError(f"ReadFile failed: {e}") from e
            if not chunk:
                raise ReadFailedError(
                    f"Pipe closed after {len(buf)} of {nbytes} bytes"
                )
            buf.extend(chunk)
        return bytes(buf)

    def write(self, data: bytes) -> None:
        if self._pipe is None:
            raise ChannelNotOpenError("Not connected")
        try:
            written = self._pipe.write(data)
        except OSError as e:
            raise WriteFailedError(f"WriteFile failed: {e}") from e
        if written != len(data):
            raise WriteFailedError(f"Partial write: {written} of {len(data)} bytes")

    def cancel_pending_io(self) -> None:
        if self._pipe is None or self._k32 is None:
            return
        self._k32.CancelIoEx(self._handle(), None)
