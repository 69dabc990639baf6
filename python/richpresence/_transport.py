"""Byte-channel transports for the richpresence IPC protocol.

The engine only talks to the ``Transport`` interface. Concrete channels:

  - UnixSocketTransport: AF_UNIX stream socket (Linux, macOS)
  - NamedPipeTransport:  Windows named pipe (see ``_winpipe``)
  - MemoryTransport:     in-process double with a scriptable host side
"""

import select
import socket
import sys
import threading
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional, Tuple

from . import _protocol as P
from ._codec import decode_header, encode_frame
from ._errors import (
    ChannelNotOpenError,
    OpenFailedError,
    ReadFailedError,
    WriteFailedError,
)
from ._locate import resolve_ipc_path
from ._log import log


class Transport:
    """Duplex byte channel used by the protocol engine.

    Failures are reported by raising the exceptions from ``_errors``.
    """

    def open(self) -> None:
        """Open the channel. Opening an open channel is a no-op."""
        raise NotImplementedError

    def close(self) -> None:
        """Close the channel. Idempotent."""
        raise NotImplementedError

    @property
    def is_open(self) -> bool:
        raise NotImplementedError

    def read(self, nbytes: int, peek: bool = False) -> Optional[bytes]:
        """Read exactly ``nbytes``.

        With ``peek`` set, returns None without consuming or blocking when
        no data is available yet.
        """
        raise NotImplementedError

    def write(self, data: bytes) -> None:
        """Write all of ``data`` or raise WriteFailedError."""
        raise NotImplementedError

    def cancel_pending_io(self) -> None:
        """Best-effort interrupt of a blocking read on another thread."""
        pass

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, *args) -> None:
        self.close()


class UnixSocketTransport(Transport):
    """Wraps a Unix domain socket connection to the presence host."""

    def __init__(self, path: Optional[str] = None, timeout: float = P.DEFAULT_IO_TIMEOUT) -> None:
        self._path = path
        self._timeout = timeout
        self._sock: Optional[socket.socket] = None

    @property
    def path(self) -> Optional[str]:
        return self._path

    def open(self) -> None:
        if self._sock is not None:
            return
        path = resolve_ipc_path(self._path)
        log.debug("opening %s", path)
        try:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        except (OSError, AttributeError) as e:
            raise OpenFailedError(f"Unix sockets unavailable: {e}") from e
        try:
            sock.settimeout(self._timeout)
            sock.connect(path)
        except OSError as e:
            sock.close()
            raise OpenFailedError(f"Failed to connect to {path}: {e}") from e
        self._sock = sock

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def fileno(self) -> int:
        if self._sock is None:
            return -1
        return self._sock.fileno()

    def read(self, nbytes: int, peek: bool = False) -> Optional[bytes]:
        sock = self._sock
        if sock is None:
            raise ChannelNotOpenError("Not connected")

        if peek:
            try:
                ready, _, _ = select.select([sock], [], [], 0)
            except (ValueError, OSError) as e:
                raise ReadFailedError(f"Poll failed: {e}") from e
            if not ready:
                return None

        return self._recvall(sock, nbytes)

    def write(self, data: bytes) -> None:
        sock = self._sock
        if sock is None:
            raise ChannelNotOpenError("Not connected")
        try:
            sock.sendall(data)
        except OSError as e:
            raise WriteFailedError(f"Send failed: {e}") from e

    def cancel_pending_io(self) -> None:
        sock = self._sock
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

    @staticmethod
    def _recvall(sock: socket.socket, nbytes: int) -> bytes:
        """Receive exactly nbytes. EOF before that is a read failure."""
        buf = bytearray()
        while len(buf) < nbytes:
            try:
                chunk = sock.recv(nbytes - len(buf))
            except OSError as e:
                raise ReadFailedError(f"Recv failed: {e}") from e
            if not chunk:
                raise ReadFailedError(
                    f"Connection closed after {len(buf)} of {nbytes} bytes"
                )
            buf.extend(chunk)
        return bytes(buf)


Responder = Callable[[int, bytes], Iterable[Tuple[int, bytes]]]


class MemoryTransport(Transport):
    """In-memory transport with a scriptable host side.

    Every frame written by the client is parsed and kept in ``frames``. If
    a ``responder`` is given it is called with ``(op_code, payload)`` for
    each written frame and may return frames to feed back to the client.

    Usage::

        def host(op, payload):
            if op == 0:
                return [(1, b'{"evt":"READY","nonce":null}')]
            return []

        t = MemoryTransport(responder=host)
    """

    def __init__(self, responder: Optional[Responder] = None) -> None:
        self.responder = responder
        self.frames: List[Tuple[int, bytes]] = []
        self.fail_open = False
        self.fail_writes = False
        self.open_count = 0
        self.close_count = 0
        self._inbox = bytearray()
        self._read_faults: Deque[str] = deque()
        self._open = False
        self._lock = threading.Lock()

    def open(self) -> None:
        if self._open:
            return
        if self.fail_open:
            raise OpenFailedError("Simulated open failure")
        self._open = True
        self.open_count += 1

    def close(self) -> None:
        if self._open:
            self.close_count += 1
            # Unread host data dies with the connection.
            with self._lock:
                self._inbox.clear()
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def feed(self, op_code: int, payload=b"") -> None:
        """Queue a frame for the client to read."""
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        with self._lock:
            self._inbox.extend(encode_frame(op_code, payload))

    def feed_raw(self, data: bytes) -> None:
        with self._lock:
            self._inbox.extend(data)

    def fail_next_read(self, reason: str = "Simulated read failure") -> None:
        self._read_faults.append(reason)

    @property
    def pending_bytes(self) -> int:
        return len(self._inbox)

    def read(self, nbytes: int, peek: bool = False) -> Optional[bytes]:
        if not self._open:
            raise ChannelNotOpenError("Not connected")
        if self._read_faults:
            raise ReadFailedError(self._read_faults.popleft())
        with self._lock:
            if peek and not self._inbox:
                return None
            if len(self._inbox) < nbytes:
                got = len(self._inbox)
                self._inbox.clear()
                raise ReadFailedError(f"Short read: {got} of {nbytes} bytes")
            data = bytes(self._inbox[:nbytes])
            del self._inbox[:nbytes]
        return data

    def write(self, data: bytes) -> None:
        if not self._open:
            raise ChannelNotOpenError("Not connected")
        if self.fail_writes:
            raise WriteFailedError("Simulated write failure")
        op_code, length = decode_header(data)
        payload = bytes(data[P.HEADER_SIZE:P.HEADER_SIZE + length])
        self.frames.append((op_code, payload))
        if self.responder is not None:
            for reply_op, reply_payload in self.responder(op_code, payload) or ():
                self.feed(reply_op, reply_payload)

    @property
    def written(self) -> List[Tuple[int, str]]:
        """Written frames with payloads decoded to text."""
        return [(op, payload.decode("utf-8")) for op, payload in self.frames]


def default_transport() -> Transport:
    """Platform transport for the local presence host."""
    if sys.platform == "win32":
        from ._winpipe import NamedPipeTransport
        return NamedPipeTransport()
    return UnixSocketTransport()
