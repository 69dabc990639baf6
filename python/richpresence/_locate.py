"""Locate the presence host's IPC endpoint."""

import os
import select
import socket
from typing import List, Optional

from . import _protocol as P

# Flatpak and snap installs put the socket one level down.
_SANDBOX_SUBDIRS = ("", "app/com.discordapp.Discord", "snap.discord")


def _runtime_dirs() -> List[str]:
    """Candidate socket directories, in the order the host checks them."""
    dirs = []
    for var in ("XDG_RUNTIME_DIR", "TMPDIR", "TMP", "TEMP"):
        value = os.environ.get(var)
        if value and value not in dirs:
            dirs.append(value)
    if "/tmp" not in dirs:
        dirs.append("/tmp")
    return dirs


def socket_paths(index: Optional[int] = None) -> List[str]:
    """All candidate Unix socket paths, optionally restricted to one slot."""
    slots = range(P.IPC_SLOTS) if index is None else (index,)
    return [
        os.path.join(base, sub, f"{P.IPC_NAME}-{i}")
        for i in slots
        for base in _runtime_dirs()
        for sub in _SANDBOX_SUBDIRS
    ]


def pipe_path(index: int = 0) -> str:
    """Windows named pipe path for the given slot."""
    return f"\\\\?\\pipe\\{P.IPC_NAME}-{index}"


def _can_connect(path: str) -> bool:
    """Check if a host is listening and responsive on the socket.

    Connects, then does a non-blocking recv peek to detect hosts that
    accept-then-immediately-close (shutting down).
    """
    try:
        s = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    except (OSError, AttributeError):
        return False
    try:
        s.settimeout(1.0)
        s.connect(path)
        # A healthy host won't send anything before the handshake, so
        # readable here means EOF/reset.
        ready, _, _ = select.select([s], [], [], 0.05)
        if ready and not s.recv(1, socket.MSG_PEEK):
            return False
        return True
    except OSError:
        return False
    finally:
        s.close()


def resolve_ipc_path(explicit: Optional[str] = None, index: Optional[int] = None) -> str:
    """Resolve the Unix socket path.

    1. Explicit path passed to the transport
    2. $RICHPRESENCE_IPC_PATH environment variable
    3. First live <runtime dir>/discord-ipc-<N> socket
    4. <first runtime dir>/discord-ipc-<index or 0>
    """
    if explicit:
        return explicit

    env_path = os.environ.get("RICHPRESENCE_IPC_PATH")
    if env_path:
        return env_path

    candidates = socket_paths(index)
    for path in candidates:
        if os.path.exists(path) and _can_connect(path):
            return path

    return candidates[0]
