"""richpresence — publish activity status to a local presence host over IPC.

Usage::

    import time
    import richpresence as rp

    client = rp.Client(APPLICATION_ID)
    client.set_event_callback(lambda event: print(event))
    client.connect()

    act = rp.Activity(name="My Game", details="Exploring")
    act.timestamps.start = time.time()
    act.assets.large_image = "logo"
    act.party = rp.Party("lobby-1", 2, 5)
    act.add_button(rp.Button("Website", "https://example.com"))

    client.update_activity(act, lambda result, msg: print(result))
    client.run()    # or client.start() to run in the background
"""

from ._client import Client, Event
from ._settings import ClientSettings
from ._activity import Activity, ActivityType, Assets, Button, Party, Timestamps
from ._message import IpcMessage, NonceGenerator
from ._transport import Transport, UnixSocketTransport, MemoryTransport, default_transport
from ._codec import encode_frame, decode_header, read_frame
from ._log import LogLevel
from ._errors import (
    Result,
    PresenceError,
    ChannelNotOpenError,
    OpenFailedError,
    ReadFailedError,
    WriteFailedError,
    ProtocolError,
    HandshakeError,
)

try:
    from importlib.metadata import version as _pkg_version
    __version__ = _pkg_version("richpresence-ipc")
except Exception:
    __version__ = "0.1.0"

__all__ = [
    # Engine
    "Client",
    "ClientSettings",
    "Event",
    "LogLevel",
    # Activity model
    "Activity",
    "ActivityType",
    "Assets",
    "Button",
    "Party",
    "Timestamps",
    # Wire
    "IpcMessage",
    "NonceGenerator",
    "encode_frame",
    "decode_header",
    "read_frame",
    # Transports
    "Transport",
    "UnixSocketTransport",
    "MemoryTransport",
    "default_transport",
    # Errors
    "Result",
    "PresenceError",
    "ChannelNotOpenError",
    "OpenFailedError",
    "ReadFailedError",
    "WriteFailedError",
    "ProtocolError",
    "HandshakeError",
]
