"""Result codes and exception hierarchy for the richpresence client."""

import enum


class Result(enum.Enum):
    """Outcome of a lifecycle call or a submitted command."""

    OK = "Ok"
    CHANNEL_NOT_OPEN = "ChannelNotOpen"
    OPEN_FAILED = "OpenFailed"
    READ_FAILED = "ReadFailed"
    WRITE_FAILED = "WriteFailed"
    NO_DATA = "NoDataYet"
    HANDSHAKE_FAILED = "HandshakeFailed"
    COMMAND_FAILED = "CommandFailed"
    UNKNOWN = "Unknown"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def __bool__(self) -> bool:
        return self is Result.OK

    def __str__(self) -> str:
        return self.value


_DESCRIPTIONS = {
    Result.OK: "Ok",
    Result.CHANNEL_NOT_OPEN: "IPC channel is not open",
    Result.OPEN_FAILED: "Failed to open IPC channel",
    Result.READ_FAILED: "Failed to read from IPC channel",
    Result.WRITE_FAILED: "Failed to write to IPC channel",
    Result.NO_DATA: "Reading from IPC channel returned no data",
    Result.HANDSHAKE_FAILED: "Failed to handshake with the presence host",
    Result.COMMAND_FAILED: "The presence host rejected the command",
    Result.UNKNOWN: "An unknown error occurred",
}


class PresenceError(Exception):
    """Base exception for all richpresence errors."""

    result = Result.UNKNOWN


class ChannelNotOpenError(PresenceError):
    """Operation attempted on a closed channel."""

    result = Result.CHANNEL_NOT_OPEN


class OpenFailedError(PresenceError):
    """The IPC endpoint could not be opened."""

    result = Result.OPEN_FAILED


class ReadFailedError(PresenceError):
    """Read failed, hit EOF, or returned fewer bytes than requested."""

    result = Result.READ_FAILED


class WriteFailedError(PresenceError):
    """Write failed or was only partially completed."""

    result = Result.WRITE_FAILED


class ProtocolError(ReadFailedError):
    """Wire protocol violation (oversized or malformed frame)."""


class HandshakeError(PresenceError):
    """The host answered the handshake with something other than READY."""

    result = Result.HANDSHAKE_FAILED
