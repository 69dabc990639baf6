"""Client class — the protocol engine for one presence host connection."""

import enum
import os
import random
import threading
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Tuple

from . import _protocol as P
from . import _codec as codec
from ._activity import Activity
from ._errors import HandshakeError, PresenceError, ReadFailedError, Result
from ._log import LogLevel, log
from ._message import IpcMessage, NonceGenerator
from ._settings import ClientSettings
from ._transport import Transport, default_transport


class Event(enum.Enum):
    """Connection lifecycle events raised to the host application."""

    CONNECTED = "Connected"
    DISCONNECTED = "Disconnected"

    def __str__(self) -> str:
        return self.value


Callback = Callable[[Result, Optional[IpcMessage]], None]
LogCallback = Callable[[Result, LogLevel, str, Optional[IpcMessage]], None]
EventCallback = Callable[[Event], None]


def _noop(result: Result, message: Optional[IpcMessage]) -> None:
    pass


class Client:
    """A connection to the local presence host.

    Usage::

        client = Client(APPLICATION_ID)
        client.set_event_callback(lambda event: print(event))
        client.connect()

        act = Activity(name="My Game", details="In menus")
        client.update_activity(act, lambda result, msg: print(result))

        client.run()          # or client.start() for a background thread

    ``update_activity`` and ``clear_activity`` never touch the transport;
    they queue the command and the loop (``run``/``run_once``) writes it,
    reads the response and fires the callback exactly once.
    """

    def __init__(
        self,
        client_id: int,
        settings: Optional[ClientSettings] = None,
        transport: Optional[Transport] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._client_id = int(client_id)
        self._settings = settings if settings is not None else ClientSettings()
        self._transport = transport if transport is not None else default_transport()
        self._nonces = NonceGenerator(rng)
        self._pid = os.getpid()

        # _lock guards the queue, the callback table and the last activity.
        # _io_lock serializes every transport call; it is re-entrant so the
        # loop can call connect() while holding it.
        self._lock = threading.Lock()
        self._io_lock = threading.RLock()
        self._outgoing: Deque[IpcMessage] = deque()
        self._callbacks: Dict[str, Callback] = {}
        self._last_activity: Optional[Activity] = None

        self._event_callback: Optional[EventCallback] = None
        self._log_callback: Optional[LogCallback] = None

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    # ─── Properties ──────────────────────────────────────────────────────────

    @property
    def client_id(self) -> int:
        return self._client_id

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def is_connected(self) -> bool:
        return self._transport.is_open

    @property
    def last_activity(self) -> Optional[Activity]:
        """Copy of the activity that will be restored after a reconnect."""
        with self._lock:
            last = self._last_activity
        return last.copy() if last is not None else None

    @property
    def pending_count(self) -> int:
        """Submissions whose callback has not fired yet."""
        with self._lock:
            return len(self._callbacks)

    @property
    def queued_count(self) -> int:
        """Commands waiting to be written."""
        with self._lock:
            return len(self._outgoing)

    # ─── Callbacks ───────────────────────────────────────────────────────────

    def set_event_callback(self, callback: Optional[EventCallback]) -> None:
        self._event_callback = callback

    def set_log_callback(self, callback: Optional[LogCallback]) -> None:
        """Receive ``(result, level, message, ipc_message)`` for every log event."""
        self._log_callback = callback

    def _log(
        self,
        result: Result,
        level: LogLevel,
        message: str,
        ipc_message: Optional[IpcMessage] = None,
    ) -> None:
        log.log(level, "[%s] %s", result, message)
        cb = self._log_callback
        if cb is not None:
            try:
                cb(result, level, message, ipc_message)
            except Exception:
                log.exception("log callback raised")

    def _emit(self, event: Event) -> None:
        log.info("event: %s", event)
        cb = self._event_callback
        if cb is not None:
            try:
                cb(event)
            except Exception:
                log.exception("event callback raised for %s", event)

    @staticmethod
    def _invoke(callback: Callback, result: Result, message: Optional[IpcMessage]) -> None:
        try:
            callback(result, message)
        except Exception:
            log.exception("activity callback raised (result=%s)", result)

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def connect(self) -> Result:
        """Open the channel and perform the handshake.

        Blocks for one round trip. On failure the transport is closed again
        so the loop treats the client as disconnected and retries later.
        Connecting an already open client is a no-op returning OK.
        """
        with self._io_lock:
            if self._transport.is_open:
                log.debug("connect: channel already open")
                return Result.OK
            try:
                self._transport.open()
                log.debug("handshake client_id=%d", self._client_id)
                self._transport.write(codec.encode_frame(
                    P.OP_HANDSHAKE, codec.encode_handshake(self._client_id)
                ))

                # The READY dispatch carries no nonce; only its op code counts.
                msg = codec.read_frame(self._transport)
                self._log(Result.OK, LogLevel.TRACE, repr(msg), msg)
                if msg.op_code != P.OP_FRAME:
                    raise HandshakeError(
                        f"Expected READY (op {P.OP_FRAME}), got op {msg.op_code}"
                    )
            except PresenceError as e:
                self._log(e.result, LogLevel.ERROR, f"{e.result.description}: {e}")
                self._close_transport()
                self._fail_in_flight(e.result)
                return e.result

        log.info("connected, client_id=%d", self._client_id)
        self._emit(Event.CONNECTED)
        return Result.OK

    def disconnect(self) -> Result:
        """Close the channel. Idempotent.

        Callbacks of commands already written fire with CHANNEL_NOT_OPEN;
        commands still queued stay queued for the next connection.
        """
        self._transport.cancel_pending_io()
        with self._io_lock:
            try:
                self._transport.close()
            except PresenceError as e:
                self._log(e.result, LogLevel.ERROR, f"{e.result.description}: {e}")
                return e.result
        self._fail_in_flight(Result.CHANNEL_NOT_OPEN)
        return Result.OK

    def reconnect(self) -> Result:
        with self._io_lock:
            result = self.disconnect()
            if result is not Result.OK:
                return result
            return self.connect()

    def _close_transport(self) -> None:
        try:
            self._transport.close()
        except PresenceError as e:
            log.warning("close failed: %s", e)

    # ─── Commands ────────────────────────────────────────────────────────────

    def update_activity(self, activity: Activity, callback: Optional[Callback] = None) -> str:
        """Queue a SET_ACTIVITY command. Returns the command's nonce.

        The activity is copied, so later changes to ``activity`` do not
        affect the queued command or the copy kept for reconnects.
        """
        if not isinstance(activity, Activity):
            raise TypeError("activity must be an Activity instance")
        return self._submit(activity.copy(), callback, remember=True)

    def clear_activity(self, callback: Optional[Callback] = None) -> str:
        """Queue a SET_ACTIVITY command with an empty activity."""
        return self._submit(None, callback, remember=True)

    def _submit(
        self,
        activity: Optional[Activity],
        callback: Optional[Callback],
        remember: bool,
    ) -> str:
        with self._lock:
            nonce = self._nonces.next()
            payload = codec.encode_set_activity(self._pid, activity, nonce)
            self._outgoing.append(IpcMessage(P.OP_FRAME, payload, nonce))
            self._callbacks[nonce] = callback if callback is not None else _noop
            if remember:
                self._last_activity = activity
        log.debug("queued SET_ACTIVITY nonce=%s", nonce)
        return nonce

    def _complete(self, nonce: str, result: Result, message: Optional[IpcMessage]) -> bool:
        """Fire and drop the callback for ``nonce``. False if none is pending."""
        with self._lock:
            callback = self._callbacks.pop(nonce, None)
        if callback is None:
            return False
        self._invoke(callback, result, message)
        return True

    def _fail_in_flight(self, result: Result) -> None:
        """Fail every callback whose command was written but not answered."""
        with self._lock:
            queued = {m.nonce for m in self._outgoing}
            stale: List[Tuple[str, Callback]] = [
                (n, cb) for n, cb in self._callbacks.items() if n not in queued
            ]
            for nonce, _ in stale:
                del self._callbacks[nonce]
        for nonce, callback in stale:
            log.debug("failing in-flight nonce=%s with %s", nonce, result)
            self._invoke(callback, result, None)

    def _fail_all(self, result: Result) -> None:
        with self._lock:
            self._outgoing.clear()
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        for callback in callbacks:
            self._invoke(callback, result, None)

    def _on_restored(self, result: Result, message: Optional[IpcMessage]) -> None:
        if result is Result.OK:
            self._log(result, LogLevel.INFO, "Restored last activity", message)
        else:
            self._log(result, LogLevel.ERROR, "Failed to restore last activity", message)

    # ─── Loop ────────────────────────────────────────────────────────────────

    def run_once(self) -> float:
        """Run one loop iteration. Returns seconds to wait before the next."""
        with self._io_lock:
            if not self._transport.is_open:
                return self._handle_closed()
            self._drain()
            self._poll()
        return self._settings.poll_interval

    def _handle_closed(self) -> float:
        if not self._settings.auto_reconnect:
            return P.IDLE_INTERVAL

        self._log(Result.CHANNEL_NOT_OPEN, LogLevel.WARN,
                  "IPC channel is closed, attempting to reconnect")
        result = self.connect()
        if result is not Result.OK:
            self._log(result, LogLevel.ERROR, "Failed to reconnect")
            return self._settings.reconnect_interval

        self._log(Result.OK, LogLevel.INFO, "Reconnected")
        with self._lock:
            # Queued commands are newer than the snapshot.
            last = self._last_activity if not self._outgoing else None
        if last is not None:
            self._submit(last, self._on_restored, remember=False)
        return self._settings.poll_interval

    def _drain(self) -> None:
        """Write every queued command in order. A failed write fails only its own command."""
        while True:
            with self._lock:
                if not self._outgoing:
                    return
                msg = self._outgoing.popleft()
            try:
                self._transport.write(codec.encode_frame(msg.op_code, msg.payload))
            except PresenceError as e:
                self._log(e.result, LogLevel.ERROR, f"{e.result.description}: {e}", msg)
                self._complete(msg.nonce, e.result, msg)
                continue
            log.debug("sent nonce=%s", msg.nonce)

    def _poll(self) -> None:
        try:
            msg = codec.read_frame(self._transport, peek=True)
        except PresenceError as e:
            self._log(e.result, LogLevel.ERROR, f"{e.result.description}: {e}")
            if isinstance(e, ReadFailedError):
                self._close_transport()
                self._fail_in_flight(Result.READ_FAILED)
                self._emit(Event.DISCONNECTED)
            return

        if msg is None:
            return  # nothing buffered yet

        ok = not msg.is_error and msg.op_code != P.OP_DISPATCH
        result = Result.OK if ok else Result.COMMAND_FAILED
        self._log(result, LogLevel.TRACE, repr(msg), msg)

        if not msg.nonce or not self._complete(msg.nonce, result, msg):
            log.debug("no pending call for message (nonce=%s)", msg.nonce or "NONE")

    def run(self) -> Result:
        """Run the loop on the calling thread until ``stop()`` is called."""
        self._stop.clear()
        return self._run_loop()

    def _run_loop(self) -> Result:
        log.debug("loop starting")
        while not self._stop.is_set():
            delay = self.run_once()
            self._stop.wait(delay)
        log.debug("loop stopped")
        return Result.OK

    def start(self) -> None:
        """Run the loop on a background daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run_loop, name="richpresence-loop", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def close(self) -> None:
        """Stop the loop, disconnect and fail every outstanding callback."""
        if self._closed:
            return
        self._closed = True
        # Wake a loop blocked in a handshake read before joining it.
        self._stop.set()
        self._transport.cancel_pending_io()
        self.stop()
        self.disconnect()
        self._fail_all(Result.CHANNEL_NOT_OPEN)

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args) -> None:
        self.close()
