"""Minimal socket abstraction for callback-style RPC.

The remote-access layer does not define a wire format. Anything that
behaves like an event emitter with connect/disconnect (a Socket.IO client,
a websocket wrapper, or the in-process mocks below) can carry the calls.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

logger = logging.getLogger(__name__)

Listener = Callable[..., None]

CONNECT = "connect"
DISCONNECT = "disconnect"


@runtime_checkable
class Socket(Protocol):
    """Event-emitter style socket."""

    @property
    def connected(self) -> bool: ...

    @property
    def disconnected(self) -> bool: ...

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...

    def on(self, event: str, listener: Listener) -> "Socket": ...

    def once(self, event: str, listener: Listener) -> "Socket": ...

    def off(self, event: str, listener: Optional[Listener] = None) -> "Socket": ...

    def emit(self, event: str, *args) -> bool: ...

    def remove_all_listeners(self, event: Optional[str] = None) -> "Socket": ...

    def listener_count(self, event: str) -> int: ...


class SocketMock:
    """
    In-process socket for tests and single-process wiring.

    emit() invokes this socket's own listeners synchronously in registration
    order, so a server handler and a client registered on the same mock talk
    to each other without any network.
    """

    def __init__(self):
        self._connected = False
        self._lock = threading.Lock()
        # event -> list of (listener, once)
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = {}

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def disconnected(self) -> bool:
        return not self._connected

    def connect(self) -> "SocketMock":
        """Connect and fire ``connect``; a second call does nothing."""
        if self._connected:
            return self
        self._connected = True
        self.emit(CONNECT)
        return self

    def disconnect(self) -> "SocketMock":
        """Disconnect and fire ``disconnect``; a second call does nothing."""
        if not self._connected:
            return self
        self._connected = False
        self.emit(DISCONNECT)
        return self

    def on(self, event: str, listener: Listener) -> "SocketMock":
        with self._lock:
            self._listeners.setdefault(event, []).append((listener, False))
        return self

    def once(self, event: str, listener: Listener) -> "SocketMock":
        with self._lock:
            self._listeners.setdefault(event, []).append((listener, True))
        return self

    def off(self, event: str, listener: Optional[Listener] = None) -> "SocketMock":
        """Remove one listener, or every listener of the event when none is given."""
        with self._lock:
            if listener is None:
                self._listeners.pop(event, None)
                return self
            entries = self._listeners.get(event, [])
            for idx, (registered, _) in enumerate(entries):
                if registered == listener:
                    del entries[idx]
                    break
            if not entries:
                self._listeners.pop(event, None)
        return self

    def remove_all_listeners(self, event: Optional[str] = None) -> "SocketMock":
        with self._lock:
            if event is None:
                self._listeners.clear()
            else:
                self._listeners.pop(event, None)
        return self

    def listener_count(self, event: str) -> int:
        with self._lock:
            return len(self._listeners.get(event, []))

    def listeners(self, event: str) -> List[Listener]:
        """Return the listeners registered for an event."""
        with self._lock:
            return [listener for listener, _ in self._listeners.get(event, [])]

    def event_names(self) -> List[str]:
        """Return events that currently have listeners."""
        with self._lock:
            return list(self._listeners)

    def emit(self, event: str, *args) -> bool:
        """Invoke listeners for event; returns False when none are registered."""
        with self._lock:
            entries = list(self._listeners.get(event, []))
            if not entries:
                return False
            if any(once for _, once in entries):
                kept = [entry for entry in entries if not entry[1]]
                if kept:
                    self._listeners[event] = kept
                else:
                    del self._listeners[event]

        for listener, _ in entries:
            listener(*args)
        return True
