"""Bridge socket events to content store verbs on the pull side.

Unlike ContentStoreServer, the bridge only registers the read verbs by
default: the remote end may pull blobs but not store or delete them.
Further events can be registered explicitly.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from ..errors import UnsupportedEventError
from .rpc import READ_VERBS, invoke, split_callback
from .socket import CONNECT, DISCONNECT, Listener, Socket

logger = logging.getLogger(__name__)


class ContentStorePeerBridge:
    """Translates socket events into calls on a content store."""

    def __init__(self, store: Any, socket: Socket):
        self._store = store
        self._socket = socket
        self._event_handlers: Dict[str, Listener] = {}

    @property
    def store(self) -> Any:
        return self._store

    @property
    def socket(self) -> Socket:
        return self._socket

    @property
    def is_connected(self) -> bool:
        return bool(self._socket.connected)

    @property
    def registered_events(self) -> tuple:
        """Events currently bridged to the store."""
        return tuple(self._event_handlers)

    def start(self) -> None:
        """Subscribe to connection events and register the read verbs."""
        self._socket.on(CONNECT, self._handle_connect)
        self._socket.on(DISCONNECT, self._handle_disconnect)
        self.register_events(READ_VERBS)

    def stop(self) -> None:
        """Remove every handler this bridge registered."""
        self._socket.off(CONNECT, self._handle_connect)
        self._socket.off(DISCONNECT, self._handle_disconnect)
        for event, handler in self._event_handlers.items():
            self._socket.off(event, handler)
        self._event_handlers.clear()

    def register_event(self, event: str, verb: Optional[str] = None) -> None:
        """
        Bridge one socket event to a store verb.

        Args:
            event: Socket event name
            verb: Store verb to call (defaults to the event name)
        """
        verb = verb or event
        if event in self._event_handlers:
            self.unregister_event(event)

        def handler(*args) -> None:
            call_args, callback = split_callback(args)
            invoke(self._store, verb, call_args, callback)

        self._event_handlers[event] = handler
        self._socket.on(event, handler)

    def register_events(self, events: Iterable[str]) -> None:
        for event in events:
            self.register_event(event)

    def unregister_event(self, event: str) -> None:
        handler = self._event_handlers.pop(event, None)
        if handler is not None:
            self._socket.off(event, handler)

    def emit_to_socket(self, event: str, *data) -> None:
        """Emit a plain event through the socket."""
        self._socket.emit(event, *data)

    def call_and_emit(self, verb: str, event: str, *args) -> None:
        """
        Call a store verb and emit ``(error, result)`` as a plain event.

        Unknown verbs are reported through the event as well.
        """
        try:
            method = getattr(self._store, verb, None)
            if not callable(method):
                raise UnsupportedEventError(verb)
            result = method(*args)
        except Exception as e:
            logger.debug("Bridge call %s failed: %s", verb, e)
            self._socket.emit(event, e, None)
            return
        self._socket.emit(event, None, result)

    def _handle_connect(self, *args) -> None:
        logger.debug("Bridge socket connected")

    def _handle_disconnect(self, *args) -> None:
        logger.debug("Bridge socket disconnected")
