"""Expose one content store to any number of sockets."""

import logging
from typing import Any, Dict, List

from .rpc import STORE_VERBS, invoke, split_callback
from .socket import Listener, Socket

logger = logging.getLogger(__name__)


class ContentStoreServer:
    """
    Serves a content store over socket events.

    Every attached socket gets one handler per store verb. Handlers answer
    the trailing error-first callback with the verb's result or error.
    """

    def __init__(self, store: Any):
        self._store = store
        self._sockets: List[Socket] = []
        # id(socket) -> {verb: handler}
        self._handlers: Dict[int, Dict[str, Listener]] = {}

    @property
    def store(self) -> Any:
        return self._store

    @property
    def sockets(self) -> List[Socket]:
        """Attached sockets in attachment order."""
        return list(self._sockets)

    def add_socket(self, socket: Socket) -> None:
        """Register the transport handlers on a socket and attach it."""
        if any(s is socket for s in self._sockets):
            return
        handlers = {verb: self._make_handler(verb) for verb in STORE_VERBS}
        for verb, handler in handlers.items():
            socket.on(verb, handler)
        self._handlers[id(socket)] = handlers
        self._sockets.append(socket)
        logger.debug("Attached socket (%d total)", len(self._sockets))

    def remove_socket(self, socket: Socket) -> None:
        """Unregister the handlers from a socket and detach it."""
        handlers = self._handlers.pop(id(socket), {})
        for verb, handler in handlers.items():
            socket.off(verb, handler)
        self._sockets = [s for s in self._sockets if s is not socket]

    def _make_handler(self, verb: str) -> Listener:
        def handler(*args) -> None:
            call_args, callback = split_callback(args)
            invoke(self._store, verb, call_args, callback)
        return handler
