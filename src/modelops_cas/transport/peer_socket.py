"""Socket that dispatches events straight to a local content store.

Simulates a peer connection in-process, without a server or network.
"""

from typing import Any

from .rpc import invoke, resolve_verb, split_callback
from .socket import SocketMock


class PeerSocketMock(SocketMock):
    """
    Socket whose emit() invokes the matching verb on a content store.

    ``connect`` and ``disconnect`` behave as on SocketMock; every other
    event must name a store verb.
    """

    def __init__(self, store: Any):
        super().__init__()
        self.store = store

    def emit(self, event: str, *args) -> bool:
        if event in ("connect", "disconnect"):
            return super().emit(event, *args)

        resolve_verb(self.store, event)
        call_args, callback = split_callback(args)
        invoke(self.store, event, call_args, callback)
        return True
