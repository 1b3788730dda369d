"""Remote access to content stores over event sockets."""

from .bridge import ContentStorePeerBridge
from .peer import ContentStorePeer
from .peer_socket import PeerSocketMock
from .server import ContentStoreServer
from .socket import Socket, SocketMock

__all__ = [
    "ContentStorePeer",
    "ContentStorePeerBridge",
    "ContentStoreServer",
    "PeerSocketMock",
    "Socket",
    "SocketMock",
]
