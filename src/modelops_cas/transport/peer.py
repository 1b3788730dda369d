"""Content store that forwards every verb to a remote store over a socket."""

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Iterator, Optional

from ..errors import PeerNotReadyError, PeerTimeoutError, UnsupportedEventError
from ..hashing import Content, to_bytes
from ..models import BlobProperties, ByteRange, FetchResult, ListBlobsResult, Permission
from .socket import CONNECT, DISCONNECT, Socket

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ContentStorePeer:
    """
    Remote proxy implementing the ContentStore protocol.

    Each verb is emitted as an event of the same name with an error-first
    callback as last argument; the call blocks until the callback fires or
    the timeout expires. Errors from the remote store are re-raised as-is.
    """

    def __init__(self, socket: Socket, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the peer.

        Args:
            socket: Socket connected (or connectable) to a ContentStoreServer
            timeout: Seconds to wait for connect and for each reply
        """
        self._socket = socket
        self.timeout = timeout
        self.is_open = False
        self._subscribed = False
        self._connected = threading.Event()

    @property
    def socket(self) -> Socket:
        """The underlying socket."""
        return self._socket

    def _handle_connect(self, *args) -> None:
        self.is_open = True
        self._connected.set()

    def _handle_disconnect(self, *args) -> None:
        self.is_open = False
        self._connected.clear()

    def init(self) -> "ContentStorePeer":
        """Connect the socket and wait until it reports connected.

        Raises:
            PeerTimeoutError: If the socket does not connect within timeout
        """
        if not self._subscribed:
            self._socket.on(CONNECT, self._handle_connect)
            self._socket.on(DISCONNECT, self._handle_disconnect)
            self._subscribed = True

        self._socket.connect()
        if not self._socket.connected and not self._connected.wait(self.timeout):
            raise PeerTimeoutError(CONNECT, self.timeout)

        self.is_open = True
        logger.debug("Peer connected")
        return self

    def close(self) -> None:
        """Disconnect the socket; does nothing if already disconnected."""
        if not self._socket.connected:
            self.is_open = False
            return
        self._socket.disconnect()
        self.is_open = False
        logger.debug("Peer disconnected")

    def is_ready(self) -> None:
        """Raise PeerNotReadyError unless the socket is connected."""
        self.is_open = bool(self._socket.connected)
        if not self.is_open:
            raise PeerNotReadyError()

    def _call(self, event: str, *args) -> Any:
        """Emit one RPC and wait for its error-first callback."""
        if not self._socket.connected:
            raise PeerNotReadyError(f"Cannot call '{event}': peer socket is not connected")

        future: "Future[Any]" = Future()

        def callback(error: Optional[BaseException], result: Any = None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        handled = self._socket.emit(event, *args, callback)
        if handled is False and not future.done():
            raise UnsupportedEventError(event)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            raise PeerTimeoutError(event, self.timeout) from None

    def store(self, content: Content) -> BlobProperties:
        """Store content remotely; chunk iterables are buffered first."""
        if not isinstance(content, (bytes, str)):
            content = to_bytes(content)
        return self._call("store", content)

    def fetch(self, blob_id: str, byte_range: Optional[ByteRange] = None) -> FetchResult:
        return self._call("fetch", blob_id, byte_range)

    def fetch_stream(self, blob_id: str) -> Iterator[bytes]:
        return iter(self._call("fetch_stream", blob_id))

    def exists(self, blob_id: str) -> bool:
        return bool(self._call("exists", blob_id))

    def properties(self, blob_id: str) -> BlobProperties:
        return self._call("properties", blob_id)

    def delete(self, blob_id: str) -> None:
        self._call("delete", blob_id)

    def list_blobs(
        self,
        prefix: Optional[str] = None,
        max_results: Optional[int] = None,
        continuation_token: Optional[str] = None,
    ) -> ListBlobsResult:
        return self._call("list_blobs", prefix, max_results, continuation_token)

    def signed_url(
        self,
        blob_id: str,
        expires_in: int,
        permission: Permission = Permission.READ,
    ) -> str:
        return self._call("signed_url", blob_id, expires_in, Permission(permission).value)
