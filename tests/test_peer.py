"""Tests for ContentStorePeer remote proxy."""

from unittest.mock import Mock

import pytest

from modelops_cas.errors import (
    BlobNotFoundError,
    PeerNotReadyError,
    PeerTimeoutError,
    UnsupportedEventError,
)
from modelops_cas.hashing import compute_blob_id
from modelops_cas.models import ByteRange, Permission
from modelops_cas.storage.base import ContentStore
from modelops_cas.storage.memory import MemoryContentStore
from modelops_cas.transport.peer import ContentStorePeer
from modelops_cas.transport.peer_socket import PeerSocketMock
from modelops_cas.transport.socket import SocketMock


@pytest.fixture
def remote():
    return MemoryContentStore()


@pytest.fixture
def peer(remote):
    return ContentStorePeer(PeerSocketMock(remote), timeout=2.0).init()


class TestPeerLifecycle:
    """Test connect/close/readiness."""

    def test_init_connects(self, remote):
        peer = ContentStorePeer(PeerSocketMock(remote))
        assert not peer.socket.connected

        assert peer.init() is peer
        assert peer.is_open
        peer.is_ready()

    def test_init_twice_is_harmless(self, peer):
        peer.init()
        assert peer.socket.listener_count("connect") == 1

    def test_close(self, peer):
        peer.close()
        assert not peer.is_open
        with pytest.raises(PeerNotReadyError):
            peer.is_ready()
        peer.close()

    def test_calls_require_connection(self, remote):
        peer = ContentStorePeer(PeerSocketMock(remote))
        with pytest.raises(PeerNotReadyError, match="Cannot call 'exists'"):
            peer.exists("0" * 64)

    def test_connect_timeout(self):
        """A socket that never reports connected times out."""
        socket = Mock()
        socket.connected = False
        peer = ContentStorePeer(socket, timeout=0.05)

        with pytest.raises(PeerTimeoutError):
            peer.init()


class TestPeerVerbs:
    """Test every verb through the proxy."""

    def test_satisfies_protocol(self, peer):
        assert isinstance(peer, ContentStore)

    def test_store_and_fetch(self, peer, remote):
        props = peer.store(b"hello")

        assert remote.exists(props.blob_id)
        assert peer.fetch(props.blob_id).content == b"hello"
        assert peer.fetch(props.blob_id, ByteRange(start=1, end=2)).content == b"el"

    def test_store_buffers_chunks(self, peer):
        props = peer.store(iter([b"he", b"llo"]))
        assert props.blob_id == compute_blob_id(b"hello")

    def test_stream(self, peer):
        blob_id = peer.store(b"streamed").blob_id
        assert b"".join(peer.fetch_stream(blob_id)) == b"streamed"

    def test_exists_properties_delete(self, peer):
        blob_id = peer.store(b"x").blob_id
        assert peer.exists(blob_id)
        assert peer.properties(blob_id).size == 1

        peer.delete(blob_id)
        assert not peer.exists(blob_id)

    def test_list_blobs(self, peer):
        ids = sorted(peer.store(str(i)).blob_id for i in range(3))
        page = peer.list_blobs(max_results=2)
        assert [b.blob_id for b in page.blobs] == ids[:2]
        assert page.continuation_token == ids[1]

    def test_signed_url(self, peer):
        blob_id = peer.store(b"x").blob_id
        assert "permissions=delete" in peer.signed_url(blob_id, 30, Permission.DELETE)

    def test_remote_errors_reraised(self, peer):
        with pytest.raises(BlobNotFoundError):
            peer.fetch("0" * 64)

    def test_unhandled_event(self):
        """A plain socket without handlers rejects the call instead of hanging."""
        peer = ContentStorePeer(SocketMock(), timeout=5.0).init()
        with pytest.raises(UnsupportedEventError):
            peer.exists("0" * 64)

    def test_reply_timeout(self):
        """A handler that never answers times out."""
        socket = SocketMock()
        socket.on("exists", lambda *args: None)
        peer = ContentStorePeer(socket, timeout=0.05).init()

        with pytest.raises(PeerTimeoutError, match="exists"):
            peer.exists("0" * 64)
