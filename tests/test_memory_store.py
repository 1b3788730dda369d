"""Tests for the in-memory content store."""

import threading
import urllib.parse

import pytest

from modelops_cas.errors import BlobNotFoundError, InvalidRangeError
from modelops_cas.hashing import compute_blob_id
from modelops_cas.models import ByteRange, Permission
from modelops_cas.storage.base import ContentStore
from modelops_cas.storage.memory import MemoryContentStore


class TestMemoryStoreBasic:
    """Test store/fetch/exists/delete."""

    def test_satisfies_protocol(self, memory_store):
        assert isinstance(memory_store, ContentStore)

    def test_store_returns_content_id(self, memory_store):
        props = memory_store.store(b"hello")
        assert props.blob_id == compute_blob_id(b"hello")
        assert props.size == 5

    def test_store_is_idempotent(self, memory_store):
        """Storing the same content twice keeps one copy and the first timestamp."""
        first = memory_store.store(b"hello")
        second = memory_store.store("hello")

        assert second.blob_id == first.blob_id
        assert second.created_at == first.created_at
        assert memory_store.count == 1

    def test_fetch_roundtrip(self, memory_store):
        props = memory_store.store([b"he", b"llo"])
        result = memory_store.fetch(props.blob_id)
        assert result.content == b"hello"
        assert result.properties == props

    def test_missing_blob(self, memory_store):
        missing = "0" * 64
        assert not memory_store.exists(missing)
        for call in (
            lambda: memory_store.fetch(missing),
            lambda: memory_store.fetch_stream(missing),
            lambda: memory_store.properties(missing),
            lambda: memory_store.delete(missing),
            lambda: memory_store.signed_url(missing, 60),
        ):
            with pytest.raises(BlobNotFoundError):
                call()

    def test_delete(self, memory_store):
        props = memory_store.store(b"gone")
        memory_store.delete(props.blob_id)
        assert not memory_store.exists(props.blob_id)
        with pytest.raises(BlobNotFoundError):
            memory_store.delete(props.blob_id)

    def test_count_total_and_clear(self, memory_store):
        memory_store.store(b"a")
        memory_store.store(b"bcd")
        assert memory_store.count == 2
        assert memory_store.total_bytes == 4

        memory_store.clear()
        assert memory_store.count == 0

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            MemoryContentStore(chunk_size=0)


class TestMemoryStoreRanges:
    """Test inclusive byte range reads."""

    @pytest.fixture
    def digits(self, memory_store):
        return memory_store.store(b"0123456789").blob_id

    def test_inclusive_range(self, memory_store, digits):
        result = memory_store.fetch(digits, ByteRange(start=2, end=4))
        assert result.content == b"234"

    def test_open_range(self, memory_store, digits):
        assert memory_store.fetch(digits, ByteRange(start=7)).content == b"789"

    def test_end_is_clamped(self, memory_store, digits):
        assert memory_store.fetch(digits, ByteRange(start=8, end=100)).content == b"89"

    def test_start_past_end(self, memory_store, digits):
        with pytest.raises(InvalidRangeError):
            memory_store.fetch(digits, ByteRange(start=10))


class TestMemoryStoreStream:
    """Test chunked streaming."""

    def test_stream_chunks(self):
        store = MemoryContentStore(chunk_size=4)
        blob_id = store.store(b"0123456789").blob_id

        chunks = list(store.fetch_stream(blob_id))

        assert chunks == [b"0123", b"4567", b"89"]

    def test_stream_empty_blob(self, memory_store):
        blob_id = memory_store.store(b"").blob_id
        assert list(memory_store.fetch_stream(blob_id)) == []


class TestMemoryStoreListing:
    """Test listing with prefix and pagination."""

    def test_sorted_with_prefix(self, memory_store):
        ids = sorted(memory_store.store(str(i)).blob_id for i in range(20))
        prefix = ids[0][0]

        listed = memory_store.list_blobs(prefix=prefix).blobs

        assert [b.blob_id for b in listed] == [i for i in ids if i.startswith(prefix)]

    def test_pagination(self, memory_store):
        ids = sorted(memory_store.store(str(i)).blob_id for i in range(5))

        first = memory_store.list_blobs(max_results=3)
        second = memory_store.list_blobs(max_results=3, continuation_token=first.continuation_token)

        assert [b.blob_id for b in first.blobs] == ids[:3]
        assert [b.blob_id for b in second.blobs] == ids[3:]
        assert second.continuation_token is None


class TestMemoryStoreSignedUrl:
    """Test pseudo-signed URLs."""

    def test_url_format(self, memory_store):
        blob_id = memory_store.store(b"hello").blob_id

        url = memory_store.signed_url(blob_id, 60, Permission.DELETE)

        parsed = urllib.parse.urlparse(url)
        query = urllib.parse.parse_qs(parsed.query)
        assert parsed.scheme == "memory"
        assert parsed.path == f"/{blob_id}"
        assert query["permissions"] == ["delete"]
        assert int(query["expires"][0]) > 0

    def test_accepts_permission_string(self, memory_store):
        blob_id = memory_store.store(b"hello").blob_id
        assert "permissions=read" in memory_store.signed_url(blob_id, 60, "read")

    def test_rejects_non_positive_expiry(self, memory_store):
        blob_id = memory_store.store(b"hello").blob_id
        with pytest.raises(ValueError):
            memory_store.signed_url(blob_id, 0)


class TestMemoryStoreConcurrency:
    """Test concurrent access."""

    def test_concurrent_stores(self, memory_store):
        """Parallel stores of overlapping content keep one copy each."""
        def worker(n):
            for i in range(50):
                memory_store.store(str(i % 10))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert memory_store.count == 10
