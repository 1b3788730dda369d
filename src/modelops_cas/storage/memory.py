"""In-memory content store for development, testing and local caching.

Note: Data is lost when the process exits.
"""

import logging
import threading
import time
import urllib.parse
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..errors import BlobNotFoundError, InvalidRangeError
from ..hashing import Content, compute_blob_id, to_bytes
from ..models import (
    BlobProperties,
    ByteRange,
    FetchResult,
    ListBlobsResult,
    Permission,
    paginate,
    utc_now,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class MemoryContentStore:
    """
    Thread-safe in-memory content store.

    Stores data in a dictionary keyed by BlobId. Tiered fan-out calls the
    verbs from worker threads, so every access goes through one lock.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize empty storage.

        Args:
            chunk_size: Chunk size used by fetch_stream()
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self._lock = threading.Lock()
        self._blobs: Dict[str, Tuple[bytes, BlobProperties]] = {}

    @classmethod
    def from_preloaded(cls, contents: Iterable[Content]) -> "MemoryContentStore":
        """Build a store already holding the given contents."""
        store = cls()
        for content in contents:
            store.store(content)
        return store

    def store(self, content: Content) -> BlobProperties:
        """Store content; known content returns the existing properties."""
        data = to_bytes(content)
        blob_id = compute_blob_id(data)
        with self._lock:
            existing = self._blobs.get(blob_id)
            if existing is not None:
                return existing[1]
            props = BlobProperties(blob_id=blob_id, size=len(data), created_at=utc_now())
            self._blobs[blob_id] = (data, props)
        logger.debug("Stored blob %s... (%d bytes)", blob_id[:12], len(data))
        return props

    def _get(self, blob_id: str) -> Tuple[bytes, BlobProperties]:
        with self._lock:
            entry = self._blobs.get(blob_id)
        if entry is None:
            raise BlobNotFoundError(blob_id)
        return entry

    def fetch(self, blob_id: str, byte_range: Optional[ByteRange] = None) -> FetchResult:
        """Fetch content, slicing an inclusive byte range when given."""
        data, props = self._get(blob_id)
        if byte_range is None:
            return FetchResult(content=data, properties=props)

        size = len(data)
        if size and byte_range.start >= size:
            raise InvalidRangeError(blob_id, byte_range.start, byte_range.end, size)
        end = size - 1 if byte_range.end is None else min(byte_range.end, size - 1)
        return FetchResult(content=data[byte_range.start:end + 1], properties=props)

    def fetch_stream(self, blob_id: str) -> Iterator[bytes]:
        """Return an iterator over the blob content in chunks."""
        data, _ = self._get(blob_id)
        return self._iter_chunks(data)

    def _iter_chunks(self, data: bytes) -> Iterator[bytes]:
        for offset in range(0, len(data), self.chunk_size):
            yield data[offset:offset + self.chunk_size]

    def exists(self, blob_id: str) -> bool:
        """Check if a blob is present."""
        with self._lock:
            return blob_id in self._blobs

    def properties(self, blob_id: str) -> BlobProperties:
        """Return blob properties."""
        return self._get(blob_id)[1]

    def delete(self, blob_id: str) -> None:
        """Delete a blob; absent blobs raise BlobNotFoundError."""
        with self._lock:
            if self._blobs.pop(blob_id, None) is None:
                raise BlobNotFoundError(blob_id)
        logger.debug("Deleted blob %s...", blob_id[:12])

    def list_blobs(
        self,
        prefix: Optional[str] = None,
        max_results: Optional[int] = None,
        continuation_token: Optional[str] = None,
    ) -> ListBlobsResult:
        """List blobs ordered by BlobId with token pagination."""
        with self._lock:
            blobs = [props for _, props in self._blobs.values()]
        if prefix:
            blobs = [b for b in blobs if b.blob_id.startswith(prefix)]
        blobs.sort(key=lambda b: b.blob_id)
        return paginate(blobs, max_results, continuation_token)

    def signed_url(
        self,
        blob_id: str,
        expires_in: int,
        permission: Permission = Permission.READ,
    ) -> str:
        """Return a pseudo-signed ``memory://`` URL for a stored blob."""
        if expires_in <= 0:
            raise ValueError("expires_in must be positive")
        self._get(blob_id)
        query = urllib.parse.urlencode({
            "expires": int(time.time()) + int(expires_in),
            "permissions": Permission(permission).value,
        })
        return f"memory://blobs/{blob_id}?{query}"

    @property
    def count(self) -> int:
        """Number of stored blobs."""
        with self._lock:
            return len(self._blobs)

    @property
    def total_bytes(self) -> int:
        """Total size of stored content in bytes."""
        with self._lock:
            return sum(props.size for _, props in self._blobs.values())

    def clear(self) -> None:
        """Remove all blobs."""
        with self._lock:
            count = len(self._blobs)
            self._blobs.clear()
        if count:
            logger.info("Cleared %d blobs from memory", count)
