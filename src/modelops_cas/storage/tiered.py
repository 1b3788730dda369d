"""Multi-tier content store.

Combines several content stores into one logical store:

- Reads walk the readable tiers in priority order (lower number first) and
  stop at the first tier that has the blob.
- Writes and deletes go to every writable tier concurrently.
- A successful fetch warms every other writable tier with the content
  ("hot-swap"), so a local cache placed in front of a remote store fills
  up as blobs are read.
- Listings collect every readable tier completely, deduplicate by BlobId
  and paginate over the merged, sorted set.

There is no cross-tier atomicity. A store() that fails on one tier after
succeeding on another leaves the tiers out of step; retrying is safe
because content addressing makes every write idempotent.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, TypeVar

from ..constants import LIST_PAGE_SIZE
from ..errors import (
    BlobNotFoundError,
    CASError,
    InvalidTierConfigError,
    NoReadableStoreError,
    NoWritableStoreError,
    is_not_found,
)
from ..hashing import Content, to_bytes
from ..models import (
    BlobProperties,
    ByteRange,
    FetchResult,
    ListBlobsResult,
    Permission,
    paginate,
)
from .base import ContentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LIST_PAGE_SIZE = LIST_PAGE_SIZE


@dataclass(frozen=True)
class TierBinding:
    """A content store together with its place in a tiered store."""
    store: ContentStore
    priority: int = 0        # Lower number = checked first
    read: bool = True
    write: bool = True
    id: Optional[str] = None  # Assigned as "tier-<index>" when omitted


def assign_tier_ids(bindings: Iterable[TierBinding]) -> Tuple[TierBinding, ...]:
    """Give every binding without an id a stable, index-derived one.

    Explicit ids are kept, so calling this again is a no-op. A generated id
    never reuses an explicit one.

    Raises:
        InvalidTierConfigError: If two bindings share an explicit id
    """
    bindings = tuple(bindings)
    explicit = [b.id for b in bindings if b.id is not None]
    duplicates = sorted({i for i in explicit if explicit.count(i) > 1})
    if duplicates:
        raise InvalidTierConfigError(f"Duplicate tier ids: {duplicates}")

    used = set(explicit)
    assigned = []
    for idx, binding in enumerate(bindings):
        if binding.id is None:
            candidate = f"tier-{idx}"
            suffix = 1
            while candidate in used:
                candidate = f"tier-{idx}-{suffix}"
                suffix += 1
            used.add(candidate)
            binding = replace(binding, id=candidate)
        assigned.append(binding)
    return tuple(assigned)


class TieredContentStore:
    """
    Content store composed of prioritized tiers.

    Example: local cache + remote fallback::

        store = TieredContentStore([
            TierBinding(MemoryContentStore(), priority=0, read=True, write=True),
            TierBinding(remote_peer, priority=1, read=True, write=False),
        ])
    """

    def __init__(
        self,
        bindings: Iterable[TierBinding],
        *,
        max_workers: Optional[int] = None,
        list_page_size: int = DEFAULT_LIST_PAGE_SIZE,
        fallback_on_error: bool = False,
    ):
        """
        Initialize the tiered store.

        Args:
            bindings: Tiers in declaration order; order breaks priority ties
            max_workers: Thread cap for write fan-out (default: one per tier)
            list_page_size: Page size used when collecting each tier's listing
            fallback_on_error: If True, a tier failing with something other
                than BlobNotFoundError does not stop a read; the next tier is
                tried and the error only surfaces when no tier succeeds
        """
        if list_page_size <= 0:
            raise ValueError("list_page_size must be positive")
        if max_workers is not None and max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self.max_workers = max_workers
        self.list_page_size = list_page_size
        self.fallback_on_error = fallback_on_error
        self._bindings: Tuple[TierBinding, ...] = tuple(bindings)
        self.init()

    def init(self) -> "TieredContentStore":
        """Assign tier ids; safe to call any number of times.

        The wrapped stores are not touched and must already be initialized.
        """
        self._bindings = assign_tier_ids(self._bindings)
        return self

    # ---- Tier views ---------------------------------------------------------

    @property
    def bindings(self) -> Tuple[TierBinding, ...]:
        """All tiers in declaration order."""
        return self._bindings

    @property
    def readables(self) -> Tuple[TierBinding, ...]:
        """Readable tiers sorted by priority (stable for equal priorities)."""
        return tuple(sorted((b for b in self._bindings if b.read), key=lambda b: b.priority))

    @property
    def writables(self) -> Tuple[TierBinding, ...]:
        """Writable tiers sorted by priority (stable for equal priorities)."""
        return tuple(sorted((b for b in self._bindings if b.write), key=lambda b: b.priority))

    def _require_readables(self) -> Tuple[TierBinding, ...]:
        readables = self.readables
        if not readables:
            raise NoReadableStoreError()
        return readables

    def _require_writables(self) -> Tuple[TierBinding, ...]:
        writables = self.writables
        if not writables:
            raise NoWritableStoreError()
        return writables

    # ---- Fan-out helpers ----------------------------------------------------

    def _fan_out(
        self,
        bindings: Tuple[TierBinding, ...],
        call: Callable[[ContentStore], T],
    ) -> List[Tuple[TierBinding, "Future[T]"]]:
        """Run call against every tier concurrently and wait for all of them."""
        workers = self.max_workers or len(bindings)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(binding, executor.submit(call, binding.store)) for binding in bindings]
        return futures

    def _first_success(
        self,
        blob_id: str,
        verb: str,
        call: Callable[[ContentStore], T],
    ) -> Tuple[T, TierBinding]:
        """
        Try readable tiers in priority order until one succeeds.

        Returns:
            Tuple of (result, serving tier)

        Raises:
            NoReadableStoreError: If no tier is readable
            BlobNotFoundError: If every tier reported the blob missing
            Exception: The first other tier error, unchanged
        """
        readables = self._require_readables()
        errors: List[Exception] = []

        for binding in readables:
            try:
                result = call(binding.store)
            except Exception as e:
                if is_not_found(e):
                    logger.debug("%s: %s... not in tier %s", verb, blob_id[:12], binding.id)
                elif self.fallback_on_error:
                    logger.debug("%s: tier %s failed, trying next tier: %s", verb, binding.id, e)
                else:
                    raise
                errors.append(e)
                continue

            logger.debug("%s: %s... served by tier %s", verb, blob_id[:12], binding.id)
            return result, binding

        failures = [e for e in errors if not is_not_found(e)]
        if failures:
            raise failures[0]
        raise BlobNotFoundError(blob_id)

    def _hot_swap(self, content: bytes, blob_id: str, served_by: TierBinding) -> None:
        """Copy content into every writable tier except the one that served it.

        Cache writes are best effort: failures are logged and dropped.
        """
        targets = tuple(w for w in self.writables if w is not served_by)
        if not targets:
            return

        for binding, future in self._fan_out(targets, lambda store: store.store(content)):
            error = future.exception()
            if error is not None:
                logger.warning(
                    "Hot-swap of %s... into tier %s failed: %s", blob_id[:12], binding.id, error
                )
            else:
                logger.debug("Hot-swapped %s... into tier %s", blob_id[:12], binding.id)

    # ---- ContentStore verbs -------------------------------------------------

    def store(self, content: Content) -> BlobProperties:
        """
        Store content in every writable tier concurrently.

        All tiers are awaited. If any fails, the first error in priority
        order is raised even though other tiers may already hold the blob.

        Returns:
            BlobProperties reported by the highest-priority writable tier
        """
        writables = self._require_writables()
        data = to_bytes(content)

        results = self._fan_out(writables, lambda store: store.store(data))
        for binding, future in results:
            error = future.exception()
            if error is not None:
                logger.debug("store: tier %s failed: %s", binding.id, error)
                raise error
        return results[0][1].result()

    def fetch(self, blob_id: str, byte_range: Optional[ByteRange] = None) -> FetchResult:
        """
        Fetch from the highest-priority tier holding the blob.

        A full (unranged) fetch warms every other writable tier with the
        content before returning.
        """
        result, _ = self.fetch_with_tier(blob_id, byte_range)
        return result

    def fetch_with_tier(
        self,
        blob_id: str,
        byte_range: Optional[ByteRange] = None,
    ) -> Tuple[FetchResult, str]:
        """
        Fetch like fetch(), also reporting which tier served the read.

        Returns:
            Tuple of (FetchResult, id of the serving tier)
        """
        result, served_by = self._first_success(
            blob_id, "fetch", lambda store: store.fetch(blob_id, byte_range)
        )
        if byte_range is None:
            self._hot_swap(result.content, blob_id, served_by)
        return result, served_by.id

    def fetch_stream(self, blob_id: str) -> Iterator[bytes]:
        """Stream from the highest-priority tier holding the blob (no hot-swap)."""
        stream, _ = self._first_success(blob_id, "fetch_stream", lambda store: store.fetch_stream(blob_id))
        return stream

    def exists(self, blob_id: str) -> bool:
        """
        Check readable tiers in priority order.

        A tier that errors is treated as not holding the blob.
        """
        for binding in self._require_readables():
            try:
                if binding.store.exists(blob_id):
                    return True
            except Exception as e:
                logger.warning("exists: tier %s failed, skipping: %s", binding.id, e)
        return False

    def properties(self, blob_id: str) -> BlobProperties:
        """Return properties from the highest-priority tier holding the blob."""
        props, _ = self._first_success(blob_id, "properties", lambda store: store.properties(blob_id))
        return props

    def delete(self, blob_id: str) -> None:
        """
        Delete from every writable tier concurrently.

        A tier that does not hold the blob raises BlobNotFoundError, which is
        propagated like any other tier error after all tiers finished.
        """
        for binding, future in self._fan_out(self._require_writables(), lambda store: store.delete(blob_id)):
            error = future.exception()
            if error is not None:
                logger.debug("delete: tier %s failed: %s", binding.id, error)
                raise error

    def list_blobs(
        self,
        prefix: Optional[str] = None,
        max_results: Optional[int] = None,
        continuation_token: Optional[str] = None,
    ) -> ListBlobsResult:
        """
        List the union of all readable tiers.

        Each tier is read completely (its own pagination, caller's prefix)
        before the merged set is sorted by BlobId and paginated. A tier that
        errors is skipped entirely. An unknown continuation token restarts
        from the beginning.
        """
        readables = self._require_readables()
        merged: Dict[str, BlobProperties] = {}

        for binding in readables:
            try:
                collected = self._collect_tier(binding, prefix)
            except Exception as e:
                logger.warning("list_blobs: skipping tier %s: %s", binding.id, e)
                continue
            for blob in collected:
                merged.setdefault(blob.blob_id, blob)

        blobs = sorted(merged.values(), key=lambda b: b.blob_id)
        return paginate(blobs, max_results, continuation_token)

    def _collect_tier(self, binding: TierBinding, prefix: Optional[str]) -> List[BlobProperties]:
        """Read every page of one tier's listing."""
        collected: List[BlobProperties] = []
        seen_tokens = set()
        token: Optional[str] = None
        while True:
            page = binding.store.list_blobs(
                prefix=prefix,
                max_results=self.list_page_size,
                continuation_token=token,
            )
            collected.extend(page.blobs)
            token = page.continuation_token
            if not token:
                return collected
            if token in seen_tokens:
                raise CASError(f"Tier {binding.id} repeated continuation token {token[:12]}...")
            seen_tokens.add(token)

    def signed_url(
        self,
        blob_id: str,
        expires_in: int,
        permission: Permission = Permission.READ,
    ) -> str:
        """Issue a signed URL from the highest-priority tier holding the blob."""
        url, _ = self._first_success(
            blob_id, "signed_url", lambda store: store.signed_url(blob_id, expires_in, permission)
        )
        return url

    # ---- Example composition ------------------------------------------------

    @classmethod
    def example(cls) -> "TieredContentStore":
        """
        Build a local in-memory cache in front of a simulated remote store.

        The remote is a MemoryContentStore reached through a ContentStorePeer
        over a PeerSocketMock, bound read-only at priority 1.
        """
        from ..transport.peer import ContentStorePeer
        from ..transport.peer_socket import PeerSocketMock
        from .memory import MemoryContentStore

        remote = ContentStorePeer(PeerSocketMock(MemoryContentStore()))
        remote.init()

        return cls([
            TierBinding(MemoryContentStore(), priority=0, read=True, write=True, id="local"),
            TierBinding(remote, priority=1, read=True, write=False, id="remote"),
        ])
