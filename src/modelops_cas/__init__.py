"""modelops-cas: content-addressable blob storage with prioritized tiers."""

from .constants import CAS_VERSION
from .errors import (
    BlobNotFoundError,
    CASError,
    NoReadableStoreError,
    NoWritableStoreError,
)
from .hashing import compute_blob_id
from .models import BlobProperties, ByteRange, FetchResult, ListBlobsResult, Permission
from .storage import (
    ContentStore,
    MemoryContentStore,
    TierBinding,
    TieredContentStore,
    make_content_store,
)

__version__ = CAS_VERSION

__all__ = [
    "BlobNotFoundError",
    "BlobProperties",
    "ByteRange",
    "CASError",
    "ContentStore",
    "FetchResult",
    "ListBlobsResult",
    "MemoryContentStore",
    "NoReadableStoreError",
    "NoWritableStoreError",
    "Permission",
    "TierBinding",
    "TieredContentStore",
    "compute_blob_id",
    "make_content_store",
]
