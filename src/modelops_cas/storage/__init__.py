"""Storage package: content store protocol and implementations."""

from .base import ContentStore
from .factory import make_content_store
from .memory import MemoryContentStore
from .tiered import TierBinding, TieredContentStore

__all__ = [
    "ContentStore",
    "MemoryContentStore",
    "TierBinding",
    "TieredContentStore",
    "make_content_store",
]
