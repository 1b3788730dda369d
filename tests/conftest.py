"""Shared test fixtures and utilities."""

from unittest.mock import Mock

import pytest

from modelops_cas.storage.memory import MemoryContentStore
from modelops_cas.storage.tiered import TierBinding, TieredContentStore


@pytest.fixture
def memory_store():
    """Empty in-memory content store."""
    return MemoryContentStore()


@pytest.fixture
def cache_and_remote():
    """Empty read/write cache in front of a read-only remote holding "hello".

    Returns:
        Tuple of (tiered store, cache store, remote store)
    """
    cache = MemoryContentStore()
    remote = MemoryContentStore.from_preloaded([b"hello"])
    tiered = TieredContentStore([
        TierBinding(cache, priority=0, read=True, write=True, id="cache"),
        TierBinding(remote, priority=1, read=True, write=False, id="remote"),
    ])
    return tiered, cache, remote


@pytest.fixture
def broken_store():
    """Factory for a store whose every verb raises the given error."""
    def _make(error: Exception):
        store = Mock(spec=MemoryContentStore)
        for verb in (
            "store", "fetch", "fetch_stream", "exists",
            "properties", "delete", "list_blobs", "signed_url",
        ):
            getattr(store, verb).side_effect = error
        return store
    return _make
