"""Factory for creating content stores from configuration."""

import logging
from typing import Mapping, Optional

from ..config import TierConfig, TieredStoreConfig
from ..errors import InvalidTierConfigError
from .base import ContentStore
from .memory import MemoryContentStore
from .tiered import TierBinding, TieredContentStore

logger = logging.getLogger(__name__)


def make_tier_store(tier: TierConfig, stores: Mapping[str, ContentStore]) -> ContentStore:
    """
    Create or resolve the store behind one tier.

    Args:
        tier: Tier configuration
        stores: Caller-provided stores for ``external`` tiers, keyed by tier id

    Returns:
        ContentStore for the tier

    Raises:
        InvalidTierConfigError: If an external tier has no matching store
    """
    if tier.kind == "memory":
        return MemoryContentStore()

    if tier.kind == "external":
        if tier.id not in stores:
            raise InvalidTierConfigError(
                f"External tier '{tier.id}' has no store; pass it in stores={{'{tier.id}': ...}}"
            )
        return stores[tier.id]

    raise NotImplementedError(f"Tier kind {tier.kind} not supported")


def make_content_store(
    config: Optional[TieredStoreConfig] = None,
    stores: Optional[Mapping[str, ContentStore]] = None,
) -> TieredContentStore:
    """
    Build a TieredContentStore from configuration.

    Args:
        config: Tiered store configuration (defaults to one memory tier)
        stores: Stores for ``external`` tiers, keyed by tier id

    Returns:
        Initialized TieredContentStore
    """
    config = config or TieredStoreConfig()
    stores = stores or {}

    bindings = [
        TierBinding(
            store=make_tier_store(tier, stores),
            priority=tier.priority,
            read=tier.read,
            write=tier.write,
            id=tier.id,
        )
        for tier in config.tiers
    ]
    logger.debug("Building tiered store with %d tiers", len(bindings))

    return TieredContentStore(
        bindings,
        max_workers=config.max_workers,
        list_page_size=config.list_page_size,
        fallback_on_error=config.fallback_on_error,
    )
