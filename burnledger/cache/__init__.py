"""Tiered cache in front of the aggregate resources."""

from burnledger.cache.aggregates import AggregateService
from burnledger.cache.clear import clear_cache_files
from burnledger.cache.tiered import CacheEntry, CacheService, DiskTier, MemoryTier, TierConfig

__all__ = [
    "AggregateService",
    "CacheEntry",
    "CacheService",
    "DiskTier",
    "MemoryTier",
    "TierConfig",
    "clear_cache_files",
]
