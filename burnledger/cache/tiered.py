"""Two-tier (memory, disk) cache for the aggregate resources.

Freshness is decided by entry age against the tier's max age, never by
content. Failed upstream reads are not cached.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from burnledger.cache.clear import clear_cache_files
from burnledger.exceptions import StaleCacheError, UpstreamError
from burnledger.models.enums import CacheResource, CacheSource
from burnledger.models.reports import CacheClearResult, CacheResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierConfig:
    memory_max_age: float
    disk_max_age: float


DEFAULT_TIERS: dict[CacheResource, TierConfig] = {
    CacheResource.PRICE: TierConfig(memory_max_age=120, disk_max_age=60),
    CacheResource.TOTAL_BURNED: TierConfig(memory_max_age=120, disk_max_age=90),
    CacheResource.RECENT_BURNS: TierConfig(memory_max_age=300, disk_max_age=60),
}

CACHE_FILENAMES: dict[CacheResource, str] = {
    CacheResource.PRICE: "price-cache.json",
    CacheResource.TOTAL_BURNED: "total-burned-cache.json",
    CacheResource.RECENT_BURNS: "burns-cache.json",
}


class CacheEntry(BaseModel):
    data: Any
    last_updated: float
    source: CacheSource = CacheSource.UPSTREAM

    def check_fresh(self, key: str, max_age: float, now: float) -> "CacheEntry":
        age = now - self.last_updated
        if age > max_age:
            raise StaleCacheError(key, age, max_age)
        return self


class MemoryTier:
    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count


class DiskTier:
    """One JSON file per resource. Any read problem is treated as a miss."""

    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)

    def path_for(self, resource: CacheResource) -> Path:
        return self.cache_dir / CACHE_FILENAMES[resource]

    def get(self, resource: CacheResource) -> CacheEntry | None:
        path = self.path_for(resource)
        if not path.exists():
            return None
        try:
            return CacheEntry.model_validate_json(path.read_text())
        except (OSError, ValueError, ValidationError) as exc:
            logger.debug("Ignoring unreadable cache file %s: %s", path, exc)
            return None

    def put(self, resource: CacheResource, entry: CacheEntry) -> None:
        path = self.path_for(resource)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(entry.model_dump_json())
        except OSError as exc:
            logger.warning("Failed to write cache file %s: %s", path, exc)

    def paths(self) -> list[Path]:
        return [self.path_for(resource) for resource in CACHE_FILENAMES]


class CacheService:
    """Read-through cache: memory, then disk, then the upstream fetch."""

    def __init__(
        self,
        cache_dir: Path,
        tiers: dict[CacheResource, TierConfig] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.tiers = {**DEFAULT_TIERS, **(tiers or {})}
        self.memory = MemoryTier()
        self.disk = DiskTier(cache_dir)
        self.clock = clock

    def lookup(self, resource: CacheResource) -> CacheResult | None:
        """Return the freshest valid cached value, or None."""
        config = self.tiers[resource]
        now = self.clock()

        # Readers are called in order so the disk file is only read on a memory miss.
        candidates = (
            (CacheSource.MEMORY, self.memory.get, config.memory_max_age),
            (CacheSource.DISK, self.disk.get, config.disk_max_age),
        )
        for source, read, max_age in candidates:
            entry = read(resource)
            if entry is None:
                continue
            try:
                entry.check_fresh(resource, max_age, now)
            except StaleCacheError as exc:
                logger.debug("%s tier miss: %s", source, exc)
                continue
            return CacheResult(data=entry.data, source=source, cached=True, last_updated=entry.last_updated)
        return None

    def store(self, resource: CacheResource, data: Any) -> CacheEntry:
        entry = CacheEntry(data=data, last_updated=self.clock(), source=CacheSource.UPSTREAM)
        self.memory.put(resource, entry)
        self.disk.put(resource, entry)
        return entry

    def get_or_fetch(self, resource: CacheResource, fetch: Callable[[], Any]) -> CacheResult | None:
        """Serve from cache when fresh; otherwise call ``fetch`` and repopulate both tiers.

        Returns None when no tier is valid and the upstream read fails.
        """
        cached = self.lookup(resource)
        if cached is not None:
            return cached

        try:
            data = fetch()
        except UpstreamError as exc:
            logger.warning("Upstream read for %s failed: %s", resource, exc)
            return self.lookup(resource)

        entry = self.store(resource, data)
        return CacheResult(data=data, source=CacheSource.UPSTREAM, cached=False, last_updated=entry.last_updated)

    def clear(self) -> list[CacheClearResult]:
        """Empty the memory tier and delete every known cache file."""
        dropped = self.memory.clear()
        logger.info("Cleared %d in-memory cache entries", dropped)
        return clear_cache_files(self.disk.paths())
