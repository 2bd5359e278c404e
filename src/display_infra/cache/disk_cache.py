"""diskcache-backed implementation of CacheStore."""

from __future__ import annotations

import asyncio
import sqlite3
from pathlib import Path
from typing import Any

import diskcache
import structlog

from display_core.models.cache import CachedEntry, now_ms

logger = structlog.get_logger()

# Failures that degrade to "no cached data" instead of propagating
STORAGE_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout, ValueError)


class DiskCacheStore:
    """Persistent response cache backed by diskcache (SQLite under the hood).

    Entries are stored as JSON-encoded ``CachedEntry`` strings with no
    diskcache expiry; TTL is informational and stale entries keep serving
    as offline fallback until overwritten or cleared.
    """

    def __init__(self, cache_dir: Path) -> None:
        """Initialize with a cache directory."""
        cache_dir.mkdir(parents=True, exist_ok=True)
        self._cache = diskcache.Cache(str(cache_dir))

    async def get(self, key: str) -> Any | None:
        """Retrieve stored data by key, stale or not."""
        entry = await self.get_entry(key)
        if entry is None:
            return None
        if entry.is_stale():
            logger.debug(
                "cache_entry_stale",
                key=key,
                age_ms=entry.age_ms(),
                ttl_ms=entry.ttl,
            )
        return entry.data

    async def get_entry(self, key: str) -> CachedEntry | None:
        """Retrieve the full cached entry by key."""
        try:
            raw = await asyncio.to_thread(self._cache.get, key)
            if raw is None:
                return None
            return CachedEntry.model_validate_json(raw)
        except STORAGE_ERRORS as exc:
            logger.error("cache_read_failed", key=key, error=str(exc))
            return None

    async def set(self, key: str, data: Any, ttl_ms: int) -> None:
        """Store data stamped with the current time."""
        try:
            entry = CachedEntry(data=data, timestamp=now_ms(), ttl=ttl_ms)
            await asyncio.to_thread(self._cache.set, key, entry.model_dump_json())
            logger.debug("cache_write", key=key, ttl_ms=ttl_ms)
        except STORAGE_ERRORS as exc:
            logger.error("cache_write_failed", key=key, error=str(exc))

    async def clear(self, key: str) -> None:
        """Delete a key from the cache."""
        try:
            await asyncio.to_thread(self._cache.delete, key)
        except STORAGE_ERRORS as exc:
            logger.error("cache_clear_failed", key=key, error=str(exc))

    async def clear_all(self) -> None:
        """Delete every key from the cache."""
        try:
            removed = await asyncio.to_thread(self._cache.clear)
            logger.info("cache_cleared", removed=removed)
        except STORAGE_ERRORS as exc:
            logger.error("cache_clear_all_failed", error=str(exc))

    def close(self) -> None:
        """Close the cache."""
        self._cache.close()
