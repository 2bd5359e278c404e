"""Abstract response cache interface."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from display_core.models.cache import CachedEntry


@runtime_checkable
class CacheStore(Protocol):
    """Durable key -> timestamped payload store. Implementations never raise."""

    async def get(self, key: str) -> Any | None:
        """Return stored data regardless of staleness, or None if absent."""
        ...

    async def get_entry(self, key: str) -> CachedEntry | None:
        """Return the full entry including timestamp and TTL."""
        ...

    async def set(self, key: str, data: Any, ttl_ms: int) -> None:
        """Store data, stamping it with the current time. Last write wins."""
        ...

    async def clear(self, key: str) -> None:
        """Remove a single entry."""
        ...

    async def clear_all(self) -> None:
        """Remove every entry."""
        ...
