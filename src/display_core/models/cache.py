"""Cached response entry model."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, Field


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class CachedEntry(BaseModel):
    """A cached payload stamped by the cache layer at write time."""

    data: Any = Field(description="Raw response body as fetched")
    timestamp: int = Field(description="Epoch ms when the entry was written")
    ttl: int = Field(description="Freshness window in ms (informational only)")

    def age_ms(self, now: int | None = None) -> int:
        """Milliseconds since the entry was written."""
        return (now if now is not None else now_ms()) - self.timestamp

    def is_stale(self, now: int | None = None) -> bool:
        """True once the entry is older than its TTL. Stale entries are still served."""
        return self.age_ms(now) > self.ttl
