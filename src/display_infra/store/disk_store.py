"""diskcache-backed persisted application store."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import diskcache
import structlog

logger = structlog.get_logger()

KEY_SCREEN_CONTENT = "screen_content"
KEY_SCHEDULE = "schedule"
KEY_PRAYER_TIMES = "prayer_times"
KEY_EVENTS = "events"
KEY_LAST_UPDATED = "last_updated"


class DiskPersistedStore:
    """Application store that display components read from.

    Each resource lives under its own key; ``last_updated`` records the
    ISO time of the latest save per resource. Write errors propagate so
    the sync bridge can log them.
    """

    def __init__(self, store_dir: Path) -> None:
        """Initialize with a store directory."""
        store_dir.mkdir(parents=True, exist_ok=True)
        self._store = diskcache.Cache(str(store_dir))

    async def _save(self, key: str, value: Any) -> None:
        """Persist a value and stamp its last-updated time."""
        await asyncio.to_thread(self._store.set, key, value)
        stamp = datetime.now(UTC).isoformat()

        def _touch() -> None:
            with self._store.transact():
                updated = dict(self._store.get(KEY_LAST_UPDATED) or {})
                updated[key] = stamp
                self._store.set(KEY_LAST_UPDATED, updated)

        await asyncio.to_thread(_touch)
        logger.debug("store_saved", key=key)

    async def _load(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._store.get, key)

    async def save_screen_content(self, content: Any) -> None:
        """Persist the unwrapped screen content."""
        await self._save(KEY_SCREEN_CONTENT, content)

    async def get_screen_content(self) -> Any | None:
        """Return the last saved screen content."""
        return await self._load(KEY_SCREEN_CONTENT)

    async def save_schedule(self, schedule: Any) -> None:
        """Persist the content schedule (object or list)."""
        await self._save(KEY_SCHEDULE, schedule)

    async def get_schedule(self) -> Any | None:
        """Return the last saved schedule."""
        return await self._load(KEY_SCHEDULE)

    async def save_prayer_times(self, prayer_times: Any) -> None:
        """Persist prayer times."""
        await self._save(KEY_PRAYER_TIMES, prayer_times)

    async def get_prayer_times(self) -> Any | None:
        """Return the last saved prayer times."""
        return await self._load(KEY_PRAYER_TIMES)

    async def save_events(self, events: Any) -> None:
        """Persist events."""
        await self._save(KEY_EVENTS, events)

    async def get_events(self) -> Any | None:
        """Return the last saved events."""
        return await self._load(KEY_EVENTS)

    async def get_last_updated(self) -> dict[str, str]:
        """Return resource -> ISO timestamp of its latest save."""
        value = await self._load(KEY_LAST_UPDATED)
        return dict(value or {})

    def close(self) -> None:
        """Close the store."""
        self._store.close()
