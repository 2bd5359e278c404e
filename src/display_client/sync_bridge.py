"""Mirror freshly fetched resources into the persisted application store."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from display_client.envelope import is_envelope, unwrap_envelope
from display_core.constants import (
    CACHE_KEY_CONTENT,
    CACHE_KEY_EVENTS,
    CACHE_KEY_PRAYER_TIMES,
)

if TYPE_CHECKING:
    from display_core.interfaces.store import PersistedStore

logger = structlog.get_logger()

# Content sub-resources republished on their own, in store-method order
CONTENT_SUB_RESOURCES = (
    ("schedule", "save_schedule"),
    ("prayerTimes", "save_prayer_times"),
    ("events", "save_events"),
)


class SyncBridge:
    """Best-effort republishing of fetched payloads.

    ``sync`` never raises: the fetch that produced the payload has already
    succeeded and a store failure must not undo it. ``spawn`` runs ``sync``
    as a tracked background task; ``drain`` waits for outstanding tasks.
    """

    def __init__(self, store: PersistedStore) -> None:
        """Initialize with the store that receives synchronized data."""
        self._store = store
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of background sync tasks still running."""
        return len(self._tasks)

    def spawn(self, cache_key: str, payload: Any) -> asyncio.Task[None]:
        """Start a background sync for a payload and return its task."""
        task = asyncio.create_task(self.sync(cache_key, payload), name=f"sync:{cache_key}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every background sync started so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def sync(self, cache_key: str, payload: Any) -> None:
        """Route a payload to the store methods for its cache key."""
        try:
            await self._route(cache_key, payload)
        except Exception as exc:
            logger.error(
                "sync_bridge_failed",
                cache_key=cache_key,
                error_type=type(exc).__name__,
                error=str(exc),
            )

    async def _route(self, cache_key: str, payload: Any) -> None:
        resource = unwrap_envelope(payload)

        if cache_key == CACHE_KEY_CONTENT:
            await self._sync_content(resource, wrapped=is_envelope(payload))
        elif cache_key.startswith(CACHE_KEY_PRAYER_TIMES):
            await self._store.save_prayer_times(resource)
            logger.debug("sync_prayer_times_saved", cache_key=cache_key)
        elif cache_key == CACHE_KEY_EVENTS:
            await self._store.save_events(resource)
            logger.debug("sync_events_saved")
        else:
            logger.debug("sync_not_mirrored", cache_key=cache_key)

    async def _sync_content(self, content: Any, wrapped: bool) -> None:
        await self._store.save_screen_content(content)
        logger.debug("sync_content_saved", wrapped=wrapped)

        if not isinstance(content, Mapping):
            return
        for field, method_name in CONTENT_SUB_RESOURCES:
            value = content.get(field)
            if not value:
                continue
            await getattr(self._store, method_name)(value)
            logger.debug("sync_content_extracted", field=field)
