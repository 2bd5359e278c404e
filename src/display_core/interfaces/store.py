"""Persisted application store fed by the sync bridge."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PersistedStore(Protocol):
    """Store that other parts of the display read from independently."""

    async def save_screen_content(self, content: Any) -> None:
        """Persist the unwrapped screen content."""
        ...

    async def save_schedule(self, schedule: Any) -> None:
        """Persist the content schedule."""
        ...

    async def save_prayer_times(self, prayer_times: Any) -> None:
        """Persist prayer times."""
        ...

    async def save_events(self, events: Any) -> None:
        """Persist upcoming events."""
        ...
