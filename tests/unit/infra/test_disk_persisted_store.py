"""Tests for DiskPersistedStore."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from display_core.interfaces.store import PersistedStore
from display_infra.store.disk_store import DiskPersistedStore


@pytest.fixture
def persisted_store(tmp_path: Path) -> Iterator[DiskPersistedStore]:
    """Create a temporary DiskPersistedStore."""
    store = DiskPersistedStore(tmp_path / "store")
    yield store
    store.close()


@pytest.mark.unit
class TestDiskPersistedStore:
    """Test save/get pairs and update stamps."""

    def test_satisfies_protocol(self, persisted_store: DiskPersistedStore) -> None:
        """DiskPersistedStore is a PersistedStore."""
        assert isinstance(persisted_store, PersistedStore)

    @pytest.mark.asyncio
    async def test_empty_store(self, persisted_store: DiskPersistedStore) -> None:
        """Nothing saved reads as None and no stamps."""
        assert await persisted_store.get_screen_content() is None
        assert await persisted_store.get_last_updated() == {}

    @pytest.mark.asyncio
    async def test_round_trip_each_resource(self, persisted_store: DiskPersistedStore) -> None:
        """Each resource is stored under its own key."""
        await persisted_store.save_screen_content({"screen": 1})
        await persisted_store.save_schedule([{"slot": 1}])
        await persisted_store.save_prayer_times({"fajr": "05:00"})
        await persisted_store.save_events([{"id": "e1"}])

        assert await persisted_store.get_screen_content() == {"screen": 1}
        assert await persisted_store.get_schedule() == [{"slot": 1}]
        assert await persisted_store.get_prayer_times() == {"fajr": "05:00"}
        assert await persisted_store.get_events() == [{"id": "e1"}]

    @pytest.mark.asyncio
    async def test_last_updated_per_resource(
        self, persisted_store: DiskPersistedStore
    ) -> None:
        """Saves record an ISO timestamp per resource."""
        await persisted_store.save_events([])
        await persisted_store.save_prayer_times({})

        stamps = await persisted_store.get_last_updated()
        assert set(stamps) == {"events", "prayer_times"}
        assert "T" in stamps["events"]
