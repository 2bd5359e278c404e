"""Tests for SyncBridge routing."""

from __future__ import annotations

import pytest

from display_client.sync_bridge import SyncBridge
from tests.mocks.mock_factories import RecordingStore

CONTENT = {
    "screen": {"name": "Main hall"},
    "schedule": {"items": [1]},
    "prayerTimes": {"fajr": "05:00"},
    "events": [{"id": "e1"}],
}


@pytest.mark.unit
class TestSyncBridgeRouting:
    """Test cache key to store method routing."""

    @pytest.mark.asyncio
    async def test_wrapped_content_extracts_sub_resources(
        self, store: RecordingStore
    ) -> None:
        """Content saves itself, then schedule, prayer times and events."""
        await SyncBridge(store).sync("cache_content", {"success": True, "data": CONTENT})

        assert store.calls == [
            ("save_screen_content", CONTENT),
            ("save_schedule", {"items": [1]}),
            ("save_prayer_times", {"fajr": "05:00"}),
            ("save_events", [{"id": "e1"}]),
        ]

    @pytest.mark.asyncio
    async def test_wrapped_and_raw_are_identical(self) -> None:
        """Enveloped and bare payloads produce the same store calls."""
        wrapped, raw = RecordingStore(), RecordingStore()
        await SyncBridge(wrapped).sync("cache_content", {"data": CONTENT})
        await SyncBridge(raw).sync("cache_content", CONTENT)

        assert wrapped.calls == raw.calls

    @pytest.mark.asyncio
    async def test_empty_sub_resources_skipped(self, store: RecordingStore) -> None:
        """Missing or empty schedule/prayerTimes/events are not saved."""
        await SyncBridge(store).sync("cache_content", {"screen": {}, "events": []})

        assert store.methods() == ["save_screen_content"]

    @pytest.mark.asyncio
    async def test_dated_prayer_times(self, store: RecordingStore) -> None:
        """Any prayer-times slot goes to save_prayer_times."""
        await SyncBridge(store).sync("cache_prayer_times_2024-03-01", {"data": [{"date": "x"}]})

        assert store.calls == [("save_prayer_times", [{"date": "x"}])]

    @pytest.mark.asyncio
    async def test_events(self, store: RecordingStore) -> None:
        """Events are unwrapped and saved."""
        await SyncBridge(store).sync("cache_events", {"data": [{"id": "e2"}]})

        assert store.calls == [("save_events", [{"id": "e2"}])]

    @pytest.mark.asyncio
    async def test_unknown_key_ignored(self, store: RecordingStore) -> None:
        """Sync status is not mirrored."""
        await SyncBridge(store).sync("cache_sync_status", {"data": {"x": 1}})

        assert store.calls == []


@pytest.mark.unit
class TestSyncBridgeFailures:
    """Test that store failures stay inside the bridge."""

    @pytest.mark.asyncio
    async def test_store_failure_swallowed(self) -> None:
        """A failing save does not raise."""
        store = RecordingStore(fail_on="save_schedule")
        await SyncBridge(store).sync("cache_content", CONTENT)

        assert store.methods() == ["save_screen_content"]

    @pytest.mark.asyncio
    async def test_spawn_and_drain(self, store: RecordingStore) -> None:
        """Spawned syncs complete once drained."""
        bridge = SyncBridge(store)
        bridge.spawn("cache_events", [{"id": "e3"}])
        assert bridge.pending == 1

        await bridge.drain()

        assert bridge.pending == 0
        assert store.calls == [("save_events", [{"id": "e3"}])]
