"""Tests for CacheAwareFetcher."""

from __future__ import annotations

import pytest

from display_client.fetcher import CacheAwareFetcher
from display_client.http.retry import RetryExecutor
from display_client.http.transport import ApiTransport
from display_client.network import NetworkObserver
from display_client.sync_bridge import SyncBridge
from display_core.models.cache import CachedEntry
from tests.mocks.mock_factories import (
    BASE_URL,
    MemoryCache,
    RecordingSleep,
    RecordingStore,
    RequestLog,
    StaticCredentials,
    make_http_client,
    make_network,
    status_sequence,
)

ENDPOINT = "/api/screen/events"
KEY = "cache_events"
TTL = 60_000


def _fetcher(
    log: RequestLog,
    cache: MemoryCache,
    store: RecordingStore,
    network: NetworkObserver,
) -> tuple[CacheAwareFetcher, SyncBridge]:
    """Wire a fetcher with a zero-retry executor over a mock transport."""
    transport = ApiTransport(BASE_URL, StaticCredentials(), client=make_http_client(log))
    executor = RetryExecutor(
        transport=transport, network=network, max_retries=0, sleep=RecordingSleep()
    )
    bridge = SyncBridge(store)
    return CacheAwareFetcher(executor, cache, bridge, network), bridge


@pytest.mark.unit
class TestFetchOnline:
    """Test network-first behavior."""

    @pytest.mark.asyncio
    async def test_success_writes_cache_and_syncs(
        self,
        memory_cache: MemoryCache,
        store: RecordingStore,
        network: NetworkObserver,
    ) -> None:
        """A live success is cached and handed to the bridge."""
        body = {"data": [{"id": "e1"}]}
        log = RequestLog(status_sequence(200, body=body))
        fetcher, bridge = _fetcher(log, memory_cache, store, network)

        result = await fetcher.fetch_with_cache(ENDPOINT, KEY, TTL)
        await bridge.drain()

        assert result.success is True
        assert result.from_cache is False
        assert result.data == body
        entry = memory_cache.entries[KEY]
        assert entry.data == body
        assert entry.ttl == TTL
        assert store.calls == [("save_events", [{"id": "e1"}])]

    @pytest.mark.asyncio
    async def test_params_in_url(
        self,
        memory_cache: MemoryCache,
        store: RecordingStore,
        network: NetworkObserver,
    ) -> None:
        """Params are encoded onto the request URL; None is dropped."""
        log = RequestLog(status_sequence(200))
        fetcher, bridge = _fetcher(log, memory_cache, store, network)

        await fetcher.fetch_with_cache(ENDPOINT, KEY, TTL, {"limit": 5, "after": None})
        await bridge.drain()

        assert str(log.requests[0].url) == "https://api.test/api/screen/events?limit=5"

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_cache(
        self,
        memory_cache: MemoryCache,
        store: RecordingStore,
        network: NetworkObserver,
    ) -> None:
        """A failed request serves the cached copy with from_cache=True."""
        await memory_cache.set(KEY, [{"id": "old"}], TTL)
        log = RequestLog(status_sequence(500))
        fetcher, _ = _fetcher(log, memory_cache, store, network)

        result = await fetcher.fetch_with_cache(ENDPOINT, KEY, TTL)

        assert result.success is True
        assert result.from_cache is True
        assert result.data == [{"id": "old"}]
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_failure_without_cache(
        self,
        memory_cache: MemoryCache,
        store: RecordingStore,
        network: NetworkObserver,
    ) -> None:
        """A failed request with an empty cache reports the request failure."""
        log = RequestLog(status_sequence(500))
        fetcher, _ = _fetcher(log, memory_cache, store, network)

        result = await fetcher.fetch_with_cache(ENDPOINT, KEY, TTL)

        assert result.success is False
        assert result.error == "request failed and no cache available"

    @pytest.mark.asyncio
    async def test_stale_entry_still_served(
        self,
        memory_cache: MemoryCache,
        store: RecordingStore,
        network: NetworkObserver,
    ) -> None:
        """Entries past their TTL remain an offline fallback."""
        memory_cache.entries[KEY] = CachedEntry(data={"v": 1}, timestamp=0, ttl=1)
        log = RequestLog(status_sequence(503))
        fetcher, _ = _fetcher(log, memory_cache, store, network)

        result = await fetcher.fetch_with_cache(ENDPOINT, KEY, TTL)

        assert result.from_cache is True
        assert result.data == {"v": 1}


@pytest.mark.unit
class TestFetchOffline:
    """Test cache-only behavior while offline."""

    @pytest.mark.asyncio
    async def test_offline_never_touches_network(
        self, memory_cache: MemoryCache, store: RecordingStore
    ) -> None:
        """Offline reads the cache without any request."""
        await memory_cache.set(KEY, [1], TTL)
        log = RequestLog(status_sequence(200))
        fetcher, _ = _fetcher(log, memory_cache, store, make_network(online=False))

        result = await fetcher.fetch_with_cache(ENDPOINT, KEY, TTL)

        assert log.count == 0
        assert result.from_cache is True
        assert result.data == [1]

    @pytest.mark.asyncio
    async def test_offline_without_cache(
        self, memory_cache: MemoryCache, store: RecordingStore
    ) -> None:
        """Offline with an empty cache reports the offline failure."""
        log = RequestLog(status_sequence(200))
        fetcher, _ = _fetcher(log, memory_cache, store, make_network(online=False))

        result = await fetcher.fetch_with_cache(ENDPOINT, KEY, TTL)

        assert log.count == 0
        assert result.success is False
        assert result.error == "offline and no cache available"
