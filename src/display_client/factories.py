"""Construct the client's service graph from settings."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING

from display_client.api_client import DisplayApiClient
from display_client.fetcher import CacheAwareFetcher
from display_client.http.retry import RetryExecutor
from display_client.http.transport import ApiTransport
from display_client.network import NetworkObserver
from display_client.scheduler import SyncScheduler
from display_client.sync_bridge import SyncBridge
from display_infra.cache.disk_cache import DiskCacheStore
from display_infra.credentials.file_store import FileCredentialStore
from display_infra.store.disk_store import DiskPersistedStore

if TYPE_CHECKING:
    import httpx

    from display_core.config.settings import Settings


@dataclass
class DisplayServices:
    """Every long-lived object, built once and passed by reference."""

    settings: Settings
    credentials: FileCredentialStore
    cache: DiskCacheStore
    store: DiskPersistedStore
    network: NetworkObserver
    bridge: SyncBridge
    client: DisplayApiClient
    scheduler: SyncScheduler

    async def __aenter__(self) -> DisplayServices:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop background work, flush pending syncs and release resources."""
        await self.scheduler.stop()
        await self.network.aclose()
        await self.bridge.drain()
        await self.client.aclose()
        self.cache.close()
        self.store.close()


def build_services(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    probe_client: httpx.AsyncClient | None = None,
) -> DisplayServices:
    """Wire credentials, cache, store, observer, bridge and facade together."""
    credentials = FileCredentialStore(settings.credentials_file)
    cache = DiskCacheStore(settings.cache_dir)
    store = DiskPersistedStore(settings.store_dir)
    network = NetworkObserver(
        api_url=settings.api_url,
        check_interval=settings.health_check_interval_seconds,
        probe_timeout=settings.health_check_timeout_seconds,
        client=probe_client,
    )
    transport = ApiTransport(
        base_url=settings.api_url,
        credentials=credentials,
        timeout=settings.request_timeout_seconds,
        client=http_client,
    )
    executor = RetryExecutor(
        transport=transport,
        network=network,
        max_retries=settings.max_retries,
        initial_delay_ms=settings.initial_retry_delay_ms,
        max_delay_ms=settings.max_retry_delay_ms,
    )
    bridge = SyncBridge(store)
    fetcher = CacheAwareFetcher(executor=executor, cache=cache, bridge=bridge, network=network)
    client = DisplayApiClient(
        settings=settings,
        transport=transport,
        executor=executor,
        fetcher=fetcher,
        cache=cache,
        credentials=credentials,
        network=network,
    )
    scheduler = SyncScheduler(client=client, network=network, settings=settings)
    return DisplayServices(
        settings=settings,
        credentials=credentials,
        cache=cache,
        store=store,
        network=network,
        bridge=bridge,
        client=client,
        scheduler=scheduler,
    )
