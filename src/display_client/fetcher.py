"""Read-through caching with offline fallback."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from display_client.http.endpoints import QueryValue, build_path_with_params
from display_client.http.retry import ApiRequest
from display_core.constants import ERROR_OFFLINE_NO_CACHE, ERROR_REQUEST_FAILED_NO_CACHE
from display_core.models.result import ApiResult

if TYPE_CHECKING:
    from display_client.http.retry import RetryExecutor
    from display_client.network import NetworkObserver
    from display_client.sync_bridge import SyncBridge
    from display_core.interfaces.cache import CacheStore

logger = structlog.get_logger()


class CacheAwareFetcher:
    """Network first when online, cache when the network fails or is down.

    A live success is written through to the cache and handed to the
    sync bridge as a background task. A cache hit is marked
    ``from_cache=True``.
    """

    def __init__(
        self,
        executor: RetryExecutor,
        cache: CacheStore,
        bridge: SyncBridge,
        network: NetworkObserver,
    ) -> None:
        """Initialize with the retry executor, cache, sync bridge and observer."""
        self._executor = executor
        self._cache = cache
        self._bridge = bridge
        self._network = network

    async def fetch_with_cache(
        self,
        endpoint: str,
        cache_key: str,
        ttl_ms: int,
        params: Mapping[str, QueryValue] | None = None,
    ) -> ApiResult[Any]:
        """GET an endpoint through the cache."""
        path = build_path_with_params(endpoint, params)

        if self._network.is_online:
            result = await self._executor.execute(ApiRequest(method="GET", path=path))
            if result.success:
                await self._cache.set(cache_key, result.data, ttl_ms)
                self._bridge.spawn(cache_key, result.data)
                return result
            logger.warning("fetch_network_failed_trying_cache", path=path, cache_key=cache_key)
        else:
            logger.info("fetch_offline_using_cache", path=path, cache_key=cache_key)

        cached = await self._cache.get(cache_key)
        if cached is not None:
            logger.info("fetch_served_from_cache", cache_key=cache_key)
            return ApiResult.cached(cached)

        error = ERROR_REQUEST_FAILED_NO_CACHE if self._network.is_online else ERROR_OFFLINE_NO_CACHE
        return ApiResult.fail(error)
