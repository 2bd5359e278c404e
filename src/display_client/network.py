"""Network observer: link state plus periodic API reachability probes.

Two independent axes feed one ``NetworkStatus``:

- link state, driven by ``handle_online()`` / ``handle_offline()``
  (wired to whatever reports interface up/down on the host), and
- API reachability, driven by ``HEAD /api/health`` probes bounded by a
  hard timeout.

Subscribers are notified only when ``is_online`` or ``is_api_reachable``
actually changes. A new subscriber receives the current status at once.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import structlog

from display_client.http.endpoints import build_url
from display_core.constants import HEALTH_ENDPOINT
from display_core.models.network import NetworkStatus

logger = structlog.get_logger()

NetworkStatusCallback = Callable[[NetworkStatus], None]


class NetworkObserver:
    """Tracks connectivity for one client instance."""

    def __init__(
        self,
        api_url: str,
        check_interval: float = 30.0,
        probe_timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
        initially_online: bool = True,
    ) -> None:
        """Initialize with the API base URL and probe timing."""
        self._health_url = build_url(api_url, HEALTH_ENDPOINT)
        self._check_interval = check_interval
        self._probe_timeout = probe_timeout
        self._client = client
        self._owns_client = client is None
        self._status = NetworkStatus(is_online=initially_online)
        self._callbacks: list[NetworkStatusCallback] = []
        self._loop_task: asyncio.Task[None] | None = None
        self._probe_tasks: set[asyncio.Task[Any]] = set()
        self._offline_count = 0

    @property
    def status(self) -> NetworkStatus:
        """Current status snapshot."""
        return self._status

    @property
    def is_online(self) -> bool:
        """Link-level connectivity."""
        return self._status.is_online

    @property
    def is_api_reachable(self) -> bool:
        """Result of the last reachability probe."""
        return self._status.is_api_reachable

    @property
    def running(self) -> bool:
        """True while the periodic probe loop is active."""
        return self._loop_task is not None and not self._loop_task.done()

    def subscribe(self, callback: NetworkStatusCallback) -> Callable[[], None]:
        """Register a callback and emit the current status to it immediately."""
        self._callbacks.append(callback)
        self._invoke(callback, self._status)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def handle_online(self) -> None:
        """Link came up: mark online and probe the API right away."""
        logger.info("network_link_up")
        self._update(is_online=True)
        self._schedule_probe()

    def handle_offline(self) -> None:
        """Link went down: nothing is reachable."""
        logger.info("network_link_down")
        self._offline_count += 1
        self._update(is_online=False, is_api_reachable=False)

    async def check_reachability(self) -> bool:
        """Probe the health endpoint once and update status."""
        if not self._status.is_online:
            self._update(is_api_reachable=False)
            return False

        offline_count = self._offline_count
        reachable = False
        responded = False
        try:
            async with asyncio.timeout(self._probe_timeout):
                response = await self._http().head(self._health_url)
            responded = True
            reachable = response.is_success
        except TimeoutError:
            logger.debug("network_probe_timeout", url=self._health_url)
        except httpx.HTTPError as exc:
            logger.debug("network_probe_failed", url=self._health_url, error=str(exc))

        if offline_count != self._offline_count:
            # Link dropped while the health check was in flight
            logger.debug("network_check_discarded", url=self._health_url)
            return False

        changes: dict[str, Any] = {
            "is_api_reachable": reachable,
            "last_checked": datetime.now(UTC).isoformat(),
        }
        if responded:
            changes["is_online"] = True
        self._update(**changes)
        return reachable

    async def start(self) -> None:
        """Start periodic probing (first probe runs immediately)."""
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._probe_loop(), name="network-observer")
        logger.info(
            "network_observer_started",
            url=self._health_url,
            interval=self._check_interval,
        )

    async def stop(self) -> None:
        """Stop periodic probing and any in-flight probes."""
        tasks = [t for t in (self._loop_task, *self._probe_tasks) if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._loop_task = None
        self._probe_tasks.clear()
        logger.info("network_observer_stopped")

    async def aclose(self) -> None:
        """Stop probing and close the probe client if this observer created it."""
        await self.stop()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _probe_loop(self) -> None:
        while True:
            await self.check_reachability()
            await asyncio.sleep(self._check_interval)

    def _schedule_probe(self) -> None:
        try:
            task = asyncio.get_running_loop().create_task(self.check_reachability())
        except RuntimeError:
            logger.debug("network_probe_deferred_no_loop")
            return
        self._probe_tasks.add(task)
        task.add_done_callback(self._probe_tasks.discard)

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._probe_timeout)
        return self._client

    def _update(self, **changes: Any) -> None:
        previous = self._status
        self._status = previous.model_copy(update=changes)
        if (
            previous.is_online == self._status.is_online
            and previous.is_api_reachable == self._status.is_api_reachable
        ):
            return
        logger.info(
            "network_status_changed",
            is_online=self._status.is_online,
            is_api_reachable=self._status.is_api_reachable,
        )
        for callback in list(self._callbacks):
            self._invoke(callback, self._status)

    def _invoke(self, callback: NetworkStatusCallback, status: NetworkStatus) -> None:
        try:
            callback(status)
        except Exception as exc:
            logger.error("network_callback_failed", error=str(exc))
