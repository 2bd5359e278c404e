"""Periodic content refresh and heartbeat loops."""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from display_client.envelope import unwrap_envelope
from display_core.models.api import HeartbeatMetrics, HeartbeatRequest, RemoteCommand
from display_core.models.result import ApiResult

if TYPE_CHECKING:
    from display_client.api_client import DisplayApiClient
    from display_client.network import NetworkObserver
    from display_core.config.settings import Settings
    from display_core.models.network import NetworkStatus

logger = structlog.get_logger()


def _parse_commands(payload: Any) -> list[RemoteCommand]:
    """Extract queued remote commands from a heartbeat response."""
    body = unwrap_envelope(payload)
    raw = body.get("commands") if isinstance(body, Mapping) else None
    if not isinstance(raw, list):
        return []
    commands: list[RemoteCommand] = []
    for item in raw:
        try:
            commands.append(RemoteCommand.model_validate(item))
        except ValidationError as exc:
            logger.warning("remote_command_invalid", error=str(exc))
    return commands


class SyncScheduler:
    """Keeps cached resources fresh and reports liveness.

    Cycles are skipped while offline or unpaired. Coming back online
    triggers an immediate refresh instead of waiting for the next tick.
    """

    def __init__(
        self,
        client: DisplayApiClient,
        network: NetworkObserver,
        settings: Settings,
    ) -> None:
        """Initialize with the API facade, network observer and settings."""
        self._client = client
        self._network = network
        self._settings = settings
        self._started_at = time.monotonic()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._unsubscribe: Callable[[], None] | None = None
        self._was_online: bool | None = None
        self.last_sync_at: float | None = None
        self.last_heartbeat_at: float | None = None
        self.pending_commands: list[RemoteCommand] = []

    def _ready(self) -> bool:
        return self._network.is_online and self._client.is_authenticated()

    async def run_sync_cycle(self) -> dict[str, ApiResult[Any]]:
        """Refresh content, today's prayer times and events once."""
        if not self._ready():
            logger.debug("sync_cycle_skipped", online=self._network.is_online)
            return {}

        results: dict[str, ApiResult[Any]] = {
            "content": await self._client.get_content(),
            "prayer_times": await self._client.get_prayer_times(),
            "events": await self._client.get_events(self._settings.events_limit),
        }
        self.last_sync_at = time.time()
        logger.info(
            "sync_cycle_complete",
            **{
                name: ("cache" if r.from_cache else "live") if r.success else "failed"
                for name, r in results.items()
            },
        )
        return results

    async def send_heartbeat_once(self) -> ApiResult[Any] | None:
        """Send one heartbeat; returns None when skipped."""
        if not self._ready():
            logger.debug("heartbeat_skipped", online=self._network.is_online)
            return None

        request = HeartbeatRequest(
            status="online",
            app_version=self._settings.app_version,
            metrics=HeartbeatMetrics(uptime=int(time.monotonic() - self._started_at)),
        )
        result = await self._client.send_heartbeat(request)
        self.last_heartbeat_at = time.time()
        if result.success:
            self.pending_commands.extend(_parse_commands(result.data))
            logger.debug("heartbeat_sent", pending_commands=len(self.pending_commands))
        else:
            logger.warning("heartbeat_failed", error=result.error, status=result.status_code)
        return result

    def start(self) -> None:
        """Start both loops and follow network transitions."""
        if self._tasks:
            return
        self._unsubscribe = self._network.subscribe(self._on_network_change)
        self._spawn(
            self._loop(self.run_sync_cycle, self._settings.content_sync_interval_seconds),
            "content-sync",
        )
        self._spawn(
            self._loop(self.send_heartbeat_once, self._settings.heartbeat_interval_seconds),
            "heartbeat",
        )
        logger.info(
            "scheduler_started",
            sync_interval=self._settings.content_sync_interval_seconds,
            heartbeat_interval=self._settings.heartbeat_interval_seconds,
        )

    async def stop(self) -> None:
        """Cancel both loops and any pending on-reconnect refresh."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
        self._was_online = None
        logger.info("scheduler_stopped")

    def _on_network_change(self, status: NetworkStatus) -> None:
        previous, self._was_online = self._was_online, status.is_online
        if previous is False and status.is_online:
            logger.info("scheduler_reconnected_refreshing")
            self._spawn(self.run_sync_cycle(), "reconnect-sync")

    async def _loop(self, job: Callable[[], Any], interval: float) -> None:
        while True:
            try:
                await job()
            except Exception as exc:
                logger.error("scheduler_job_failed", job=job.__name__, error=str(exc))
            await asyncio.sleep(interval)

    def _spawn(self, coro: Any, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
