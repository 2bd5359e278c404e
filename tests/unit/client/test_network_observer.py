"""Tests for NetworkObserver."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from display_client.network import NetworkObserver
from display_core.models.network import NetworkStatus
from tests.mocks.mock_factories import (
    BASE_URL,
    RequestLog,
    json_handler,
    make_http_client,
)


def _observer(
    log: RequestLog, online: bool = True, probe_timeout: float = 1.0
) -> NetworkObserver:
    """Observer whose probes go through the request log."""
    return NetworkObserver(
        BASE_URL,
        probe_timeout=probe_timeout,
        client=make_http_client(log),
        initially_online=online,
    )


@pytest.mark.unit
class TestSubscriptions:
    """Test callback delivery."""

    def test_subscribe_emits_current_status(self) -> None:
        """A new subscriber is called immediately."""
        observer = _observer(RequestLog(json_handler({})))
        seen: list[NetworkStatus] = []
        observer.subscribe(seen.append)

        assert seen == [NetworkStatus(is_online=True, is_api_reachable=False)]

    def test_offline_notifies_once(self) -> None:
        """Repeated offline events produce one notification."""
        observer = _observer(RequestLog(json_handler({})))
        seen: list[NetworkStatus] = []
        observer.subscribe(seen.append)

        observer.handle_offline()
        observer.handle_offline()

        assert len(seen) == 2
        assert seen[-1].is_online is False
        assert seen[-1].is_api_reachable is False

    def test_unsubscribe(self) -> None:
        """An unsubscribed callback is no longer called."""
        observer = _observer(RequestLog(json_handler({})))
        seen: list[NetworkStatus] = []
        unsubscribe = observer.subscribe(seen.append)
        unsubscribe()

        observer.handle_offline()

        assert len(seen) == 1

    def test_failing_callback_isolated(self) -> None:
        """One raising subscriber does not block the others."""
        observer = _observer(RequestLog(json_handler({})))

        def broken(status: NetworkStatus) -> None:
            raise RuntimeError("subscriber bug")

        seen: list[NetworkStatus] = []
        observer.subscribe(broken)
        observer.subscribe(seen.append)
        observer.handle_offline()

        assert seen[-1].is_online is False


@pytest.mark.unit
class TestReachability:
    """Test health probes."""

    @pytest.mark.asyncio
    async def test_offline_skips_probe(self) -> None:
        """While offline no request is made."""
        log = RequestLog(json_handler({}))
        observer = _observer(log, online=False)

        assert await observer.check_reachability() is False
        assert log.count == 0
        assert observer.is_api_reachable is False

    @pytest.mark.asyncio
    async def test_healthy_probe(self) -> None:
        """A 2xx HEAD marks the API reachable."""
        log = RequestLog(json_handler({}))
        observer = _observer(log)

        assert await observer.check_reachability() is True
        assert observer.is_api_reachable is True
        assert observer.status.last_checked is not None
        assert log.requests[0].method == "HEAD"
        assert str(log.requests[0].url) == "https://api.test/api/health"

    @pytest.mark.asyncio
    async def test_error_status_unreachable_but_online(self) -> None:
        """Any response proves the link; only 2xx proves the API."""
        observer = _observer(RequestLog(json_handler({}, status_code=503)))

        assert await observer.check_reachability() is False
        assert observer.is_online is True
        assert observer.is_api_reachable is False

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """Transport failures mark the API unreachable."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        observer = _observer(RequestLog(handler))
        await observer.check_reachability()
        assert observer.is_api_reachable is False

    @pytest.mark.asyncio
    async def test_probe_timeout(self) -> None:
        """A hanging probe is abandoned after the timeout."""

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200)

        observer = _observer(RequestLog(handler), probe_timeout=0.05)

        assert await observer.check_reachability() is False
        assert observer.status.last_checked is not None

    @pytest.mark.asyncio
    async def test_link_down_mid_check_wins(self) -> None:
        """A health check finishing after handle_offline() does not restore online."""
        started = asyncio.Event()
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200)

        observer = _observer(RequestLog(handler))
        seen: list[NetworkStatus] = []
        observer.subscribe(seen.append)

        check = asyncio.create_task(observer.check_reachability())
        await asyncio.wait_for(started.wait(), timeout=1.0)
        observer.handle_offline()
        release.set()

        assert await check is False
        assert observer.is_online is False
        assert observer.is_api_reachable is False
        assert [s.is_online for s in seen] == [True, False]

    @pytest.mark.asyncio
    async def test_check_after_link_restored_applies(self) -> None:
        """Checks started after a link-down/up cycle update status normally."""
        observer = _observer(RequestLog(json_handler({})))
        observer.handle_offline()
        observer._update(is_online=True)

        assert await observer.check_reachability() is True
        assert observer.is_api_reachable is True

    @pytest.mark.asyncio
    async def test_repeat_probe_does_not_renotify(self) -> None:
        """Only a change in online/reachable notifies subscribers."""
        observer = _observer(RequestLog(json_handler({})))
        seen: list[NetworkStatus] = []
        observer.subscribe(seen.append)

        await observer.check_reachability()
        await observer.check_reachability()

        assert len(seen) == 2
        assert seen[-1].is_api_reachable is True

    @pytest.mark.asyncio
    async def test_online_event_triggers_probe(self) -> None:
        """Coming back online probes the API without waiting for the loop."""
        observer = _observer(RequestLog(json_handler({})), online=False)
        reachable = asyncio.Event()
        observer.subscribe(lambda s: reachable.set() if s.is_api_reachable else None)

        observer.handle_online()
        await asyncio.wait_for(reachable.wait(), timeout=1.0)

        assert observer.is_online is True
        assert observer.is_api_reachable is True


@pytest.mark.unit
class TestLifecycle:
    """Test start/stop of the probe loop."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        """The loop probes immediately and stops cleanly."""
        log = RequestLog(json_handler({}))
        observer = _observer(log)
        reachable = asyncio.Event()
        observer.subscribe(lambda s: reachable.set() if s.is_api_reachable else None)

        await observer.start()
        assert observer.running is True
        await asyncio.wait_for(reachable.wait(), timeout=1.0)

        await observer.aclose()
        assert observer.running is False
        assert log.count >= 1
