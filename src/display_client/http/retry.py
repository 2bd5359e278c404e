"""Bounded exponential-backoff retry around a single API request."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from display_core.constants import NON_RETRYABLE_STATUS_CODES
from display_core.models.result import ApiResult

if TYPE_CHECKING:
    from display_client.http.transport import ApiTransport
    from display_client.network import NetworkObserver

logger = structlog.get_logger()


@dataclass(frozen=True)
class ApiRequest:
    """Description of one outbound request."""

    method: str
    path: str
    json: Any | None = None


def _last_result(retry_state: RetryCallState) -> ApiResult[Any]:
    """Return the final failed attempt once attempts are exhausted."""
    assert retry_state.outcome is not None
    result: ApiResult[Any] = retry_state.outcome.result()
    return result


class RetryExecutor:
    """Runs a request, retrying retryable failures with doubling backoff.

    Every attempt yields an ``ApiResult``; the retry decision is made on
    that value. 401/403/404 and an offline network stop immediately.
    ``max_retries`` counts retries after the first attempt.
    """

    def __init__(
        self,
        transport: ApiTransport,
        network: NetworkObserver,
        max_retries: int = 3,
        initial_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize with a transport, network observer and backoff policy."""
        self._transport = transport
        self._network = network
        self._max_retries = max_retries
        self._initial_delay = initial_delay_ms / 1000
        self._max_delay = max_delay_ms / 1000
        self._sleep = sleep

    async def execute(
        self, request: ApiRequest, max_retries: int | None = None
    ) -> ApiResult[Any]:
        """Attempt the request until it succeeds or retrying stops."""
        retries = self._max_retries if max_retries is None else max_retries
        retrying = AsyncRetrying(
            stop=stop_after_attempt(retries + 1),
            wait=wait_exponential(multiplier=self._initial_delay, max=self._max_delay),
            retry=retry_if_result(lambda result: self._should_retry(result, request)),
            before_sleep=lambda state: self._log_retry(state, request, retries),
            retry_error_callback=_last_result,
            sleep=self._sleep,
        )
        result: ApiResult[Any] = await retrying(self._attempt, request)
        if not result.success:
            logger.warning(
                "api_request_failed",
                method=request.method,
                path=request.path,
                status=result.status_code,
                error=result.error,
            )
        return result

    async def _attempt(self, request: ApiRequest) -> ApiResult[Any]:
        """Run one attempt, converting transport errors into a failed result."""
        try:
            response = await self._transport.send(request.method, request.path, request.json)
        except httpx.TimeoutException as exc:
            return ApiResult.fail(f"Request timed out: {str(exc) or type(exc).__name__}")
        except httpx.HTTPError as exc:
            return ApiResult.fail(str(exc) or type(exc).__name__)

        if not response.is_success:
            return ApiResult.fail(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return ApiResult.ok({}, status_code=response.status_code)
        try:
            body = response.json()
        except ValueError:
            return ApiResult.fail(
                "Response body is not valid JSON", status_code=response.status_code
            )
        if body is None:
            body = {}
        return ApiResult.ok(body, status_code=response.status_code)

    def _should_retry(self, result: ApiResult[Any], request: ApiRequest) -> bool:
        if result.success:
            return False
        if result.status_code in NON_RETRYABLE_STATUS_CODES:
            logger.warning("api_non_retryable", status=result.status_code, path=request.path)
            return False
        if not self._network.is_online:
            logger.warning("api_offline_not_retrying", path=request.path)
            return False
        return True

    def _log_retry(self, state: RetryCallState, request: ApiRequest, retries: int) -> None:
        delay = state.next_action.sleep if state.next_action else 0.0
        logger.debug(
            "api_retrying",
            attempt=state.attempt_number,
            max_retries=retries,
            delay_ms=int(delay * 1000),
            path=request.path,
        )
