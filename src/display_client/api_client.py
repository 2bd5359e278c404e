"""Public facade: typed pairing and screen operations."""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from display_client.envelope import is_envelope, unwrap_envelope
from display_client.http.retry import ApiRequest
from display_core.constants import (
    ALL_CACHE_KEYS,
    CACHE_KEY_CONTENT,
    CACHE_KEY_EVENTS,
    CACHE_KEY_SYNC_STATUS,
    DEFAULT_ORIENTATION,
    ERROR_MISSING_API_KEY,
    ERROR_MISSING_SCREEN_ID,
    ERROR_NOT_AUTHENTICATED,
    PAIRING_ENDPOINTS,
    SCREEN_ENDPOINTS,
    prayer_times_cache_key,
)
from display_core.exceptions import CredentialStoreError, PairingResponseError
from display_core.models.api import (
    Credentials,
    DeviceInfo,
    HeartbeatRequest,
    PairedCredentials,
    PairingCodeResponse,
    PairingStatusResponse,
)
from display_core.models.network import NetworkStatus
from display_core.models.result import ApiResult

if TYPE_CHECKING:
    from display_client.fetcher import CacheAwareFetcher
    from display_client.http.retry import RetryExecutor
    from display_client.http.transport import ApiTransport
    from display_client.network import NetworkObserver
    from display_core.config.settings import Settings
    from display_core.interfaces.cache import CacheStore
    from display_core.interfaces.credentials import CredentialProvider

logger = structlog.get_logger()


def _require(fields: Mapping[str, Any], name: str, error: str) -> str:
    """Return a required non-empty string field or raise PairingResponseError."""
    value = fields.get(name)
    if not value:
        raise PairingResponseError(error)
    return str(value)


def _optional(fields: Mapping[str, Any], name: str) -> str | None:
    value = fields.get(name)
    return str(value) if value else None


class DisplayApiClient:
    """Pairing flow plus authenticated screen operations.

    Every method returns an ``ApiResult``. Authenticated operations
    return ``"Not authenticated"`` without touching the network when the
    credential provider has no credentials.
    """

    def __init__(
        self,
        settings: Settings,
        transport: ApiTransport,
        executor: RetryExecutor,
        fetcher: CacheAwareFetcher,
        cache: CacheStore,
        credentials: CredentialProvider,
        network: NetworkObserver,
    ) -> None:
        """Initialize with collaborators built by ``build_services``."""
        self._settings = settings
        self._transport = transport
        self._executor = executor
        self._fetcher = fetcher
        self._cache = cache
        self._credentials = credentials
        self._network = network

    async def __aenter__(self) -> DisplayApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP transport."""
        await self._transport.aclose()

    # --- Pairing ---

    async def request_pairing_code(
        self, device_info: DeviceInfo | None = None
    ) -> ApiResult[PairingCodeResponse]:
        """Ask the server for a short pairing code to show on screen."""
        info = device_info or DeviceInfo(app_version=self._settings.app_version)
        logger.info("pairing_code_requested", device=info.name)
        result = await self._executor.execute(
            ApiRequest(
                method="POST",
                path=PAIRING_ENDPOINTS["request_pairing_code"],
                json={"deviceInfo": info.to_wire()},
            )
        )
        return self._parse(result, PairingCodeResponse, "Invalid pairing code response")

    async def check_pairing_status(self, pairing_code: str) -> ApiResult[PairingStatusResponse]:
        """Check whether an admin has claimed the pairing code."""
        logger.debug("pairing_status_checked")
        result = await self._executor.execute(
            ApiRequest(
                method="POST",
                path=PAIRING_ENDPOINTS["check_pairing_status"],
                json={"pairingCode": pairing_code},
            )
        )
        return self._parse(result, PairingStatusResponse, "Invalid pairing status response")

    async def get_paired_credentials(self, pairing_code: str) -> ApiResult[PairedCredentials]:
        """Fetch credentials for a claimed code and persist them."""
        logger.info("paired_credentials_requested")
        result = await self._executor.execute(
            ApiRequest(
                method="POST",
                path=PAIRING_ENDPOINTS["get_paired_credentials"],
                json={"pairingCode": pairing_code},
            )
        )
        if not result.success:
            return result

        fields = unwrap_envelope(result.data)
        if not isinstance(fields, Mapping):
            fields = {}
        logger.info(
            "paired_credentials_received",
            nested=is_envelope(result.data),
            has_api_key=bool(fields.get("apiKey")),
            has_screen_id=bool(fields.get("screenId")),
            has_masjid_id=bool(fields.get("masjidId")),
        )

        try:
            api_key = _require(fields, "apiKey", ERROR_MISSING_API_KEY)
            screen_id = _require(fields, "screenId", ERROR_MISSING_SCREEN_ID)
        except PairingResponseError as exc:
            logger.error("paired_credentials_invalid", error=str(exc))
            return ApiResult.fail(str(exc))

        masjid_id = _optional(fields, "masjidId")
        try:
            self._credentials.save_credentials(
                Credentials(api_key=api_key, screen_id=screen_id, masjid_id=masjid_id)
            )
        except CredentialStoreError as exc:
            logger.error("paired_credentials_not_saved", error=str(exc))
            return ApiResult.fail(str(exc))

        if masjid_id is None:
            logger.warning("paired_credentials_missing_masjid_id")

        paired = PairedCredentials(
            api_key=api_key,
            screen_id=screen_id,
            masjid_id=masjid_id or "",
            masjid_name=_optional(fields, "masjidName") or "",
            screen_name=_optional(fields, "screenName") or "",
            orientation=_optional(fields, "orientation") or DEFAULT_ORIENTATION,
        )
        return ApiResult.ok(paired, status_code=result.status_code)

    # --- Authenticated screen operations ---

    async def send_heartbeat(self, request: HeartbeatRequest) -> ApiResult[Any]:
        """Report liveness; the response may carry remote commands."""
        if not self._credentials.has_credentials():
            return ApiResult.fail(ERROR_NOT_AUTHENTICATED)
        return await self._executor.execute(
            ApiRequest(method="POST", path=SCREEN_ENDPOINTS["heartbeat"], json=request.to_wire())
        )

    async def get_content(self) -> ApiResult[Any]:
        """Screen content, including schedule and embedded prayer times/events."""
        if not self._credentials.has_credentials():
            return ApiResult.fail(ERROR_NOT_AUTHENTICATED)
        return await self._fetcher.fetch_with_cache(
            SCREEN_ENDPOINTS["content"],
            CACHE_KEY_CONTENT,
            self._settings.content_ttl_ms,
        )

    async def get_prayer_times(self, date: str | None = None) -> ApiResult[Any]:
        """Prayer times for a date (YYYY-MM-DD) or today."""
        if not self._credentials.has_credentials():
            return ApiResult.fail(ERROR_NOT_AUTHENTICATED)
        return await self._fetcher.fetch_with_cache(
            SCREEN_ENDPOINTS["prayer_times"],
            prayer_times_cache_key(date),
            self._settings.prayer_times_ttl_ms,
            {"date": date} if date else None,
        )

    async def get_prayer_status(self) -> ApiResult[Any]:
        """Current/next prayer. Always live, never cached."""
        if not self._credentials.has_credentials():
            return ApiResult.fail(ERROR_NOT_AUTHENTICATED)
        return await self._executor.execute(
            ApiRequest(method="GET", path=SCREEN_ENDPOINTS["prayer_status"])
        )

    async def get_events(self, limit: int | None = None) -> ApiResult[Any]:
        """Upcoming events."""
        if not self._credentials.has_credentials():
            return ApiResult.fail(ERROR_NOT_AUTHENTICATED)
        return await self._fetcher.fetch_with_cache(
            SCREEN_ENDPOINTS["events"],
            CACHE_KEY_EVENTS,
            self._settings.events_ttl_ms,
            {"limit": limit} if limit else None,
        )

    async def get_sync_status(self) -> ApiResult[Any]:
        """Last-updated stamps used to decide whether to refetch."""
        if not self._credentials.has_credentials():
            return ApiResult.fail(ERROR_NOT_AUTHENTICATED)
        return await self._fetcher.fetch_with_cache(
            SCREEN_ENDPOINTS["sync_status"],
            CACHE_KEY_SYNC_STATUS,
            self._settings.sync_status_ttl_ms,
        )

    # --- Utilities ---

    async def clear_cache(self) -> None:
        """Drop every cached response, including all dated prayer-time slots."""
        await self._cache.clear_all()
        logger.info("api_cache_cleared", keys=list(ALL_CACHE_KEYS))

    def is_authenticated(self) -> bool:
        """True when the credential provider holds credentials."""
        return self._credentials.has_credentials()

    def network_status(self) -> NetworkStatus:
        """Current network status from the observer."""
        return self._network.status

    @staticmethod
    def _parse(result: ApiResult[Any], model: type[Any], error: str) -> ApiResult[Any]:
        if not result.success:
            return result
        try:
            parsed = model.model_validate(unwrap_envelope(result.data))
        except ValidationError as exc:
            logger.error("api_response_invalid", model=model.__name__, error=str(exc))
            return ApiResult.fail(error, status_code=result.status_code)
        return ApiResult.ok(parsed, status_code=result.status_code)
