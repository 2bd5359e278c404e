"""Long-lived httpx transport with credential header injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from display_client.http.endpoints import is_pairing_endpoint

if TYPE_CHECKING:
    from display_core.interfaces.credentials import CredentialProvider

logger = structlog.get_logger()

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ApiTransport:
    """Sends single requests to the display API.

    Authenticated requests carry ``Authorization: Bearer <apiKey>`` and
    ``X-Screen-ID``; the pairing endpoints never do.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize with the API base URL and a credential provider."""
        self._credentials = credentials
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=DEFAULT_HEADERS,
        )

    def headers_for(self, path: str) -> dict[str, str]:
        """Return the per-request credential headers for a path."""
        if is_pairing_endpoint(path):
            return {}
        headers: dict[str, str] = {}
        auth = self._credentials.get_auth_header()
        if auth:
            headers["Authorization"] = auth
        screen_id = self._credentials.get_screen_id()
        if screen_id:
            headers["X-Screen-ID"] = screen_id
        return headers

    async def send(
        self,
        method: str,
        path: str,
        json: Any | None = None,
    ) -> httpx.Response:
        """Send one request. Transport errors propagate as httpx exceptions."""
        headers = self.headers_for(path)
        logger.debug(
            "api_request",
            method=method,
            path=path,
            has_auth="Authorization" in headers,
        )
        response = await self._client.request(method, path, json=json, headers=headers)
        logger.debug("api_response", status=response.status_code, path=path)

        if response.status_code == 401:
            logger.warning("api_unauthorized", path=path)
        elif response.status_code == 429:
            logger.warning("api_rate_limited", path=path)
        return response

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
