"""URL building helpers for the display REST API."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import quote

from display_core.constants import PAIRING_ENDPOINTS

QueryValue = str | int | float | bool | None


def build_url(base_url: str, endpoint: str) -> str:
    """Join a base URL and an endpoint path with exactly one slash."""
    clean_base = base_url.rstrip("/")
    clean_endpoint = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    return f"{clean_base}{clean_endpoint}"


def _encode_value(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query(params: Mapping[str, QueryValue]) -> str:
    """URL-encode params, dropping None values. Returns '' when nothing remains."""
    pairs = [
        f"{quote(str(key), safe='')}={quote(_encode_value(value), safe='')}"
        for key, value in params.items()
        if value is not None
    ]
    return "&".join(pairs)


def build_path_with_params(endpoint: str, params: Mapping[str, QueryValue] | None) -> str:
    """Append an encoded query string to an endpoint path."""
    query = build_query(params or {})
    return f"{endpoint}?{query}" if query else endpoint


def is_pairing_endpoint(path: str) -> bool:
    """True for the unauthenticated pairing endpoints."""
    bare = path.split("?", 1)[0]
    return any(bare.endswith(endpoint) for endpoint in PAIRING_ENDPOINTS.values())
