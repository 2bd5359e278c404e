"""Shared constants for masjid-display-sync."""

from __future__ import annotations

# Pairing endpoints never carry credentials
PAIRING_ENDPOINTS = {
    "request_pairing_code": "/api/screens/unpaired",
    "check_pairing_status": "/api/screens/check-simple",
    "get_paired_credentials": "/api/screens/paired-credentials",
}

SCREEN_ENDPOINTS = {
    "heartbeat": "/api/screen/heartbeat",
    "content": "/api/screen/content",
    "prayer_times": "/api/screen/prayer-times",
    "prayer_status": "/api/screen/prayer-status",
    "events": "/api/screen/events",
    "sync_status": "/api/screen/sync",
}

HEALTH_ENDPOINT = "/api/health"

# Cache keys; prayer times get a date suffix
CACHE_KEY_CONTENT = "cache_content"
CACHE_KEY_PRAYER_TIMES = "cache_prayer_times"
CACHE_KEY_EVENTS = "cache_events"
CACHE_KEY_SYNC_STATUS = "cache_sync_status"

ALL_CACHE_KEYS = (
    CACHE_KEY_CONTENT,
    CACHE_KEY_PRAYER_TIMES,
    CACHE_KEY_EVENTS,
    CACHE_KEY_SYNC_STATUS,
)

# Cache TTLs (milliseconds)
CACHE_TTL_CONTENT_MS = 5 * 60 * 1000
CACHE_TTL_PRAYER_TIMES_MS = 24 * 60 * 60 * 1000
CACHE_TTL_EVENTS_MS = 30 * 60 * 1000
CACHE_TTL_SYNC_STATUS_MS = 60 * 1000

# Statuses that are surfaced immediately without retry
NON_RETRYABLE_STATUS_CODES = frozenset({401, 403, 404})

# Result error messages
ERROR_NOT_AUTHENTICATED = "Not authenticated"
ERROR_OFFLINE_NO_CACHE = "offline and no cache available"
ERROR_REQUEST_FAILED_NO_CACHE = "request failed and no cache available"
ERROR_MISSING_API_KEY = "Pairing response missing apiKey"
ERROR_MISSING_SCREEN_ID = "Pairing response missing screenId"

DEFAULT_ORIENTATION = "LANDSCAPE"

# Production hosts that must be reached over HTTPS
HTTPS_ONLY_DOMAINS = ("masjidconnect.co.uk", "masjidconnect.com")


def prayer_times_cache_key(date: str | None = None) -> str:
    """Return the cache slot for prayer times on a given date (or today)."""
    return f"{CACHE_KEY_PRAYER_TIMES}_{date or 'today'}"
