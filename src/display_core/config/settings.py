"""Application settings using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from display_core.constants import (
    CACHE_TTL_CONTENT_MS,
    CACHE_TTL_EVENTS_MS,
    CACHE_TTL_PRAYER_TIMES_MS,
    CACHE_TTL_SYNC_STATUS_MS,
    HTTPS_ONLY_DOMAINS,
)


class Settings(BaseSettings):
    """Central configuration for masjid-display-sync."""

    model_config = SettingsConfigDict(env_prefix="MDS_", env_file=".env")

    # --- API ---
    api_url: str = Field(
        default="https://portal.masjidconnect.co.uk",
        description="Base URL of the display REST API",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout per API request in seconds",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Client version reported in heartbeats and pairing requests",
    )

    # --- Retry ---
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Retries after the first attempt for retryable failures",
    )
    initial_retry_delay_ms: int = Field(
        default=1000,
        gt=0,
        description="Backoff before the first retry in milliseconds",
    )
    max_retry_delay_ms: int = Field(
        default=30_000,
        gt=0,
        description="Ceiling for the doubling backoff in milliseconds",
    )

    # --- Cache ---
    cache_dir: Path = Field(
        default=Path("./.cache/masjid_display/api"),
        description="Directory for the diskcache response cache",
    )
    content_ttl_ms: int = Field(default=CACHE_TTL_CONTENT_MS, description="Content cache TTL")
    prayer_times_ttl_ms: int = Field(
        default=CACHE_TTL_PRAYER_TIMES_MS, description="Prayer times cache TTL"
    )
    events_ttl_ms: int = Field(default=CACHE_TTL_EVENTS_MS, description="Events cache TTL")
    sync_status_ttl_ms: int = Field(
        default=CACHE_TTL_SYNC_STATUS_MS, description="Sync status cache TTL"
    )

    # --- Persisted stores ---
    store_dir: Path = Field(
        default=Path("./.cache/masjid_display/store"),
        description="Directory for the persisted application store",
    )
    credentials_file: Path = Field(
        default=Path("./.cache/masjid_display/credentials.json"),
        description="JSON file holding the paired screen credentials",
    )

    # --- Network ---
    health_check_interval_seconds: float = Field(
        default=30.0,
        description="Interval between API reachability probes",
    )
    health_check_timeout_seconds: float = Field(
        default=5.0,
        description="Hard cap on a single reachability probe",
    )

    # --- Scheduler ---
    heartbeat_interval_seconds: float = Field(
        default=120.0,
        description="Interval between heartbeats",
    )
    content_sync_interval_seconds: float = Field(
        default=300.0,
        description="Interval between content/prayer-times/events refreshes",
    )
    events_limit: int = Field(
        default=10,
        description="Number of events requested per refresh",
    )

    # --- Logging ---
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )

    @field_validator("api_url")
    @classmethod
    def normalize_api_url(cls, value: str) -> str:
        """Strip trailing slashes and force HTTPS on production hosts.

        A redirect from http to https drops the Authorization header.
        """
        url = value.rstrip("/")
        if url.startswith("http://") and any(d in url for d in HTTPS_ONLY_DOMAINS):
            url = "https://" + url[len("http://") :]
        return url

    @model_validator(mode="after")
    def validate_retry_config(self) -> Settings:
        """Reject a backoff ceiling below the initial delay."""
        if self.max_retry_delay_ms < self.initial_retry_delay_ms:
            msg = "max_retry_delay_ms must be >= initial_retry_delay_ms"
            raise ValueError(msg)
        return self
