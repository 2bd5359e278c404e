"""JSON-file-backed credential provider."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import ValidationError

from display_core.exceptions import CredentialStoreError
from display_core.models.api import Credentials

logger = structlog.get_logger()


class FileCredentialStore:
    """Keeps the paired screen credentials in a small JSON file.

    Credentials are loaded once at construction and cached in memory;
    every save rewrites the file atomically.
    """

    def __init__(self, path: Path) -> None:
        """Initialize and load any previously saved credentials."""
        self._path = path
        self._credentials: Credentials | None = None
        self._load()

    def _load(self) -> None:
        """Load credentials from disk; unreadable files mean 'unpaired'."""
        if not self._path.exists():
            logger.info("credentials_not_found", path=str(self._path))
            return
        try:
            raw = json.loads(self._path.read_text())
            creds = Credentials.model_validate(raw)
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("credentials_load_failed", path=str(self._path), error=str(exc))
            return
        if not creds.api_key or not creds.screen_id:
            logger.warning("credentials_incomplete", path=str(self._path))
            return
        self._credentials = creds
        logger.info(
            "credentials_loaded",
            screen_id=creds.screen_id,
            has_masjid_id=bool(creds.masjid_id),
        )

    def get_credentials(self) -> Credentials | None:
        """Return the cached credentials, if any."""
        return self._credentials

    def get_auth_header(self) -> str | None:
        """Return the bearer Authorization header value."""
        if self._credentials is None:
            return None
        return f"Bearer {self._credentials.api_key}"

    def get_screen_id(self) -> str | None:
        """Return the paired screen id."""
        return self._credentials.screen_id if self._credentials else None

    def get_masjid_id(self) -> str | None:
        """Return the owning masjid id, if the pairing supplied one."""
        return self._credentials.masjid_id if self._credentials else None

    def has_credentials(self) -> bool:
        """Return True when apiKey and screenId are both present."""
        return self._credentials is not None

    def is_paired(self) -> bool:
        """Alias of has_credentials for pairing flows."""
        return self.has_credentials()

    def save_credentials(self, credentials: Credentials) -> None:
        """Validate and persist credentials."""
        if not credentials.api_key or not credentials.screen_id:
            msg = "Invalid credentials: apiKey and screenId are required"
            raise CredentialStoreError(msg)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(credentials.to_wire()))
            tmp.replace(self._path)
        except OSError as exc:
            raise CredentialStoreError(f"Failed to write credentials: {exc}") from exc
        self._credentials = credentials.model_copy()
        logger.info(
            "credentials_saved",
            screen_id=credentials.screen_id,
            has_masjid_id=bool(credentials.masjid_id),
        )

    def clear_credentials(self) -> None:
        """Forget credentials and remove the file."""
        self._credentials = None
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("credentials_clear_failed", path=str(self._path), error=str(exc))
        logger.info("credentials_cleared")
