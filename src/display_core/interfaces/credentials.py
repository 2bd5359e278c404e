"""Credential provider consulted for auth headers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from display_core.models.api import Credentials


@runtime_checkable
class CredentialProvider(Protocol):
    """Source of the screen's bearer token and identity."""

    def get_auth_header(self) -> str | None:
        """Return 'Bearer <apiKey>' or None when unpaired."""
        ...

    def get_screen_id(self) -> str | None:
        """Return the screen id or None when unpaired."""
        ...

    def has_credentials(self) -> bool:
        """Return True when both apiKey and screenId are known."""
        ...

    def save_credentials(self, credentials: Credentials) -> None:
        """Persist credentials obtained from pairing."""
        ...
