"""Custom exception hierarchy for masjid-display-sync."""

from __future__ import annotations


class DisplayClientError(Exception):
    """Base exception for all masjid-display-sync errors."""


class CredentialStoreError(DisplayClientError):
    """Raised when credentials are invalid or cannot be persisted."""


class PairingResponseError(DisplayClientError):
    """Raised when a paired-credentials response lacks a required field."""
