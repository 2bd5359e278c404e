"""Public interface re-exports for display_core."""

from display_core.interfaces.cache import CacheStore
from display_core.interfaces.credentials import CredentialProvider
from display_core.interfaces.store import PersistedStore

__all__ = [
    "CacheStore",
    "CredentialProvider",
    "PersistedStore",
]
