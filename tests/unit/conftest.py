"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from display_client.network import NetworkObserver
from display_core.config.settings import Settings
from tests.mocks.mock_factories import (
    MemoryCache,
    RecordingSleep,
    RecordingStore,
    StaticCredentials,
    make_network,
)
from tests.mocks.mock_settings import make_settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Return real Settings rooted in a temporary directory."""
    return make_settings(tmp_path)


@pytest.fixture
def credentials() -> StaticCredentials:
    """Return paired in-memory credentials."""
    return StaticCredentials()


@pytest.fixture
def store() -> RecordingStore:
    """Return a store that records every save."""
    return RecordingStore()


@pytest.fixture
def memory_cache() -> MemoryCache:
    """Return an empty in-memory cache."""
    return MemoryCache()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    """Return a sleep that records delays instead of waiting."""
    return RecordingSleep()


@pytest.fixture
def network() -> NetworkObserver:
    """Return an online network observer."""
    return make_network(online=True)
