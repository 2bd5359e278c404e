"""Domain models for masjid-display-sync."""

from display_core.models.api import (
    Credentials,
    DeviceInfo,
    HeartbeatMetrics,
    HeartbeatRequest,
    PairedCredentials,
    PairingCodeResponse,
    PairingStatusResponse,
    RemoteCommand,
)
from display_core.models.cache import CachedEntry
from display_core.models.network import NetworkStatus
from display_core.models.result import ApiResult

__all__ = [
    "ApiResult",
    "CachedEntry",
    "Credentials",
    "DeviceInfo",
    "HeartbeatMetrics",
    "HeartbeatRequest",
    "NetworkStatus",
    "PairedCredentials",
    "PairingCodeResponse",
    "PairingStatusResponse",
    "RemoteCommand",
]
