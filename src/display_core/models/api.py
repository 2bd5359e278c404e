"""Request and response models for the display REST API.

Wire names are camelCase; models accept either the alias or the
Python field name and dump with aliases.
"""

from __future__ import annotations

import platform
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from display_core.constants import DEFAULT_ORIENTATION


class WireModel(BaseModel):
    """Base for models that travel over the wire in camelCase."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump with camelCase aliases, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Credentials(WireModel):
    """Paired screen credentials."""

    api_key: str = Field(alias="apiKey", description="Bearer token for screen endpoints")
    screen_id: str = Field(alias="screenId", description="Screen identifier")
    masjid_id: str | None = Field(
        default=None, alias="masjidId", description="Owning masjid, needed for realtime"
    )


class DeviceInfo(WireModel):
    """Device description sent when requesting a pairing code."""

    name: str = Field(default_factory=platform.node, description="Device hostname")
    type: str = Field(default="DISPLAY", description="Device class")
    platform: str = Field(default_factory=platform.system, description="Operating system")
    screen_resolution: str = Field(
        default="1920x1080", alias="screenResolution", description="Resolution WxH"
    )
    orientation: str = Field(default=DEFAULT_ORIENTATION, description="Screen orientation")
    app_version: str = Field(default="0.1.0", alias="appVersion", description="Client version")


class PairingCodeResponse(WireModel):
    """Short code shown on screen until an admin pairs it."""

    pairing_code: str = Field(alias="pairingCode")
    expires_at: str = Field(alias="expiresAt")


class PairingStatusResponse(WireModel):
    """Whether the code has been claimed.

    Current servers send ``paired``; older ones send ``isPaired``.
    """

    is_paired: bool = Field(
        validation_alias=AliasChoices("paired", "isPaired", "is_paired"),
        serialization_alias="isPaired",
    )


class PairedCredentials(WireModel):
    """Normalised paired-credentials response."""

    api_key: str = Field(alias="apiKey")
    screen_id: str = Field(alias="screenId")
    masjid_id: str = Field(default="", alias="masjidId")
    masjid_name: str = Field(default="", alias="masjidName")
    screen_name: str = Field(default="", alias="screenName")
    orientation: str = Field(default=DEFAULT_ORIENTATION)


class HeartbeatMetrics(WireModel):
    """Optional runtime metrics attached to a heartbeat."""

    uptime: int | None = Field(default=None, description="Seconds since client start")
    memory_usage: int | None = Field(default=None, alias="memoryUsage")
    cpu_usage: float | None = Field(default=None, alias="cpuUsage")


class HeartbeatRequest(WireModel):
    """Periodic liveness report."""

    status: Literal["online", "offline", "error"] = Field(default="online")
    app_version: str = Field(alias="appVersion")
    current_view: str | None = Field(default=None, alias="currentView")
    metrics: HeartbeatMetrics | None = Field(default=None)


class RemoteCommand(WireModel):
    """Command queued by the backend and delivered in a heartbeat response."""

    id: str
    type: str
    payload: dict[str, Any] | None = None
    created_at: str = Field(alias="createdAt")
