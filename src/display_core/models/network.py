"""Network status model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class NetworkStatus(BaseModel):
    """Snapshot of link state and API reachability."""

    model_config = ConfigDict(frozen=True)

    is_online: bool = Field(default=True, description="Link-level connectivity")
    is_api_reachable: bool = Field(default=False, description="Last health probe succeeded")
    last_checked: str | None = Field(
        default=None, description="ISO-8601 time of the last probe"
    )
