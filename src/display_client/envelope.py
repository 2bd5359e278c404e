"""Server response envelope discrimination."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def is_envelope(payload: Any) -> bool:
    """True when payload is a ``{"data": <resource>, ...}`` wrapper.

    Priority order:
      1. A mapping whose ``data`` member is a mapping or list is a wrapper.
      2. Anything else (scalars, lists, mappings without a structured
         ``data`` member) is already the resource.
    """
    if not isinstance(payload, Mapping):
        return False
    return isinstance(payload.get("data"), Mapping | list)


def unwrap_envelope(payload: Any) -> Any:
    """Remove exactly one envelope level if present."""
    if is_envelope(payload):
        return payload["data"]
    return payload
