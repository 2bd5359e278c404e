"""Observability: structured logging."""

from display_client.observability.logging import (
    bind_screen_context,
    clear_screen_context,
    configure_logging,
)

__all__ = [
    "bind_screen_context",
    "clear_screen_context",
    "configure_logging",
]
