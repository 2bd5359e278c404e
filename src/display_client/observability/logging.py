"""structlog setup for the display client.

Every record carries the client ``app_version`` and, once a screen is
paired, its ``screen_id``/``masjid_id``. Bearer tokens never reach the
output: any event key that can hold one is masked before rendering.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars, unbind_contextvars

if TYPE_CHECKING:
    from display_core.config.settings import Settings

# Event keys whose values are credentials
SECRET_KEYS = frozenset({"api_key", "apiKey", "authorization", "Authorization"})
MASK = "***"

# Libraries whose records are kept at WARNING or above regardless of our level
CHATTY_LOGGERS = ("httpx", "httpcore", "asyncio")

SCREEN_CONTEXT_KEYS = ("screen_id", "masjid_id")


def add_app_version(version: str) -> structlog.types.Processor:
    """Return a processor stamping ``app_version`` onto every event."""

    def processor(
        logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        event_dict.setdefault("app_version", version)
        return event_dict

    return processor


def mask_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace credential values with a fixed mask."""
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = MASK
    return event_dict


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib records through one console or JSON handler."""
    level = _resolve_level(settings.log_level)
    pre_chain: list[structlog.types.Processor] = [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        add_app_version(settings.app_version),
        mask_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.log_format),
            ],
            foreign_pre_chain=pre_chain,
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_screen_context(screen_id: str, masjid_id: str | None = None) -> None:
    """Attach the paired screen (and its masjid, when known) to later records."""
    context = {"screen_id": screen_id}
    if masjid_id:
        context["masjid_id"] = masjid_id
    bind_contextvars(**context)


def clear_screen_context() -> None:
    """Drop screen identity from the logging context, leaving other keys bound."""
    unbind_contextvars(*SCREEN_CONTEXT_KEYS)


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def _resolve_level(level_name: str) -> int:
    return logging.getLevelNamesMapping().get(level_name.upper(), logging.INFO)
