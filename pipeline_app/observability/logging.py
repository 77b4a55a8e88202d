from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from pipeline_app.config import Settings

_CONFIGURED = False


class ServiceFields:
    """structlog processor stamping every record with the service identity."""

    def __init__(self, settings: Settings) -> None:
        self.fields = {
            "service": settings.service_name,
            "environment": settings.environment,
            "version": settings.app_version,
        }

    def __call__(self, _: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        for key, value in self.fields.items():
            event_dict.setdefault(key, value)
        return event_dict


def resolve_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: Settings | None = None) -> None:
    """Route structlog and stdlib records (uvicorn included) to JSON lines on stdout.

    Level and service identity come from `settings`; without settings the
    defaults apply, which is what the CLI uses when the configuration itself
    is invalid. Only the first call has an effect.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = settings or Settings.model_construct()
    level = resolve_level(settings.log_level)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        ServiceFields(settings),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=shared,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # Uvicorn installs its own handlers; replace them so its lines share the format.
    for name in ("uvicorn", "uvicorn.error"):
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.propagate = False
        server_logger.setLevel(level)

    _CONFIGURED = True
