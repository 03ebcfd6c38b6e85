"""Structured logging setup for Ministry-Grants."""

import logging
import sys
from typing import Optional

import structlog

from ..core.config import Settings, get_settings

_configured = False


def configure_logging(settings: Optional[Settings] = None, force: bool = False) -> None:
    """Configure stdlib logging and structlog once per process."""
    global _configured
    if _configured and not force:
        return

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=force,
    )

    if settings.structured_logging:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: Optional[str] = None):
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
