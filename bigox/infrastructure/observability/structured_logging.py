"""Structlog configuration helpers."""
from __future__ import annotations

import logging
from typing import Optional

import structlog

from bigox.core.config import Settings, settings as default_settings


def configure_structlog(json: bool = True) -> None:
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.getLogger(__name__).info("structlog configured")


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Set the ``bigox`` logger level and install structlog rendering."""
    settings = settings or default_settings
    logging.getLogger("bigox").setLevel(settings.LOG_LEVEL)
    configure_structlog(json=settings.LOG_JSON)
