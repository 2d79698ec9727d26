"""Observability helpers."""
from .structured_logging import configure_logging, configure_structlog

__all__ = ["configure_logging", "configure_structlog"]
