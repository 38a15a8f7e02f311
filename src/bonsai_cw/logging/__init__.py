"""Structured logging setup (structlog over stdlib logging)."""

from .config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
