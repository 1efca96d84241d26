"""Structured logging configuration.

This module initializes structlog loggers with a stable JSON format.
Diagnostics for skipped rows and excluded regions flow through here.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)


def configure_logging(level: str = "info") -> None:
    """Configure structlog processors and minimum level.

    Args:
        level: Case-insensitive level name.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_log_level(level)),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def _stderr_logger_factory(*_args: Any) -> structlog.PrintLogger:
    # Resolve sys.stderr per call so redirected streams are honoured.
    return structlog.PrintLogger(file=sys.stderr)


def resolve_log_level(level: str) -> int:
    """Map a level name onto a stdlib logging level number.

    Args:
        level: Level name such as ``info``.

    Returns:
        Numeric logging level; unknown names map to INFO.
    """
    return _LOG_LEVELS.get(level.lower().strip(), logging.INFO)


def supported_log_levels() -> tuple[str, ...]:
    """Return level names accepted by configure_logging."""
    return tuple(_LOG_LEVELS)
