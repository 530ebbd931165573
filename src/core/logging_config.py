"""Structured logging configuration.

This module initializes a structlog logger with a stable JSON format.
Log lines go to stderr so stdout stays free for progress output.
"""

from __future__ import annotations

import sys
from typing import Any

import structlog


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=_StderrLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger(name)


class _StderrLoggerFactory:
    """Build print loggers bound to the current ``sys.stderr``."""

    def __call__(self, *args: Any) -> structlog.PrintLogger:
        _ = args
        return structlog.PrintLogger(file=sys.stderr)
