"""Structured logging configuration."""

import logging
from typing import Any

import structlog

from signalsweep.config import get_settings


def configure_logging(fmt: str | None = None, level: str | None = None) -> None:
    """Configure structlog for the CLI (console) or the serverless handler (json).

    Falls back to ``log_format`` and ``log_level`` from settings.
    """
    settings = get_settings()
    fmt = fmt or settings.log_format
    log_level = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if fmt == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
