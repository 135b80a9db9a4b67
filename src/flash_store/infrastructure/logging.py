"""Structured logging for the store.

Loggers are structlog bound loggers. Events are short snake_case names with
the details passed as key/value fields:

    logger = get_logger(__name__, workdir=str(path))
    logger.debug("store_put", key="user:1")
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import Processor

from flash_store.infrastructure.config import ObservabilityConfig


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'json' for one JSON object per line, 'console' for
            human-readable colored output
        stream: Output stream (default stdout)
    """
    numeric_level = getattr(logging, level.upper())
    output = stream or sys.stdout

    logging.basicConfig(format="%(message)s", stream=output, level=numeric_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=output.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_config(config: ObservabilityConfig) -> None:
    """Configure logging from the observability section of Config."""
    setup_logging(level=config.log_level, log_format=config.log_format)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a bound logger.

    Args:
        name: Module name, recorded as the `logger` field
        **initial_context: Fields bound to every event from this logger

    Returns:
        A bound structlog logger
    """
    logger = structlog.get_logger(name)
    if name:
        initial_context.setdefault("logger", name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
