"""
treehash - structlog configuration.

Centralised structlog setup for structured logging (JSON or console).

Usage:
    from treehash.config.logging import configure_logging

    # At application start-up
    configure_logging()

    # In modules
    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("message", key=value)
"""

import logging
import os
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import EventDict, WrappedLogger

APP_NAME = "treehash"


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ``app`` to every log entry."""
    event_dict["app"] = APP_NAME
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    enable_colors: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog for treehash.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, JSON logs. If False, human-readable logs
        enable_colors: If True, colourise console logs (dev only)
        stream: Output stream (defaults to stderr, stdout carries results)

    Raises:
        ValueError: Unknown level name

    Example:
        >>> configure_logging(level="DEBUG", json_format=False, enable_colors=True)
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=numeric_level,
        force=True,
    )

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=enable_colors))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_from_env(default_level: str = "WARNING", default_format: str = "console") -> None:
    """
    Configure logging from ``LOG_LEVEL`` and ``LOG_FORMAT``.

    ``LOG_FORMAT`` is ``json`` or ``console``.
    """
    level = os.getenv("LOG_LEVEL", default_level)
    json_logs = os.getenv("LOG_FORMAT", default_format) == "json"
    configure_logging(level=level, json_format=json_logs)
