"""Structured logging utilities for TaskScope."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from taskscope.core.config import LoggingConfig


_LOGGER_NAME = "taskscope"


def get_logger(component: Optional[str] = None) -> "structlog.stdlib.BoundLogger":
    """Return a structlog logger bound to the TaskScope namespace."""
    logger = structlog.get_logger(_LOGGER_NAME)
    if component:
        logger = logger.bind(component=component)
    return logger


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure stdlib logging and structlog processors from settings."""
    config = config or LoggingConfig()
    level = logging.getLevelName(config.log_level)

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)
    for handler in root_logger.handlers:
        handler.setLevel(level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.json_logs:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


__all__ = ["get_logger", "configure_logging"]
