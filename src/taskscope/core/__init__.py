"""
Core module: configuration, exceptions and logging.
"""

from taskscope.core.config import TaskScopeConfig, get_config, set_config
from taskscope.core.exceptions import (
    TaskScopeError,
    ConfigurationError,
    ValidationError,
    PersistenceError,
    EntityNotFoundError,
    TransientPersistenceError,
    ResolutionError,
    NoDefaultProjectError,
    NoDefaultPerspectiveError,
    RetryExhaustedError,
)
from taskscope.core.logging import configure_logging, get_logger

__all__ = [
    "TaskScopeConfig",
    "get_config",
    "set_config",
    "TaskScopeError",
    "ConfigurationError",
    "ValidationError",
    "PersistenceError",
    "EntityNotFoundError",
    "TransientPersistenceError",
    "ResolutionError",
    "NoDefaultProjectError",
    "NoDefaultPerspectiveError",
    "RetryExhaustedError",
    "configure_logging",
    "get_logger",
]
