"""
Custom exceptions for TaskScope.

Exception hierarchy:
- TaskScopeError (base)
  ├── ConfigurationError
  ├── ValidationError
  ├── PersistenceError
  │   ├── EntityNotFoundError
  │   └── TransientPersistenceError
  ├── ResolutionError
  │   ├── NoDefaultProjectError
  │   └── NoDefaultPerspectiveError
  └── RetryExhaustedError
"""

from typing import Any, Dict, Optional


class TaskScopeError(Exception):
    """Base exception for all TaskScope errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = self.message
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg = f"{base_msg} (Context: {context_str})"
        return base_msg


class ConfigurationError(TaskScopeError):
    """Configuration loading or validation errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key
        if config_file:
            context["config_file"] = config_file
        super().__init__(message, **kwargs, context=context)


class ValidationError(TaskScopeError):
    """Invalid task drafts or requests."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)[:100]
        super().__init__(message, **kwargs, context=context)


class PersistenceError(TaskScopeError):
    """Errors raised by a persistence adapter."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if table:
            context["table"] = table
        super().__init__(message, **kwargs, context=context)


class EntityNotFoundError(PersistenceError):
    """Update or delete targeting an id that does not exist."""

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if entity_type:
            context["entity_type"] = entity_type
        if entity_id:
            context["entity_id"] = entity_id
        kwargs.setdefault("error_code", "NOT_FOUND")
        super().__init__(message, **kwargs, context=context)


class TransientPersistenceError(PersistenceError):
    """Retryable storage failure."""
    pass


class ResolutionError(TaskScopeError):
    """Errors raised while resolving workspace defaults."""

    def __init__(
        self,
        message: str,
        workspace_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if workspace_id:
            context["workspace_id"] = workspace_id
        super().__init__(message, **kwargs, context=context)


class NoDefaultProjectError(ResolutionError):
    """The workspace has no project to receive a new task."""

    def __init__(self, workspace_id: Optional[str] = None, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "NO_DEFAULT_PROJECT")
        super().__init__(
            "Create a project before adding tasks",
            workspace_id=workspace_id,
            **kwargs,
        )


class NoDefaultPerspectiveError(ResolutionError):
    """The workspace has no perspective and no fallback is configured."""

    def __init__(self, workspace_id: Optional[str] = None, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "NO_DEFAULT_PERSPECTIVE")
        super().__init__(
            "Create a perspective before adding tasks",
            workspace_id=workspace_id,
            **kwargs,
        )


class RetryExhaustedError(TaskScopeError):
    """All retry attempts for a persistence operation failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        attempts: Optional[int] = None,
        last_error: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if operation:
            context["operation"] = operation
        if attempts is not None:
            context["attempts"] = attempts
        kwargs.setdefault("error_code", "RETRY_EXHAUSTED")
        super().__init__(message, **kwargs, context=context)
        self.last_error = last_error
