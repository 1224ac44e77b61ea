"""
Configuration management for TaskScope based on Pydantic Settings.

Supported sources:
- Environment variables (one prefix per section)
- .env files
- YAML configuration files
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from taskscope.core.exceptions import ConfigurationError


class StorageConfig(BaseSettings):
    """SQLite storage settings."""

    # Database path and pool
    db_path: str = Field(default=":memory:", description="SQLite database path or :memory:")
    max_connections: int = Field(default=5, ge=1, description="Maximum pooled connections")

    # Simulated network behavior
    min_latency_ms: int = Field(default=0, ge=0, description="Minimum simulated latency per call")
    max_latency_ms: int = Field(default=0, ge=0, description="Maximum simulated latency per call")
    failure_rate: float = Field(default=0.0, ge=0.0, le=1.0, description="Chance a task creation fails")

    # Bootstrapping
    seed_on_init: bool = Field(default=False, description="Load default workspaces into an empty store")

    @field_validator("db_path")
    @classmethod
    def ensure_db_directory(cls, v: str) -> str:
        """Create the parent directory of a file database."""
        if v == ":memory:":
            return v
        db_path = Path(v)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return str(db_path)

    @model_validator(mode="after")
    def validate_latency_range(self) -> "StorageConfig":
        if self.max_latency_ms < self.min_latency_ms:
            raise ValueError("max_latency_ms must be >= min_latency_ms")
        return self

    model_config = {"env_prefix": "TASKSCOPE_STORAGE_"}


class RetryConfig(BaseSettings):
    """Retry and timeout behavior at the persistence boundary."""

    max_retries: int = Field(default=3, ge=0, le=10, description="Maximum number of retry attempts")
    base_delay: float = Field(default=0.2, ge=0.0, le=60.0, description="Base delay between retries in seconds")
    max_delay: float = Field(default=5.0, ge=0.0, le=300.0, description="Maximum delay between retries")
    exponential_base: float = Field(default=2.0, ge=1.1, le=10.0, description="Exponential backoff base")
    jitter: bool = Field(default=True, description="Add random jitter to backoff delays")
    operation_timeout: Optional[float] = Field(default=10.0, gt=0.0, description="Per-attempt timeout in seconds")

    @field_validator("max_delay")
    @classmethod
    def validate_max_delay_not_below_base(cls, v: float, info) -> float:
        """Ensure max_delay is not smaller than base_delay."""
        if hasattr(info, "data") and "base_delay" in info.data:
            if v < info.data["base_delay"]:
                raise ValueError("max_delay must be >= base_delay")
        return v

    model_config = {"env_prefix": "TASKSCOPE_RETRY_"}


class ResolverConfig(BaseSettings):
    """Defaulting behavior for new tasks."""

    fallback_perspective_id: str = Field(
        default="inbox",
        description="Perspective id stamped on new tasks when the workspace has no perspectives",
    )
    strict_perspective_default: bool = Field(
        default=False,
        description="Raise instead of using the fallback perspective id",
    )

    @property
    def effective_fallback(self) -> Optional[str]:
        return None if self.strict_perspective_default else self.fallback_perspective_id

    model_config = {"env_prefix": "TASKSCOPE_RESOLVER_"}


class LoggingConfig(BaseSettings):
    """Structured logging settings."""

    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render log events as JSON")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = {"env_prefix": "TASKSCOPE_LOG_"}


class TaskScopeConfig(BaseSettings):
    """Main TaskScope configuration."""

    environment: str = Field(default="development", description="Environment (development/production/testing)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Sub-configurations
    storage: StorageConfig = Field(default_factory=StorageConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "TaskScopeConfig":
        """Load configuration from a YAML file."""
        import yaml

        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise ConfigurationError(
                "Configuration file not found", config_file=str(yaml_path)
            )

        with open(yaml_path, "r") as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping", config_file=str(yaml_path)
            )

        return cls(**config_data)

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "TaskScopeConfig":
        """Load configuration from environment variables and an optional .env file."""
        if env_file:
            return cls(_env_file=str(env_file))
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary."""
        return self.model_dump()

    model_config = {
        "env_prefix": "TASKSCOPE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }


_config: Optional[TaskScopeConfig] = None


def get_config() -> TaskScopeConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = TaskScopeConfig.from_env()
    return _config


def set_config(config: Optional[TaskScopeConfig]) -> None:
    """Replace the process-wide configuration (None resets it)."""
    global _config
    _config = config
