"""Environment driven settings for the pool and its ambient services."""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .client import ClientOptions


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for application output")
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["password", "api_key", "token", "secret", "authorization"],
        description="Fields that should be redacted in logs",
    )


class MetricsSettings(BaseModel):
    """Prometheus metrics configuration."""

    enabled: bool = True


class PoolSettings(BaseSettings):
    """Top-level settings, overridable through ``MP_`` environment variables.

    Nested fields use ``__`` as delimiter, e.g. ``MP_DEFAULTS__ADDRESS``.
    """

    service_name: str = "milvus-pool"
    config_path: Path = Field(default=Path("config/milvus_pool.yaml"))
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    defaults: ClientOptions = Field(default_factory=ClientOptions)

    model_config = SettingsConfigDict(env_prefix="MP_", env_nested_delimiter="__")


def load_settings() -> PoolSettings:
    """Load settings from the environment."""
    try:
        return PoolSettings()
    except ValidationError as err:
        raise RuntimeError(f"Invalid configuration: {err}") from err


@lru_cache(maxsize=1)
def get_settings() -> PoolSettings:
    """Cached accessor used by entry points."""
    return load_settings()


__all__ = [
    "LoggingSettings",
    "MetricsSettings",
    "PoolSettings",
    "get_settings",
    "load_settings",
]
