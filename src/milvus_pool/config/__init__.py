"""Configuration package exports."""

from __future__ import annotations

from .client import DEFAULT_ADDRESS, ClientOptions, PoolConfig, load_pool_config
from .settings import LoggingSettings, MetricsSettings, PoolSettings, get_settings, load_settings


__all__ = [
    "DEFAULT_ADDRESS",
    "ClientOptions",
    "LoggingSettings",
    "MetricsSettings",
    "PoolConfig",
    "PoolSettings",
    "get_settings",
    "load_pool_config",
    "load_settings",
]
