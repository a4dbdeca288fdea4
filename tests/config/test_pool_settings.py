from __future__ import annotations

from pathlib import Path

import pytest

from milvus_pool.config import PoolSettings, get_settings, load_settings


def test_settings_defaults() -> None:
    settings = PoolSettings()
    assert settings.service_name == "milvus-pool"
    assert settings.config_path == Path("config/milvus_pool.yaml")
    assert settings.metrics.enabled is True
    assert "password" in settings.logging.scrub_fields
    assert settings.defaults.address == "localhost:19530"


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("MP_SERVICE_NAME", "search-api")
    monkeypatch.setenv("MP_LOGGING__LEVEL", "DEBUG")
    monkeypatch.setenv("MP_METRICS__ENABLED", "false")
    monkeypatch.setenv("MP_DEFAULTS__ADDRESS", "milvus.internal:19530")
    monkeypatch.setenv("MP_DEFAULTS__OPERATION_TIMEOUT", "7.5")

    settings = get_settings()

    assert settings.service_name == "search-api"
    assert settings.logging.level == "DEBUG"
    assert settings.metrics.enabled is False
    assert settings.defaults.address == "milvus.internal:19530"
    assert settings.defaults.operation_timeout == 7.5


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
    get_settings.cache_clear()


def test_invalid_environment_raises_runtime_error(monkeypatch) -> None:
    monkeypatch.setenv("MP_DEFAULTS__OPERATION_TIMEOUT", "-1")
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        load_settings()
