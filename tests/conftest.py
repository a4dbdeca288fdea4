from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

import pytest
import structlog

from milvus_pool.config.client import ClientOptions
from milvus_pool.config.settings import get_settings
from milvus_pool.pool.errors import HandleClosedError


class FakeHandle:
    """In-memory handle that counts closes and can be told to fail."""

    def __init__(self, config: Any, *, close_error: Exception | None = None) -> None:
        self.config = config
        self.close_error = close_error
        self.close_calls = 0
        self.closed = False

    def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error
        self.closed = True

    def ping(self) -> str:
        if self.closed:
            raise HandleClosedError()
        return "pong"


class RecordingFactory:
    """Factory producing :class:`FakeHandle` instances and recording every call."""

    def __init__(self) -> None:
        self.calls: list[Any] = []
        self.created: list[FakeHandle] = []
        self.error: Exception | None = None
        self.close_errors: dict[Any, Exception] = {}
        self.before_create: Callable[[Any], None] | None = None
        self._lock = threading.Lock()

    def __call__(self, config: Any) -> FakeHandle:
        with self._lock:
            self.calls.append(config)
        if self.before_create is not None:
            self.before_create(config)
        if self.error is not None:
            raise self.error
        handle = FakeHandle(config, close_error=self.close_errors.get(config))
        with self._lock:
            self.created.append(handle)
        return handle


class FakeMilvusClient:
    """Stand-in for ``pymilvus.MilvusClient`` that records method calls.

    ``responses`` maps a method name to a return value, an exception, or a list
    of either consumed one per call.
    """

    instances: list[FakeMilvusClient] = []

    def __init__(self, **kwargs: Any) -> None:
        self.init_kwargs = kwargs
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.responses: dict[str, Any] = {}
        self.close_calls = 0
        FakeMilvusClient.instances.append(self)

    def close(self) -> None:
        self.close_calls += 1

    def calls_to(self, method: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)

        def method(**kwargs: Any) -> Any:
            self.calls.append((name, kwargs))
            response = self.responses.get(name)
            if isinstance(response, list) and response and name not in _LIST_METHODS:
                response = response.pop(0)
            if isinstance(response, Exception):
                raise response
            return response if response is not None else _DEFAULTS.get(name)

        return method


_LIST_METHODS = frozenset(
    {"list_collections", "list_databases", "list_partitions", "query", "search"}
)

_DEFAULTS: dict[str, Any] = {
    "list_collections": [],
    "list_databases": ["default"],
    "list_partitions": ["_default"],
    "has_collection": False,
    "has_partition": False,
    "get_collection_stats": {"row_count": 0},
    "describe_collection": {},
    "insert": {"insert_count": 0, "ids": []},
    "delete": {"delete_count": 0},
    "search": [],
    "query": [],
    "compact": 0,
}


@pytest.fixture
def factory() -> RecordingFactory:
    return RecordingFactory()


@pytest.fixture
def fake_client_cls():
    FakeMilvusClient.instances.clear()
    yield FakeMilvusClient
    FakeMilvusClient.instances.clear()


@pytest.fixture
def client_options() -> ClientOptions:
    return ClientOptions(address="milvus.test:19530", operation_timeout=12.5)


@pytest.fixture(autouse=True)
def _reset_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
