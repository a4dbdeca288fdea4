"""Concurrency-safe registry of named handles.

Key Responsibilities:
    - Map caller-chosen names to live handles, at most one handle per name
    - Defer handle construction to a caller supplied factory
    - Close handles on removal and on pool shutdown without leaking entries

Collaborators:
    - Upstream: Applications construct one :class:`HandlePool` and pass it to
      the components that need connections
    - Downstream: The factory (e.g. :class:`~milvus_pool.client.factory.MilvusClientFactory`)
      and the handles it returns

Side Effects:
    - Invokes the factory and ``Handle.close``; emits structlog events and
      Prometheus metrics

Thread Safety:
    - One reader/writer lock guards membership. ``get``/``has``/``list`` take
      the shared side; ``add``/``remove``/``close`` take the exclusive side and
      hold it while the factory or ``close`` runs, which serialises creation
      across names.
    - Handles themselves are not protected by the pool.
    - ``must_get`` is a ``get`` followed by an ``add``; concurrent callers for
      the same absent name race on ``add`` and the losers resolve the winner's
      handle through a second ``get``.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from typing import Any, Generic, TypeVar

import structlog

from .errors import (
    HandleAlreadyExistsError,
    HandleCloseError,
    HandleCreationError,
    HandleNotFoundError,
    InvalidHandleNameError,
    PoolCloseError,
)
from .lock import ReadWriteLock
from .metrics import record_factory_latency, record_operation, record_pool_size
from .types import Handle, HandleFactory

logger = structlog.get_logger(__name__)

C = TypeVar("C")
H = TypeVar("H", bound=Handle)


def _validate_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidHandleNameError(name)
    return name


class HandlePool(Generic[C, H]):
    """Named-handle pool with get-or-create semantics.

    Args:
        factory: Callable producing a handle from a configuration value.
        name: Label used in log events and metrics to tell pools apart.
        metrics_enabled: Record Prometheus metrics for pool operations.

    Example:
        >>> pool = HandlePool(MilvusClientFactory())
        >>> client = pool.must_get("search", ClientOptions(address="milvus:19530"))
        >>> pool.close()
    """

    def __init__(
        self,
        factory: HandleFactory[C, H],
        *,
        name: str = "default",
        metrics_enabled: bool = True,
    ) -> None:
        self._factory = factory
        self._name = name
        self._metrics_enabled = metrics_enabled
        self._handles: dict[str, H] = {}
        self._lock = ReadWriteLock()

    @property
    def name(self) -> str:
        return self._name

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------
    def get(self, name: str) -> H:
        """Return the handle registered under ``name``.

        The handle is returned as stored; it may have been closed outside the
        pool.

        Raises:
            HandleNotFoundError: No handle is registered under ``name``.
        """
        with self._lock.read():
            handle = self._handles.get(name)
        if handle is None:
            raise HandleNotFoundError(name)
        return handle

    def has(self, name: str) -> bool:
        with self._lock.read():
            return name in self._handles

    def list(self) -> list[str]:
        """Return a snapshot of registered names in no particular order."""
        with self._lock.read():
            return list(self._handles)

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------
    def add(self, name: str, config: C) -> None:
        """Create a handle with the factory and register it under ``name``.

        Raises:
            InvalidHandleNameError: ``name`` is empty.
            HandleAlreadyExistsError: ``name`` is already registered; the
                factory is not invoked.
            HandleCreationError: The factory raised; nothing is registered.
        """
        self._add(name, config)

    def must_get(self, name: str, config: C) -> H:
        """Return the handle for ``name``, creating it with ``config`` if absent."""
        try:
            return self.get(name)
        except HandleNotFoundError:
            pass
        try:
            return self._add(name, config)
        except HandleAlreadyExistsError:
            logger.debug("pool.must_get.lost_race", pool=self._name, handle=name)
            return self.get(name)

    def remove(self, name: str) -> None:
        """Close the handle for ``name`` and unregister it.

        The entry is evicted even when ``close`` fails so the name can be
        registered again.

        Raises:
            HandleNotFoundError: No handle is registered under ``name``.
            HandleCloseError: The handle's ``close`` raised.
        """
        with self._lock.write():
            handle = self._handles.pop(name, None)
            if handle is None:
                self._record("remove", "not_found")
                raise HandleNotFoundError(name)
            self._record_size()
            try:
                handle.close()
            except Exception as exc:
                self._record("remove", "close_failed")
                logger.warning(
                    "pool.handle.close_failed", pool=self._name, handle=name, error=str(exc)
                )
                raise HandleCloseError(name, exc) from exc
        self._record("remove", "ok")
        logger.info("pool.handle.removed", pool=self._name, handle=name)

    def close(self) -> None:
        """Close every handle and empty the pool.

        Every handle is attempted even if earlier ones fail. Calling ``close``
        on an empty pool is a no-op.

        Raises:
            PoolCloseError: One or more handles failed to close; ``failures``
                maps each failed name to its exception.
        """
        failures: dict[str, Exception] = {}
        with self._lock.write():
            handles, self._handles = self._handles, {}
            for name, handle in handles.items():
                try:
                    handle.close()
                except Exception as exc:
                    failures[name] = exc
                    logger.warning(
                        "pool.handle.close_failed", pool=self._name, handle=name, error=str(exc)
                    )
            self._record_size()
        if failures:
            self._record("close", "partial")
            raise PoolCloseError(failures)
        self._record("close", "ok")
        if handles:
            logger.info("pool.closed", pool=self._name, closed=len(handles))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _add(self, name: str, config: C) -> H:
        _validate_name(name)
        with self._lock.write():
            if name in self._handles:
                self._record("add", "exists")
                raise HandleAlreadyExistsError(name)
            started = time.perf_counter()
            try:
                handle = self._factory(config)
            except Exception as exc:
                self._record("add", "failed")
                logger.warning(
                    "pool.handle.create_failed", pool=self._name, handle=name, error=str(exc)
                )
                raise HandleCreationError(name, exc) from exc
            finally:
                if self._metrics_enabled:
                    record_factory_latency(self._name, time.perf_counter() - started)
            self._handles[name] = handle
            self._record_size()
        self._record("add", "ok")
        logger.info("pool.handle.added", pool=self._name, handle=name)
        return handle

    def _record(self, operation: str, outcome: str) -> None:
        if self._metrics_enabled:
            record_operation(self._name, operation, outcome)

    def _record_size(self) -> None:
        if self._metrics_enabled:
            record_pool_size(self._name, len(self._handles))

    # ------------------------------------------------------------------
    # Python protocol support
    # ------------------------------------------------------------------
    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._handles)

    def __iter__(self) -> Iterator[str]:
        return iter(self.list())

    def __enter__(self) -> HandlePool[C, H]:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"HandlePool(name={self._name!r}, handles={len(self)})"


class ReadOnlyPool(Generic[H]):
    """Narrowed view exposing only the read operations of a pool."""

    def __init__(self, pool: HandlePool[Any, H]) -> None:
        self._pool = pool

    def get(self, name: str) -> H:
        return self._pool.get(name)

    def has(self, name: str) -> bool:
        return self._pool.has(name)

    def list(self) -> list[str]:
        return self._pool.list()


__all__ = ["HandlePool", "ReadOnlyPool"]
