"""Protocol definitions for pooled handles, their factories, and pool views."""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

ConfigT = TypeVar("ConfigT", contravariant=True)
HandleT = TypeVar("HandleT", bound="Handle")
HandleT_co = TypeVar("HandleT_co", bound="Handle", covariant=True)


@runtime_checkable
class Handle(Protocol):
    """A live resource owned by the pool.

    ``close`` must be idempotent. After the first call every other operation
    on the handle must raise :class:`~milvus_pool.pool.errors.HandleClosedError`.
    """

    def close(self) -> None:
        """Release the underlying resource."""


class HandleFactory(Protocol[ConfigT, HandleT_co]):
    """Callable that produces a new handle from an opaque configuration value.

    Timeouts and cancellation are expressed through the configuration; the
    pool never interrupts a running factory.
    """

    def __call__(self, config: ConfigT) -> HandleT_co:  # pragma: no cover - protocol
        ...


class PoolReader(Protocol[HandleT_co]):
    """Read-only view of a pool."""

    def get(self, name: str) -> HandleT_co:
        """Return the handle registered under ``name``."""

    def has(self, name: str) -> bool:
        """Return whether ``name`` is registered."""

    def list(self) -> list[str]:
        """Return a snapshot of the registered names."""


class Pool(PoolReader[HandleT], Protocol[ConfigT, HandleT]):
    """Full capability set of a named-handle pool."""

    def add(self, name: str, config: ConfigT) -> None:
        """Create and register a handle under ``name``."""

    def must_get(self, name: str, config: ConfigT) -> HandleT:
        """Return the handle for ``name``, creating it when absent."""

    def remove(self, name: str) -> None:
        """Close and unregister the handle for ``name``."""

    def close(self) -> None:
        """Close every handle and empty the pool."""


__all__ = ["ConfigT", "Handle", "HandleFactory", "HandleT", "Pool", "PoolReader"]
