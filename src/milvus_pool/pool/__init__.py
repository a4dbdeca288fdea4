"""Named-handle pool."""

from .errors import (
    HandleAlreadyExistsError,
    HandleCloseError,
    HandleClosedError,
    HandleCreationError,
    HandleNotFoundError,
    InvalidHandleNameError,
    PoolCloseError,
    PoolError,
)
from .registry import HandlePool, ReadOnlyPool
from .types import Handle, HandleFactory, Pool, PoolReader


__all__ = [
    "Handle",
    "HandleAlreadyExistsError",
    "HandleCloseError",
    "HandleClosedError",
    "HandleCreationError",
    "HandleFactory",
    "HandleNotFoundError",
    "HandlePool",
    "InvalidHandleNameError",
    "Pool",
    "PoolCloseError",
    "PoolError",
    "PoolReader",
    "ReadOnlyPool",
]
