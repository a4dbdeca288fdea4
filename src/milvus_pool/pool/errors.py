"""Exceptions raised by the handle pool.

Every error carries an RFC 7807 problem payload through
:class:`~milvus_pool.utils.errors.FoundationError` so callers can surface
pool failures without parsing messages. Errors that wrap a failure from a
factory or a handle chain the original exception as ``__cause__``.

Examples:
    try:
        pool.get("analytics")
    except HandleNotFoundError as exc:
        return exc.problem.to_response()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from milvus_pool.utils.errors import FoundationError


class PoolError(FoundationError):
    """Base class for pool errors."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        detail: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status=status, detail=detail, extra=extra)


class InvalidHandleNameError(PoolError):
    """Raised when a handle name is empty or not a string."""

    def __init__(self, name: object) -> None:
        super().__init__(
            "Invalid handle name",
            status=422,
            detail=f"Handle names must be non-empty strings, received {name!r}.",
            extra={"name": repr(name)},
        )
        self.name = name


class HandleAlreadyExistsError(PoolError):
    """Raised by ``add`` when the name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(
            "Handle already exists",
            status=409,
            detail=f"A handle named '{name}' is already registered.",
            extra={"name": name},
        )
        self.name = name


class HandleNotFoundError(PoolError):
    """Raised when no handle is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            "Handle not found",
            status=404,
            detail=f"No handle named '{name}' is registered.",
            extra={"name": name},
        )
        self.name = name


class HandleCreationError(PoolError):
    """Raised when the factory fails to produce a handle."""

    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(
            "Handle creation failed",
            status=502,
            detail=f"Failed to create handle '{name}': {cause}",
            extra={"name": name, "cause": type(cause).__name__},
        )
        self.name = name


class HandleCloseError(PoolError):
    """Raised when a handle's ``close`` fails during removal."""

    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(
            "Handle close failed",
            status=500,
            detail=f"Failed to close handle '{name}': {cause}",
            extra={"name": name, "cause": type(cause).__name__},
        )
        self.name = name


class PoolCloseError(PoolError):
    """Aggregate error raised by ``close`` when one or more handles failed to close.

    Attributes:
        failures: Mapping of handle name to the exception its ``close`` raised.
    """

    def __init__(self, failures: Mapping[str, BaseException]) -> None:
        names = sorted(failures)
        summary = "; ".join(f"{name}: {failures[name]}" for name in names)
        super().__init__(
            "Failed to close some handles",
            status=500,
            detail=summary,
            extra={"names": names},
        )
        self.failures = dict(failures)


class HandleClosedError(FoundationError):
    """Raised by a handle when it is used after being closed.

    Defined here so every handle implementation reports the same
    distinguishable error; the pool itself never raises it.
    """

    def __init__(self, resource: str = "handle") -> None:
        super().__init__(
            "Handle is closed",
            status=410,
            detail=f"The {resource} has been closed and can no longer be used.",
            extra={"resource": resource},
        )


__all__ = [
    "HandleAlreadyExistsError",
    "HandleCloseError",
    "HandleClosedError",
    "HandleCreationError",
    "HandleNotFoundError",
    "InvalidHandleNameError",
    "PoolCloseError",
    "PoolError",
]
