"""Errors raised while building collection schemas."""

from __future__ import annotations

from milvus_pool.utils.errors import FoundationError


class SchemaError(FoundationError):
    """Raised when a field or collection schema is invalid."""

    def __init__(self, detail: str) -> None:
        super().__init__("Invalid collection schema", status=422, detail=detail)


__all__ = ["SchemaError"]
