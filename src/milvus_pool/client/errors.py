"""Errors raised by the Milvus client handle."""

from __future__ import annotations

from milvus_pool.utils.errors import FoundationError


class MilvusOperationError(FoundationError):
    """Raised when the driver rejects or fails an operation.

    The driver exception is available as ``__cause__``; its status code, when
    present, is copied to ``code``.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        code = getattr(cause, "code", None)
        message = getattr(cause, "message", None) or str(cause)
        super().__init__(
            "Milvus operation failed",
            status=502,
            detail=f"{operation} failed: {message}",
            extra={"operation": operation, "code": code},
        )
        self.operation = operation
        self.code = code


__all__ = ["MilvusOperationError"]
