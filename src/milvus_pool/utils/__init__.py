"""Utility modules shared by the pool and client layers."""

from .errors import FoundationError, ProblemDetail


__all__ = ["FoundationError", "ProblemDetail"]
