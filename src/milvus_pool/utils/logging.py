"""Structured JSON logging for the pool, the client handles and the CLI.

Structlog events are handed to the standard library logger of the same name,
so a single :class:`JsonFormatter` on the root handler renders every line and
redacts secret fields, whether the event came from structlog or ``logging``.

Thread Safety:
    - :func:`configure_logging` replaces global handlers; call it once at startup
    - Correlation ids live in ``contextvars`` and follow threads and tasks
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from contextvars import ContextVar, Token
from typing import Any

import structlog

from milvus_pool.config.settings import LoggingSettings

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """Render a record and its ``extra`` fields as one JSON object per line.

    Args:
        scrub_fields: Field names (case-insensitive) whose values are replaced
            with ``***``, including inside nested dictionaries and lists.
    """

    def __init__(self, *, scrub_fields: Iterable[str] | None = None) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")
        self._scrub_fields = {field.lower() for field in scrub_fields or ()}

    def _scrub(self, key: str, value: Any) -> Any:
        if key.lower() in self._scrub_fields:
            return "***"
        if isinstance(value, dict):
            return {k: self._scrub(str(k), v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._scrub("", item) for item in value]
        return value

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, self.datefmt),
        }
        correlation_id = _correlation_id.get()
        if correlation_id:
            payload["correlation_id"] = correlation_id
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                payload[key] = self._scrub(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, default=str)


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    if isinstance(level, int):
        return level
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    settings: LoggingSettings | None = None,
) -> None:
    """Send stdlib and structlog output to stderr as scrubbed JSON.

    ``settings`` wins over ``level`` when both are given. Handlers installed
    by pytest are kept so ``caplog`` keeps working.
    """
    scrub_fields: Iterable[str] | None = None
    if settings is not None:
        level = settings.level
        scrub_fields = settings.scrub_fields
    level_value = _resolve_level(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter(scrub_fields=scrub_fields))
    root_logger = logging.getLogger()
    preserved = [
        existing
        for existing in root_logger.handlers
        if (type(existing).__module__ or "").startswith("_pytest.")
    ]
    logging.basicConfig(level=level_value, handlers=[*preserved, handler], force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_correlation_id(value: str) -> Token[str | None]:
    """Attach ``value`` to every log line emitted from the current context."""
    token = _correlation_id.set(value)
    structlog.contextvars.bind_contextvars(correlation_id=value)
    return token


def reset_correlation_id(token: Token[str | None] | None) -> None:
    if token is not None:
        _correlation_id.reset(token)
    structlog.contextvars.unbind_contextvars("correlation_id")


def get_correlation_id() -> str | None:
    return _correlation_id.get()


__all__ = [
    "JsonFormatter",
    "bind_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "reset_correlation_id",
]
