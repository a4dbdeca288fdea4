"""Pooled handle around ``pymilvus.MilvusClient``.

Key Responsibilities:
    - Forward database, collection, partition, alias, index, and data
      operations to the driver with the configured per-call timeout
    - Refuse every operation once the handle has been closed
    - Retry rate limited calls according to the connection options

Collaborators:
    - Upstream: :class:`~milvus_pool.pool.registry.HandlePool` stores and closes
      handles; applications call the operations
    - Downstream: ``pymilvus.MilvusClient`` (or any object with the same methods)

Thread Safety:
    - Operations share a reader/writer lock in shared mode and may run
      concurrently; ``close`` takes it exclusively and waits for in-flight calls.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from pymilvus import MilvusClient
from pymilvus.exceptions import MilvusException
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from milvus_pool.config.client import ClientOptions
from milvus_pool.pool.errors import HandleClosedError
from milvus_pool.pool.lock import ReadWriteLock
from milvus_pool.schema.builder import CollectionSpec

from .errors import MilvusOperationError

logger = structlog.get_logger(__name__)

# Status codes reported when a request is throttled (current and legacy).
RATE_LIMIT_CODES = frozenset({8})
LEGACY_RATE_LIMIT_CODES = frozenset({49})


def _is_rate_limited(exc: BaseException) -> bool:
    if not isinstance(exc, MilvusException):
        return False
    return (
        getattr(exc, "code", None) in RATE_LIMIT_CODES
        or getattr(exc, "compatible_code", None) in LEGACY_RATE_LIMIT_CODES
    )


class MilvusClientHandle:
    """Closable wrapper that owns exactly one driver client."""

    def __init__(self, client: Any, options: ClientOptions) -> None:
        self._client = client
        self._options = options
        self._lock = ReadWriteLock()
        self._closed = False

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def raw_client(self) -> Any | None:
        """Return the driver client, or ``None`` once the handle is closed."""
        with self._lock.read():
            return None if self._closed else self._client

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        """Close the driver client; further calls are no-ops."""
        with self._lock.write():
            if self._closed:
                return
            self._closed = True
            self._client.close()
        logger.debug("milvus.handle.closed", address=self._options.address)

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------
    def create_database(self, db_name: str, properties: Mapping[str, Any] | None = None) -> None:
        kwargs: dict[str, Any] = {}
        if properties:
            kwargs["properties"] = dict(properties)
        self._call("create_database", db_name=db_name, **kwargs)

    def drop_database(self, db_name: str) -> None:
        self._call("drop_database", db_name=db_name)

    def use_database(self, db_name: str) -> None:
        """Switch the database used by subsequent calls on this handle."""
        self._call("using_database", db_name=db_name, with_timeout=False)

    def list_databases(self) -> list[str]:
        return list(self._call("list_databases"))

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------
    def create_collection(
        self,
        spec: CollectionSpec,
        *,
        shards_num: int = 1,
        consistency_level: str | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {"num_shards": shards_num}
        if consistency_level is not None:
            kwargs["consistency_level"] = consistency_level
        self._call("create_collection", collection_name=spec.name, schema=spec.schema, **kwargs)

    def drop_collection(self, collection_name: str) -> None:
        self._call("drop_collection", collection_name=collection_name)

    def has_collection(self, collection_name: str) -> bool:
        return bool(self._call("has_collection", collection_name=collection_name))

    def load_collection(self, collection_name: str) -> None:
        """Load the collection into memory, blocking until it is ready."""
        self._call("load_collection", collection_name=collection_name)

    def release_collection(self, collection_name: str) -> None:
        self._call("release_collection", collection_name=collection_name)

    def get_collection_stats(self, collection_name: str) -> dict[str, Any]:
        return dict(self._call("get_collection_stats", collection_name=collection_name))

    def describe_collection(self, collection_name: str) -> dict[str, Any]:
        return dict(self._call("describe_collection", collection_name=collection_name))

    def list_collections(self) -> list[str]:
        return list(self._call("list_collections"))

    # ------------------------------------------------------------------
    # Aliases
    # ------------------------------------------------------------------
    def create_alias(self, collection_name: str, alias: str) -> None:
        self._call("create_alias", collection_name=collection_name, alias=alias)

    def drop_alias(self, alias: str) -> None:
        self._call("drop_alias", alias=alias)

    def alter_alias(self, collection_name: str, alias: str) -> None:
        self._call("alter_alias", collection_name=collection_name, alias=alias)

    # ------------------------------------------------------------------
    # Partitions
    # ------------------------------------------------------------------
    def create_partition(self, collection_name: str, partition_name: str) -> None:
        self._call(
            "create_partition", collection_name=collection_name, partition_name=partition_name
        )

    def drop_partition(self, collection_name: str, partition_name: str) -> None:
        self._call(
            "drop_partition", collection_name=collection_name, partition_name=partition_name
        )

    def has_partition(self, collection_name: str, partition_name: str) -> bool:
        return bool(
            self._call(
                "has_partition", collection_name=collection_name, partition_name=partition_name
            )
        )

    def list_partitions(self, collection_name: str) -> list[str]:
        return list(self._call("list_partitions", collection_name=collection_name))

    def load_partitions(self, collection_name: str, partition_names: Sequence[str]) -> None:
        self._call(
            "load_partitions",
            collection_name=collection_name,
            partition_names=list(partition_names),
        )

    def release_partitions(self, collection_name: str, partition_names: Sequence[str]) -> None:
        self._call(
            "release_partitions",
            collection_name=collection_name,
            partition_names=list(partition_names),
        )

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------
    def create_index(
        self,
        collection_name: str,
        field_name: str,
        *,
        index_type: str,
        metric_type: str,
        params: Mapping[str, Any] | None = None,
        index_name: str = "",
    ) -> None:
        """Build an index on ``field_name``; ``params`` are passed through untouched."""
        index_params = MilvusClient.prepare_index_params()
        index_params.add_index(
            field_name=field_name,
            index_type=index_type,
            index_name=index_name or field_name,
            metric_type=metric_type,
            params=dict(params or {}),
        )
        self._call("create_index", collection_name=collection_name, index_params=index_params)

    def drop_index(self, collection_name: str, index_name: str) -> None:
        self._call("drop_index", collection_name=collection_name, index_name=index_name)

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------
    def insert(
        self,
        collection_name: str,
        rows: Sequence[Mapping[str, Any]],
        *,
        partition_name: str | None = None,
    ) -> dict[str, Any]:
        """Insert row dictionaries and return the driver's result (``insert_count``, ``ids``)."""
        kwargs: dict[str, Any] = {}
        if partition_name:
            kwargs["partition_name"] = partition_name
        result = self._call(
            "insert",
            collection_name=collection_name,
            data=[dict(row) for row in rows],
            **kwargs,
        )
        return dict(result)

    def delete(
        self,
        collection_name: str,
        filter: str,
        *,
        partition_name: str | None = None,
    ) -> dict[str, Any]:
        """Delete rows matching the boolean ``filter`` expression."""
        kwargs: dict[str, Any] = {}
        if partition_name:
            kwargs["partition_name"] = partition_name
        result = self._call("delete", collection_name=collection_name, filter=filter, **kwargs)
        return dict(result)

    def search(
        self,
        collection_name: str,
        vectors: Sequence[Sequence[float]],
        *,
        anns_field: str,
        metric_type: str,
        limit: int,
        filter: str = "",
        output_fields: Sequence[str] | None = None,
        partition_names: Sequence[str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> list[list[dict[str, Any]]]:
        """Run a vector search; returns one hit list per query vector."""
        result = self._call(
            "search",
            collection_name=collection_name,
            data=[list(vector) for vector in vectors],
            anns_field=anns_field,
            limit=limit,
            filter=filter,
            output_fields=list(output_fields) if output_fields is not None else None,
            partition_names=list(partition_names) if partition_names is not None else None,
            search_params={"metric_type": metric_type, "params": dict(params or {})},
        )
        return [list(hits) for hits in result]

    def query(
        self,
        collection_name: str,
        filter: str,
        *,
        output_fields: Sequence[str] | None = None,
        partition_names: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        result = self._call(
            "query",
            collection_name=collection_name,
            filter=filter,
            output_fields=list(output_fields) if output_fields is not None else None,
            partition_names=list(partition_names) if partition_names is not None else None,
        )
        return list(result)

    def compact(self, collection_name: str) -> int:
        """Trigger compaction and return the server's job id."""
        return int(self._call("compact", collection_name=collection_name))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _retrying(self) -> Retrying:
        """Retry policy: ``max_retry`` extra attempts, waits capped at ``max_retry_backoff``."""
        return Retrying(
            stop=stop_after_attempt(self._options.max_retry + 1),
            wait=wait_exponential(multiplier=0.1, max=self._options.max_retry_backoff),
            retry=retry_if_exception(_is_rate_limited),
            reraise=True,
        )

    def _call(self, method_name: str, *, with_timeout: bool = True, **kwargs: Any) -> Any:
        with self._lock.read():
            if self._closed:
                raise HandleClosedError("Milvus client")
            method = getattr(self._client, method_name)
            if with_timeout:
                kwargs.setdefault("timeout", self._options.operation_timeout)
            try:
                for attempt in self._retrying():
                    with attempt:
                        result = method(**kwargs)
            except MilvusException as exc:
                logger.warning(
                    "milvus.operation.failed",
                    operation=method_name,
                    code=getattr(exc, "code", None),
                    error=str(exc),
                )
                raise MilvusOperationError(method_name, exc) from exc
        return result


__all__ = ["MilvusClientHandle", "RATE_LIMIT_CODES"]
