"""Collection-scoped facade over a pooled client handle."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from milvus_pool.schema.builder import CollectionSpec

from .handle import MilvusClientHandle

_CONSISTENCY_LEVELS = frozenset({"Strong", "Session", "Bounded", "Eventually"})


@dataclass(slots=True, frozen=True)
class CollectionOptions:
    """Creation options for a collection."""

    description: str = ""
    shards_num: int = 2
    consistency_level: str = "Strong"

    def __post_init__(self) -> None:
        if self.shards_num < 1:
            raise ValueError("shards_num must be at least 1")
        if self.consistency_level not in _CONSISTENCY_LEVELS:
            raise ValueError(
                f"consistency_level must be one of {sorted(_CONSISTENCY_LEVELS)}"
            )


class Collection:
    """Binds a handle to one collection so calls omit the collection name."""

    def __init__(
        self,
        handle: MilvusClientHandle,
        spec: CollectionSpec,
        options: CollectionOptions | None = None,
    ) -> None:
        self._handle = handle
        self._spec = spec
        self._options = options or CollectionOptions()

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def description(self) -> str:
        return self._options.description or self._spec.description

    @property
    def spec(self) -> CollectionSpec:
        return self._spec

    def create(self) -> None:
        self._handle.create_collection(
            self._spec,
            shards_num=self._options.shards_num,
            consistency_level=self._options.consistency_level,
        )

    def exists(self) -> bool:
        return self._handle.has_collection(self.name)

    def ensure(self) -> bool:
        """Create the collection when missing; returns whether it was created."""
        if self.exists():
            return False
        self.create()
        return True

    def insert(
        self,
        rows: Sequence[Mapping[str, Any] | BaseModel],
        *,
        partition_name: str | None = None,
    ) -> dict[str, Any]:
        payload = [row.model_dump() if isinstance(row, BaseModel) else row for row in rows]
        return self._handle.insert(self.name, payload, partition_name=partition_name)

    def delete(self, filter: str, *, partition_name: str | None = None) -> dict[str, Any]:
        return self._handle.delete(self.name, filter, partition_name=partition_name)

    def search(
        self,
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
        return self._handle.search(
            self.name,
            vectors,
            anns_field=anns_field,
            metric_type=metric_type,
            limit=limit,
            filter=filter,
            output_fields=output_fields,
            partition_names=partition_names,
            params=params,
        )

    def query(
        self,
        filter: str,
        *,
        output_fields: Sequence[str] | None = None,
        partition_names: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        return self._handle.query(
            self.name, filter, output_fields=output_fields, partition_names=partition_names
        )

    def create_index(
        self,
        field_name: str,
        *,
        index_type: str,
        metric_type: str,
        params: Mapping[str, Any] | None = None,
        index_name: str = "",
    ) -> None:
        self._handle.create_index(
            self.name,
            field_name,
            index_type=index_type,
            metric_type=metric_type,
            params=params,
            index_name=index_name,
        )

    def drop_index(self, index_name: str) -> None:
        self._handle.drop_index(self.name, index_name)

    def create_partition(self, partition_name: str) -> None:
        self._handle.create_partition(self.name, partition_name)

    def drop_partition(self, partition_name: str) -> None:
        self._handle.drop_partition(self.name, partition_name)

    def load(self) -> None:
        self._handle.load_collection(self.name)

    def release(self) -> None:
        self._handle.release_collection(self.name)

    def drop(self) -> None:
        self._handle.drop_collection(self.name)

    def stats(self) -> dict[str, Any]:
        return self._handle.get_collection_stats(self.name)


__all__ = ["Collection", "CollectionOptions"]
