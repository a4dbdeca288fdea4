"""Field specifications translated into ``pymilvus`` field schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pymilvus import DataType, FieldSchema

from .errors import SchemaError

_ID_TYPES = frozenset({DataType.INT64, DataType.VARCHAR})
_VECTOR_TYPES = frozenset({DataType.FLOAT_VECTOR, DataType.BINARY_VECTOR})


@dataclass(slots=True)
class FieldSpec:
    """Mutable description of one collection field.

    The ``with_*`` helpers return the same instance so specs can be built
    fluently before being handed to :class:`~milvus_pool.schema.builder.SchemaBuilder`.
    """

    name: str
    dtype: DataType
    description: str = ""
    is_primary: bool = False
    auto_id: bool = False
    type_params: dict[str, Any] = field(default_factory=dict)

    def with_description(self, description: str) -> FieldSpec:
        self.description = description
        return self

    def with_primary_key(self, auto_id: bool = False) -> FieldSpec:
        self.is_primary = True
        self.auto_id = auto_id
        return self

    def with_type_param(self, key: str, value: Any) -> FieldSpec:
        self.type_params[key] = value
        return self

    def build(self) -> FieldSchema:
        kwargs: dict[str, Any] = dict(self.type_params)
        if self.is_primary:
            kwargs["is_primary"] = True
            kwargs["auto_id"] = self.auto_id
        return FieldSchema(
            name=self.name,
            dtype=self.dtype,
            description=self.description,
            **kwargs,
        )


def _require_name(name: str) -> None:
    if not name or not name.strip():
        raise SchemaError("Field names must be non-empty")


def id_field(
    name: str,
    dtype: DataType = DataType.INT64,
    *,
    auto_id: bool = False,
    max_length: int = 256,
) -> FieldSpec:
    """Primary key field; only INT64 and VARCHAR keys are supported."""
    _require_name(name)
    if dtype not in _ID_TYPES:
        raise SchemaError(f"Invalid primary key data type {dtype!r} for field '{name}'")
    spec = FieldSpec(name=name, dtype=dtype).with_primary_key(auto_id)
    if dtype == DataType.VARCHAR:
        spec.with_type_param("max_length", max_length)
    return spec


def vector_field(name: str, dim: int, dtype: DataType = DataType.FLOAT_VECTOR) -> FieldSpec:
    _require_name(name)
    if dtype not in _VECTOR_TYPES:
        raise SchemaError(f"Invalid vector data type {dtype!r} for field '{name}'")
    if dim <= 0:
        raise SchemaError(f"Vector field '{name}' needs a positive dimension, received {dim}")
    if dtype == DataType.BINARY_VECTOR and dim % 8:
        raise SchemaError(f"Binary vector field '{name}' needs a dimension divisible by 8")
    return FieldSpec(name=name, dtype=dtype).with_type_param("dim", dim)


def varchar_field(name: str, max_length: int) -> FieldSpec:
    _require_name(name)
    if max_length <= 0:
        raise SchemaError(f"VarChar field '{name}' needs a positive max_length")
    return FieldSpec(name=name, dtype=DataType.VARCHAR).with_type_param("max_length", max_length)


def int64_field(name: str) -> FieldSpec:
    _require_name(name)
    return FieldSpec(name=name, dtype=DataType.INT64)


def float_field(name: str) -> FieldSpec:
    _require_name(name)
    return FieldSpec(name=name, dtype=DataType.FLOAT)


def double_field(name: str) -> FieldSpec:
    _require_name(name)
    return FieldSpec(name=name, dtype=DataType.DOUBLE)


def bool_field(name: str) -> FieldSpec:
    _require_name(name)
    return FieldSpec(name=name, dtype=DataType.BOOL)


def json_field(name: str) -> FieldSpec:
    _require_name(name)
    return FieldSpec(name=name, dtype=DataType.JSON)


__all__ = [
    "FieldSpec",
    "bool_field",
    "double_field",
    "float_field",
    "id_field",
    "int64_field",
    "json_field",
    "varchar_field",
    "vector_field",
]
