"""Collection schema helpers."""

from .builder import CollectionSpec, SchemaBuilder
from .errors import SchemaError
from .fields import (
    FieldSpec,
    bool_field,
    double_field,
    float_field,
    id_field,
    int64_field,
    json_field,
    varchar_field,
    vector_field,
)


__all__ = [
    "CollectionSpec",
    "FieldSpec",
    "SchemaBuilder",
    "SchemaError",
    "bool_field",
    "double_field",
    "float_field",
    "id_field",
    "int64_field",
    "json_field",
    "varchar_field",
    "vector_field",
]
