"""Fluent builder producing named ``pymilvus`` collection schemas."""

from __future__ import annotations

from dataclasses import dataclass

from pymilvus import CollectionSchema

from .errors import SchemaError
from .fields import FieldSpec


@dataclass(slots=True, frozen=True)
class CollectionSpec:
    """A collection name paired with its validated schema."""

    name: str
    schema: CollectionSchema

    @property
    def description(self) -> str:
        return self.schema.description

    @property
    def primary_field(self) -> str:
        return self.schema.primary_field.name


class SchemaBuilder:
    """Collects field specs and validates them into a :class:`CollectionSpec`.

    Example:
        >>> spec = (
        ...     SchemaBuilder("articles")
        ...     .with_description("news articles")
        ...     .add_field(id_field("id"))
        ...     .add_field(vector_field("embedding", 768))
        ...     .build()
        ... )
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._description = ""
        self._fields: list[FieldSpec] = []
        self._dynamic = False

    def with_description(self, description: str) -> SchemaBuilder:
        self._description = description
        return self

    def add_field(self, field: FieldSpec) -> SchemaBuilder:
        self._fields.append(field)
        return self

    def enable_dynamic_field(self, enabled: bool = True) -> SchemaBuilder:
        self._dynamic = enabled
        return self

    def build(self) -> CollectionSpec:
        """Validate the collected fields and build the schema.

        Raises:
            SchemaError: The name is empty, no fields were added, field names
                repeat, or the primary key is missing or duplicated.
        """
        if not self._name or not self._name.strip():
            raise SchemaError("Collection name is required")
        if not self._fields:
            raise SchemaError("At least one field is required")

        seen: set[str] = set()
        for spec in self._fields:
            if spec.name in seen:
                raise SchemaError(f"Duplicate field name '{spec.name}'")
            seen.add(spec.name)

        primaries = [spec.name for spec in self._fields if spec.is_primary]
        if not primaries:
            raise SchemaError("A primary key field is required")
        if len(primaries) > 1:
            raise SchemaError(f"Only one primary key is allowed, found {', '.join(primaries)}")

        schema = CollectionSchema(
            fields=[spec.build() for spec in self._fields],
            description=self._description,
            enable_dynamic_field=self._dynamic,
        )
        return CollectionSpec(name=self._name, schema=schema)


__all__ = ["CollectionSpec", "SchemaBuilder"]
