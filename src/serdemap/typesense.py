"""Typesense schema integration.

Typesense indexes a SerdeMap as a nested ``object`` field whatever its
key and value types are; the collection needs ``enable_nested_fields``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

TYPESENSE_FIELD_TYPE = "object"


def to_typesense_type(map_type: type[Any] | None = None) -> str:
    """Declared Typesense field type for any SerdeMap type."""
    return TYPESENSE_FIELD_TYPE


class TypesenseField(BaseModel):
    """One entry of a Typesense collection schema's ``fields`` list."""

    model_config = {"frozen": True}

    name: str
    type: str
    optional: bool = False
    facet: bool = False
    index: bool = True


def typesense_field(name: str, map_type: type[Any] | None = None, **options: Any) -> TypesenseField:
    """Build the schema field for a SerdeMap-typed document attribute."""
    return TypesenseField(name=name, type=to_typesense_type(map_type), **options)


def collection_schema(name: str, fields: list[TypesenseField]) -> dict[str, Any]:
    """Collection schema dict with nested fields enabled when any field is an object."""
    schema: dict[str, Any] = {
        "name": name,
        "fields": [field.model_dump() for field in fields],
    }
    if any(field.type == TYPESENSE_FIELD_TYPE for field in fields):
        schema["enable_nested_fields"] = True
    return schema
