"""Tests for the Typesense schema helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from serdemap.domain.container import SerdeMap
from serdemap.typesense import (
    TypesenseField,
    collection_schema,
    to_typesense_type,
    typesense_field,
)
from tests.conftest import IdMap


class TestFieldType:
    @pytest.mark.parametrize("map_type", [None, SerdeMap, SerdeMap[str, int], IdMap, IdMap[str]])
    def test_always_object(self, map_type: object) -> None:
        assert to_typesense_type(map_type) == "object"  # type: ignore[arg-type]


class TestField:
    def test_defaults(self) -> None:
        field = typesense_field("attributes", SerdeMap)
        assert field.model_dump() == {
            "name": "attributes",
            "type": "object",
            "optional": False,
            "facet": False,
            "index": True,
        }

    def test_options(self) -> None:
        field = typesense_field("tags", IdMap, optional=True, facet=True)
        assert field.optional is True
        assert field.facet is True

    def test_frozen(self) -> None:
        field = typesense_field("attributes")
        with pytest.raises(ValidationError):
            field.name = "other"  # type: ignore[misc]


class TestCollectionSchema:
    def test_enables_nested_fields(self) -> None:
        schema = collection_schema("docs", [typesense_field("attributes")])
        assert schema["enable_nested_fields"] is True
        assert schema["fields"][0]["type"] == "object"

    def test_flat_collection(self) -> None:
        schema = collection_schema("docs", [TypesenseField(name="title", type="string")])
        assert "enable_nested_fields" not in schema
