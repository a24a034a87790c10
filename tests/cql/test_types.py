"""Tests for the CQL column type model and parser."""

from __future__ import annotations

import pytest

from serdemap.cql.types import (
    Collection,
    ColumnTypeSyntaxError,
    ListType,
    MapType,
    Native,
    NativeType,
    SetType,
    map_of,
    native,
    parse_column_type,
)


class TestParse:
    def test_native(self) -> None:
        assert parse_column_type("int") == Native(NativeType.INT)

    def test_case_and_whitespace(self) -> None:
        assert parse_column_type("  MAP< Text ,INT >  ") == map_of(native("text"), native("int"))

    def test_varchar_is_text(self) -> None:
        assert parse_column_type("varchar") == native("text")

    def test_collections(self) -> None:
        assert parse_column_type("list<int>") == Collection(ListType(native("int")))
        assert parse_column_type("set<uuid>") == Collection(SetType(native("uuid")))

    def test_frozen_nested(self) -> None:
        typ = parse_column_type("map<text, frozen<list<bigint>>>")
        assert typ == Collection(
            MapType(native("text"), Collection(ListType(native("bigint")), frozen=True))
        )

    def test_frozen_map(self) -> None:
        assert parse_column_type("frozen<map<int, int>>") == map_of(
            native("int"), native("int"), frozen=True
        )

    @pytest.mark.parametrize(
        ("text", "fragment"),
        [
            ("map<text", "Unexpected end"),
            ("map<text int>", "Expected ','"),
            ("int int", "Trailing input"),
            ("duration", "Unsupported CQL type 'duration'"),
            ("map<text, int>;", "Unexpected character ';'"),
            ("", "Unexpected end"),
        ],
    )
    def test_syntax_errors(self, text: str, fragment: str) -> None:
        with pytest.raises(ColumnTypeSyntaxError, match=fragment):
            parse_column_type(text)

    def test_syntax_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_column_type("map<")


class TestRender:
    def test_map(self) -> None:
        assert str(map_of(native("text"), native("int"))) == "map<text, int>"

    def test_frozen(self) -> None:
        typ = Collection(SetType(native("ascii")), frozen=True)
        assert str(typ) == "frozen<set<ascii>>"

    @pytest.mark.parametrize(
        "text",
        ["blob", "list<double>", "map<uuid, frozen<map<text, list<int>>>>", "frozen<set<int>>"],
    )
    def test_render_parse_round_trip(self, text: str) -> None:
        typ = parse_column_type(text)
        assert parse_column_type(str(typ)) == typ
        assert str(typ) == text
