"""CQL column type model and a parser for its textual form.

Only the shapes the map codec needs are modelled: native scalar types
and the three collection kinds. Types render back to CQL text, so
``parse_column_type(str(t)) == t`` for every supported type.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class NativeType(StrEnum):
    """Native CQL scalar types supported by the value codecs."""

    ASCII = "ascii"
    BIGINT = "bigint"
    BLOB = "blob"
    BOOLEAN = "boolean"
    COUNTER = "counter"
    DOUBLE = "double"
    FLOAT = "float"
    INT = "int"
    SMALLINT = "smallint"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    TINYINT = "tinyint"
    UUID = "uuid"


_NATIVE_ALIASES: dict[str, NativeType] = {"varchar": NativeType.TEXT}


@dataclass(frozen=True)
class Native:
    kind: NativeType

    def __str__(self) -> str:
        return str(self.kind)


@dataclass(frozen=True)
class ListType:
    element: ColumnType

    def __str__(self) -> str:
        return f"list<{self.element}>"


@dataclass(frozen=True)
class SetType:
    element: ColumnType

    def __str__(self) -> str:
        return f"set<{self.element}>"


@dataclass(frozen=True)
class MapType:
    key: ColumnType
    value: ColumnType

    def __str__(self) -> str:
        return f"map<{self.key}, {self.value}>"


type CollectionType = ListType | SetType | MapType


@dataclass(frozen=True)
class Collection:
    """A collection column; ``frozen`` collections are serialized as blobs."""

    typ: CollectionType
    frozen: bool = False

    def __str__(self) -> str:
        return f"frozen<{self.typ}>" if self.frozen else str(self.typ)


type ColumnType = Native | Collection


def native(kind: NativeType | str) -> Native:
    return Native(NativeType(kind))


def map_of(key: ColumnType, value: ColumnType, *, frozen: bool = False) -> Collection:
    """Shorthand for ``Collection(MapType(key, value), frozen)``."""
    return Collection(MapType(key, value), frozen=frozen)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

_TOKEN = re.compile(r"\s*(?:([A-Za-z_][A-Za-z0-9_]*)|([<>,]))")


class ColumnTypeSyntaxError(ValueError):
    """Raised when a CQL type string cannot be parsed."""


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    while pos < len(text):
        if text[pos:].strip() == "":
            break
        match = _TOKEN.match(text, pos)
        if match is None:
            msg = f"Unexpected character {text[pos:].lstrip()[:1]!r} in type {text!r}"
            raise ColumnTypeSyntaxError(msg)
        tokens.append((match.group(1) or match.group(2)).lower())
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def _next(self) -> str:
        if self.pos >= len(self.tokens):
            msg = f"Unexpected end of type {self.text!r}"
            raise ColumnTypeSyntaxError(msg)
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _expect(self, token: str) -> None:
        got = self._next()
        if got != token:
            msg = f"Expected {token!r} but found {got!r} in type {self.text!r}"
            raise ColumnTypeSyntaxError(msg)

    def parse(self) -> ColumnType:
        typ = self._type(frozen=False)
        if self.pos != len(self.tokens):
            msg = f"Trailing input {self.tokens[self.pos]!r} in type {self.text!r}"
            raise ColumnTypeSyntaxError(msg)
        return typ

    def _type(self, *, frozen: bool) -> ColumnType:
        name = self._next()
        if name == "frozen":
            self._expect("<")
            inner = self._type(frozen=True)
            self._expect(">")
            return inner
        if name in ("list", "set"):
            self._expect("<")
            element = self._type(frozen=False)
            self._expect(">")
            coll: CollectionType = ListType(element) if name == "list" else SetType(element)
            return Collection(coll, frozen=frozen)
        if name == "map":
            self._expect("<")
            key = self._type(frozen=False)
            self._expect(",")
            value = self._type(frozen=False)
            self._expect(">")
            return Collection(MapType(key, value), frozen=frozen)
        kind = _NATIVE_ALIASES.get(name)
        if kind is None:
            try:
                kind = NativeType(name)
            except ValueError:
                msg = f"Unsupported CQL type {name!r} in {self.text!r}"
                raise ColumnTypeSyntaxError(msg) from None
        return Native(kind)


def parse_column_type(text: str) -> ColumnType:
    """Parse CQL type text such as ``"map<text, frozen<list<int>>>"``.

    Raises:
        ColumnTypeSyntaxError: On malformed or unsupported input.
    """
    return _Parser(text).parse()
