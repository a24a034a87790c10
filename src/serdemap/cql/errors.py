"""CQL adapter error taxonomy.

Each error names the Python type that requested the operation and the
column type it was checked or written against, plus a ``kind`` saying
which part failed. Nested failures are kept on ``cause`` (and chained
with ``raise ... from``).
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from serdemap.errors import SerdeMapError

if TYPE_CHECKING:
    from serdemap.cql.types import ColumnType


class TypeCheckErrorKind(StrEnum):
    NOT_MAP = "not_map"
    MISMATCHED_TYPE = "mismatched_type"
    KEY_TYPE_CHECK_FAILED = "key_type_check_failed"
    VALUE_TYPE_CHECK_FAILED = "value_type_check_failed"


class SerializationErrorKind(StrEnum):
    TOO_MANY_ELEMENTS = "too_many_elements"
    KEY_SERIALIZATION_FAILED = "key_serialization_failed"
    VALUE_SERIALIZATION_FAILED = "value_serialization_failed"
    ELEMENT_SERIALIZATION_FAILED = "element_serialization_failed"
    SIZE_OVERFLOW = "size_overflow"
    VALUE_OVERFLOW = "value_overflow"


class DeserializationErrorKind(StrEnum):
    EXPECTED_NON_NULL = "expected_non_null"
    UNEXPECTED_END = "unexpected_end"
    NEGATIVE_COUNT = "negative_count"
    TRAILING_BYTES = "trailing_bytes"
    BAD_LENGTH = "bad_length"
    BAD_VALUE = "bad_value"
    KEY_DESERIALIZATION_FAILED = "key_deserialization_failed"
    VALUE_DESERIALIZATION_FAILED = "value_deserialization_failed"
    ELEMENT_DESERIALIZATION_FAILED = "element_deserialization_failed"


_MESSAGES: dict[str, str] = {
    TypeCheckErrorKind.NOT_MAP: (
        "the CQL type the value was attempted to be type checked against was not a map"
    ),
    TypeCheckErrorKind.MISMATCHED_TYPE: "the Python type is not compatible with the CQL type",
    TypeCheckErrorKind.KEY_TYPE_CHECK_FAILED: "the map key type failed the type check",
    TypeCheckErrorKind.VALUE_TYPE_CHECK_FAILED: "the map value type failed the type check",
    SerializationErrorKind.TOO_MANY_ELEMENTS: (
        "the collection contains too many elements to fit in CQL representation"
    ),
    SerializationErrorKind.KEY_SERIALIZATION_FAILED: "failed to serialize one of the keys",
    SerializationErrorKind.VALUE_SERIALIZATION_FAILED: "failed to serialize one of the values",
    SerializationErrorKind.ELEMENT_SERIALIZATION_FAILED: "failed to serialize one of the elements",
    SerializationErrorKind.SIZE_OVERFLOW: "the serialized value is too large to fit in a CQL cell",
    SerializationErrorKind.VALUE_OVERFLOW: "the value is out of range for the CQL type",
    DeserializationErrorKind.EXPECTED_NON_NULL: "expected a non-null value",
    DeserializationErrorKind.UNEXPECTED_END: "the cell ended before the value was complete",
    DeserializationErrorKind.NEGATIVE_COUNT: "the element count is negative",
    DeserializationErrorKind.TRAILING_BYTES: "the cell has bytes left after the value",
    DeserializationErrorKind.BAD_LENGTH: "the cell length does not match the CQL type",
    DeserializationErrorKind.BAD_VALUE: "the cell does not hold a valid value",
    DeserializationErrorKind.KEY_DESERIALIZATION_FAILED: "failed to deserialize one of the keys",
    DeserializationErrorKind.VALUE_DESERIALIZATION_FAILED: (
        "failed to deserialize one of the values"
    ),
    DeserializationErrorKind.ELEMENT_DESERIALIZATION_FAILED: (
        "failed to deserialize one of the elements"
    ),
}


class CqlError(SerdeMapError):
    """Base class for CQL type-check, serialization and deserialization errors."""

    def __init__(
        self,
        type_name: str,
        got: ColumnType,
        kind: StrEnum,
        cause: Exception | None = None,
    ) -> None:
        self.type_name = type_name
        self.got = got
        self.kind = kind
        self.cause = cause
        message = (
            f"Failed to {self._action} Python type {type_name} "
            f"with CQL type {got}: {_MESSAGES.get(kind, kind)}"
        )
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)

    _action = "process"


class TypeCheckError(CqlError):
    _action = "type check"


class SerializationError(CqlError):
    _action = "serialize"


class DeserializationError(CqlError):
    _action = "deserialize"


class CellOverflowError(SerdeMapError):
    """A cell payload exceeded the writer's size limit."""
