"""Value codecs for the CQL cell encoding.

Natives are fixed-width big-endian integers and floats, UTF-8 text, raw
blobs, 16-byte UUIDs and millisecond timestamps. Collections are an i32
element count followed by one cell per element (two per map entry).
:func:`serialize_mapping` and :func:`iter_mapping` carry the map layout
used by :mod:`serdemap.cql.mapping`.
"""

from __future__ import annotations

import struct
import types
import uuid
from collections.abc import Iterable, Iterator, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any, Union, get_args, get_origin

from serdemap.cql.errors import (
    CellOverflowError,
    DeserializationError,
    DeserializationErrorKind,
    SerializationError,
    SerializationErrorKind,
    TypeCheckError,
    TypeCheckErrorKind,
)
from serdemap.cql.types import Collection, ColumnType, ListType, MapType, Native, NativeType
from serdemap.cql.writers import CellWriter, FrameSlice, WrittenCell

_I32 = struct.Struct(">i")
I32_MAX = 2**31 - 1

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_FIXED: dict[NativeType, struct.Struct] = {
    NativeType.INT: struct.Struct(">i"),
    NativeType.BIGINT: struct.Struct(">q"),
    NativeType.COUNTER: struct.Struct(">q"),
    NativeType.SMALLINT: struct.Struct(">h"),
    NativeType.TINYINT: struct.Struct(">b"),
    NativeType.DOUBLE: struct.Struct(">d"),
    NativeType.FLOAT: struct.Struct(">f"),
}

_INTEGERS = frozenset(
    {NativeType.INT, NativeType.BIGINT, NativeType.COUNTER, NativeType.SMALLINT, NativeType.TINYINT}
)

_PYTHON_TYPES: dict[NativeType, tuple[type, ...]] = {
    NativeType.ASCII: (str,),
    NativeType.TEXT: (str,),
    NativeType.BLOB: (bytes, bytearray, memoryview),
    NativeType.BOOLEAN: (bool,),
    NativeType.DOUBLE: (float, int),
    NativeType.FLOAT: (float, int),
    NativeType.UUID: (uuid.UUID,),
    NativeType.TIMESTAMP: (datetime, int),
    **{kind: (int,) for kind in _INTEGERS},
}


def type_name(value: Any) -> str:
    """Qualified name of *value*'s type, used in error reports."""
    cls = value if isinstance(value, type) else type(value)
    return f"{cls.__module__}.{cls.__qualname__}"


# ---------------------------------------------------------------------------
# Type compatibility
# ---------------------------------------------------------------------------


def python_type_matches(py_type: Any, typ: ColumnType) -> bool:
    """Whether values annotated as *py_type* can be stored in a *typ* column."""
    if py_type is Any or py_type is object:
        return True
    origin = get_origin(py_type) or py_type
    args = get_args(py_type)
    if origin is Union or origin is types.UnionType:
        return all(python_type_matches(arm, typ) for arm in args if arm is not type(None))
    if not isinstance(origin, type):
        return False

    if isinstance(typ, Native):
        if origin is bool and typ.kind is not NativeType.BOOLEAN:
            return False
        return issubclass(origin, _PYTHON_TYPES[typ.kind])

    coll = typ.typ
    if isinstance(coll, MapType):
        from serdemap.domain.container import SerdeMap

        if issubclass(origin, SerdeMap):
            from serdemap.serialization.pydantic_schema import resolve_type_args

            key_type, value_type = resolve_type_args(origin, py_type)
        elif issubclass(origin, Mapping):
            key_type, value_type = (args[0], args[1]) if len(args) == 2 else (Any, Any)
        else:
            return False
        return python_type_matches(key_type, coll.key) and python_type_matches(
            value_type, coll.value
        )

    if not issubclass(origin, (list, tuple, set, frozenset)):
        return False
    element = args[0] if args else Any
    return python_type_matches(element, coll.element)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _native_payload(value: Any, typ: Native) -> bytes:
    kind = typ.kind
    name = type_name(value)
    mismatch = TypeCheckError(name, typ, TypeCheckErrorKind.MISMATCHED_TYPE)

    if kind in _INTEGERS:
        if not isinstance(value, int) or isinstance(value, bool):
            raise mismatch
        try:
            return _FIXED[kind].pack(value)
        except struct.error as exc:
            raise SerializationError(
                name, typ, SerializationErrorKind.VALUE_OVERFLOW, exc
            ) from exc
    if kind in (NativeType.DOUBLE, NativeType.FLOAT):
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise mismatch
        try:
            return _FIXED[kind].pack(float(value))
        except (OverflowError, struct.error) as exc:
            raise SerializationError(
                name, typ, SerializationErrorKind.VALUE_OVERFLOW, exc
            ) from exc
    if kind is NativeType.BOOLEAN:
        if not isinstance(value, bool):
            raise mismatch
        return b"\x01" if value else b"\x00"
    if kind in (NativeType.TEXT, NativeType.ASCII):
        if not isinstance(value, str) or (kind is NativeType.ASCII and not value.isascii()):
            raise mismatch
        return value.encode("utf-8")
    if kind is NativeType.BLOB:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise mismatch
        return bytes(value)
    if kind is NativeType.UUID:
        if not isinstance(value, uuid.UUID):
            raise mismatch
        return value.bytes
    # TIMESTAMP: milliseconds since the epoch; naive datetimes are UTC.
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=UTC)
        millis = (moment - _EPOCH) // timedelta(milliseconds=1)
    elif isinstance(value, int) and not isinstance(value, bool):
        millis = value
    else:
        raise mismatch
    try:
        return _FIXED[NativeType.BIGINT].pack(millis)
    except struct.error as exc:
        raise SerializationError(name, typ, SerializationErrorKind.VALUE_OVERFLOW, exc) from exc


def serialize_value(value: Any, typ: ColumnType, writer: CellWriter) -> WrittenCell:
    """Serialize *value* as a single cell of CQL type *typ*.

    ``None`` is written as a null cell for every type.

    Raises:
        TypeCheckError: If *value* cannot be represented as *typ*.
        SerializationError: If a nested element fails or the cell overflows.
    """
    if value is None:
        return writer.set_null()
    if isinstance(typ, Native):
        payload = _native_payload(value, typ)
        try:
            return writer.set_value(payload)
        except CellOverflowError as exc:
            raise SerializationError(
                type_name(value), typ, SerializationErrorKind.SIZE_OVERFLOW, exc
            ) from exc

    from serdemap.domain.container import SerdeMap

    coll = typ.typ
    if isinstance(coll, MapType):
        if isinstance(value, SerdeMap):
            pairs: Iterable[tuple[Any, Any]] = iter(value)
        elif isinstance(value, Mapping):
            pairs = value.items()
        else:
            raise TypeCheckError(type_name(value), typ, TypeCheckErrorKind.MISMATCHED_TYPE)
        return serialize_mapping(
            type_name(value), len(value), pairs, typ, writer, allow_frozen=True
        )
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise TypeCheckError(type_name(value), typ, TypeCheckErrorKind.MISMATCHED_TYPE)
    return _serialize_sequence(type_name(value), value, typ, writer)


def _serialize_sequence(
    name: str,
    items: list[Any] | tuple[Any, ...] | set[Any] | frozenset[Any],
    typ: Collection,
    writer: CellWriter,
) -> WrittenCell:
    assert not isinstance(typ.typ, MapType)
    element_type = typ.typ.element
    if len(items) > I32_MAX:
        raise SerializationError(name, typ, SerializationErrorKind.TOO_MANY_ELEMENTS)
    builder = writer.into_value_builder()
    builder.append_bytes(_I32.pack(len(items)))
    for item in items:
        try:
            serialize_value(item, element_type, builder.make_sub_writer())
        except (TypeCheckError, SerializationError) as exc:
            raise SerializationError(
                name, typ, SerializationErrorKind.ELEMENT_SERIALIZATION_FAILED, exc
            ) from exc
    try:
        return builder.finish()
    except CellOverflowError as exc:
        raise SerializationError(name, typ, SerializationErrorKind.SIZE_OVERFLOW, exc) from exc


def serialize_mapping(
    name: str,
    length: int,
    pairs: Iterable[tuple[Any, Any]],
    typ: ColumnType,
    writer: CellWriter,
    *,
    allow_frozen: bool = False,
) -> WrittenCell:
    """Write ``length`` key/value pairs as a CQL map cell.

    Layout: i32 element count, then a key cell and a value cell per pair,
    each serialized with the map's declared element types.

    Raises:
        TypeCheckError: ``NOT_MAP`` if *typ* is not an (unfrozen) map.
        SerializationError: ``TOO_MANY_ELEMENTS`` before anything is written,
            ``KEY_``/``VALUE_SERIALIZATION_FAILED`` wrapping the nested cause,
            or ``SIZE_OVERFLOW`` when the finished cell is too large.
    """
    if (
        not isinstance(typ, Collection)
        or not isinstance(typ.typ, MapType)
        or (typ.frozen and not allow_frozen)
    ):
        raise TypeCheckError(name, typ, TypeCheckErrorKind.NOT_MAP)
    key_type, value_type = typ.typ.key, typ.typ.value

    if length > I32_MAX:
        raise SerializationError(name, typ, SerializationErrorKind.TOO_MANY_ELEMENTS)
    builder = writer.into_value_builder()
    builder.append_bytes(_I32.pack(length))

    for key, value in pairs:
        try:
            serialize_value(key, key_type, builder.make_sub_writer())
        except (TypeCheckError, SerializationError) as exc:
            raise SerializationError(
                name, typ, SerializationErrorKind.KEY_SERIALIZATION_FAILED, exc
            ) from exc
        try:
            serialize_value(value, value_type, builder.make_sub_writer())
        except (TypeCheckError, SerializationError) as exc:
            raise SerializationError(
                name, typ, SerializationErrorKind.VALUE_SERIALIZATION_FAILED, exc
            ) from exc

    try:
        return builder.finish()
    except CellOverflowError as exc:
        raise SerializationError(name, typ, SerializationErrorKind.SIZE_OVERFLOW, exc) from exc


# ---------------------------------------------------------------------------
# Deserialization
# ---------------------------------------------------------------------------


def _native_value(payload: bytes, typ: Native) -> Any:
    kind = typ.kind
    fixed = _FIXED.get(kind)
    if fixed is not None:
        if len(payload) != fixed.size:
            raise DeserializationError(kind, typ, DeserializationErrorKind.BAD_LENGTH)
        return fixed.unpack(payload)[0]
    if kind is NativeType.BOOLEAN:
        if len(payload) != 1:
            raise DeserializationError(kind, typ, DeserializationErrorKind.BAD_LENGTH)
        return payload != b"\x00"
    if kind in (NativeType.TEXT, NativeType.ASCII):
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DeserializationError(
                kind, typ, DeserializationErrorKind.BAD_VALUE, exc
            ) from exc
        if kind is NativeType.ASCII and not text.isascii():
            raise DeserializationError(kind, typ, DeserializationErrorKind.BAD_VALUE)
        return text
    if kind is NativeType.BLOB:
        return payload
    if kind is NativeType.UUID:
        if len(payload) != 16:
            raise DeserializationError(kind, typ, DeserializationErrorKind.BAD_LENGTH)
        return uuid.UUID(bytes=payload)
    if len(payload) != 8:
        raise DeserializationError(kind, typ, DeserializationErrorKind.BAD_LENGTH)
    millis = _FIXED[NativeType.BIGINT].unpack(payload)[0]
    try:
        return _EPOCH + timedelta(milliseconds=millis)
    except OverflowError as exc:
        # Valid on the wire, but outside the years datetime can represent.
        raise DeserializationError(kind, typ, DeserializationErrorKind.BAD_VALUE, exc) from exc


def deserialize_value(typ: ColumnType, payload: bytes | None) -> Any:
    """Decode one cell payload of CQL type *typ*; a null cell decodes to None.

    Raises:
        DeserializationError: On truncated, oversized or malformed payloads.
    """
    if payload is None:
        return None
    if isinstance(typ, Native):
        return _native_value(payload, typ)

    coll = typ.typ
    if isinstance(coll, MapType):
        from serdemap.domain.container import SerdeMap

        return SerdeMap(iter_mapping(str(typ), typ, payload, allow_frozen=True))
    items = _iter_sequence(str(typ), typ, payload)
    if isinstance(coll, ListType):
        return list(items)
    return {_freeze(item) for item in items}


def _freeze(value: Any) -> Any:
    """Hashable form of a decoded set element.

    Frozen lists become tuples, frozen sets become frozensets and frozen
    maps become tuples of ``(key, value)`` pairs, recursively.
    """
    from serdemap.domain.container import SerdeMap

    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, set):
        return frozenset(value)
    if isinstance(value, SerdeMap):
        return tuple((_freeze(key), _freeze(item)) for key, item in value)
    return value


def _read_count(name: str, typ: ColumnType, frame: FrameSlice) -> int:
    count = frame.read_i32()
    if count is None:
        raise DeserializationError(name, typ, DeserializationErrorKind.UNEXPECTED_END)
    if count < 0:
        raise DeserializationError(name, typ, DeserializationErrorKind.NEGATIVE_COUNT)
    return count


def _read_element(
    name: str,
    typ: ColumnType,
    frame: FrameSlice,
    element_type: ColumnType,
    kind: DeserializationErrorKind,
) -> Any:
    ok, payload = frame.read_cell()
    if not ok:
        cause = DeserializationError(name, element_type, DeserializationErrorKind.UNEXPECTED_END)
        raise DeserializationError(name, typ, kind, cause)
    try:
        return deserialize_value(element_type, payload)
    except DeserializationError as exc:
        raise DeserializationError(name, typ, kind, exc) from exc


def _iter_sequence(name: str, typ: Collection, payload: bytes) -> Iterator[Any]:
    assert not isinstance(typ.typ, MapType)
    frame = FrameSlice(payload)
    failed = DeserializationErrorKind.ELEMENT_DESERIALIZATION_FAILED
    for _ in range(_read_count(name, typ, frame)):
        yield _read_element(name, typ, frame, typ.typ.element, failed)
    if frame.remaining():
        raise DeserializationError(name, typ, DeserializationErrorKind.TRAILING_BYTES)


def iter_mapping(
    name: str,
    typ: ColumnType,
    payload: bytes | None,
    *,
    allow_frozen: bool = False,
) -> Iterator[tuple[Any, Any]]:
    """Lazily decode the ``(key, value)`` pairs of a CQL map cell.

    The column type is checked before the first pair is produced. A null
    cell is an empty map, since CQL stores empty collections as null.

    Raises:
        TypeCheckError: ``NOT_MAP`` if *typ* is not an (unfrozen) map.
        DeserializationError: On malformed input, wrapping the element error.
    """
    if (
        not isinstance(typ, Collection)
        or not isinstance(typ.typ, MapType)
        or (typ.frozen and not allow_frozen)
    ):
        raise TypeCheckError(name, typ, TypeCheckErrorKind.NOT_MAP)
    return _iter_pairs(name, typ, typ.typ, payload)


def _iter_pairs(
    name: str, typ: Collection, map_type: MapType, payload: bytes | None
) -> Iterator[tuple[Any, Any]]:
    if payload is None:
        return
    frame = FrameSlice(payload)
    for _ in range(_read_count(name, typ, frame)):
        key = _read_element(
            name, typ, frame, map_type.key, DeserializationErrorKind.KEY_DESERIALIZATION_FAILED
        )
        if key is None:
            cause = DeserializationError(
                name, map_type.key, DeserializationErrorKind.EXPECTED_NON_NULL
            )
            raise DeserializationError(
                name, typ, DeserializationErrorKind.KEY_DESERIALIZATION_FAILED, cause
            )
        value = _read_element(
            name, typ, frame, map_type.value, DeserializationErrorKind.VALUE_DESERIALIZATION_FAILED
        )
        yield key, value
    if frame.remaining():
        raise DeserializationError(name, typ, DeserializationErrorKind.TRAILING_BYTES)
