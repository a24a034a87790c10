"""SerdeMap <-> CQL ``map<K, V>`` cells.

The map is written with its *domain* keys: the key strategy governs the
structured-data wire form, not the database one, so keys go to the
column exactly as the container stores them and come back the same way.
"""

from __future__ import annotations

import logging
from typing import Any

from serdemap.cql.errors import (
    DeserializationError,
    DeserializationErrorKind,
    TypeCheckError,
    TypeCheckErrorKind,
)
from serdemap.cql.types import Collection, ColumnType, MapType
from serdemap.cql.values import (
    iter_mapping,
    python_type_matches,
    serialize_mapping,
    type_name,
)
from serdemap.cql.writers import CELL_MAX_SIZE, CellWriter, FrameSlice, WrittenCell
from serdemap.domain.container import SerdeMap

logger = logging.getLogger(__name__)


def type_check(
    cls: type[SerdeMap[Any, Any]],
    typ: ColumnType,
    *,
    key_type: Any = Any,
    value_type: Any = Any,
) -> None:
    """Check that *cls* can be stored in a column of type *typ*.

    *typ* must be an unfrozen ``map<k, v>``. When the Python key/value
    types are supplied they must be compatible with ``k`` and ``v``.

    Raises:
        TypeCheckError: ``NOT_MAP``, ``KEY_TYPE_CHECK_FAILED`` or
            ``VALUE_TYPE_CHECK_FAILED``.
    """
    name = type_name(cls)
    if not isinstance(typ, Collection) or not isinstance(typ.typ, MapType) or typ.frozen:
        raise TypeCheckError(name, typ, TypeCheckErrorKind.NOT_MAP)
    if not python_type_matches(key_type, typ.typ.key):
        cause = TypeCheckError(type_name(key_type), typ.typ.key, TypeCheckErrorKind.MISMATCHED_TYPE)
        raise TypeCheckError(name, typ, TypeCheckErrorKind.KEY_TYPE_CHECK_FAILED, cause)
    if not python_type_matches(value_type, typ.typ.value):
        cause = TypeCheckError(
            type_name(value_type), typ.typ.value, TypeCheckErrorKind.MISMATCHED_TYPE
        )
        raise TypeCheckError(name, typ, TypeCheckErrorKind.VALUE_TYPE_CHECK_FAILED, cause)


def serialize(container: SerdeMap[Any, Any], typ: ColumnType, writer: CellWriter) -> WrittenCell:
    """Write *container* as one CQL map cell.

    Raises:
        TypeCheckError: If *typ* is not an unfrozen map.
        SerializationError: See :func:`serdemap.cql.values.serialize_mapping`.
    """
    written = serialize_mapping(type_name(container), len(container), iter(container), typ, writer)
    logger.debug("Serialized %d map entries into %d bytes", len(container), written.size)
    return written


def deserialize[M: SerdeMap[Any, Any]](
    cls: type[M], typ: ColumnType, payload: bytes | None
) -> M:
    """Read a CQL map cell payload into a new *cls* instance, in wire order.

    Raises:
        TypeCheckError: If *typ* is not an unfrozen map.
        DeserializationError: On malformed input.
    """
    result = cls()
    for key, value in iter_mapping(type_name(cls), typ, payload):
        result.insert_unchecked(key, value)
    logger.debug("Deserialized %d map entries", len(result))
    return result


def encode_cell(
    container: SerdeMap[Any, Any], typ: ColumnType, *, max_size: int = CELL_MAX_SIZE
) -> bytes:
    """Return the full cell (length prefix included) for *container*."""
    buf = bytearray()
    serialize(container, typ, CellWriter(buf, max_size=max_size))
    return bytes(buf)


def decode_cell[M: SerdeMap[Any, Any]](cls: type[M], typ: ColumnType, cell: bytes) -> M:
    """Inverse of :func:`encode_cell`: strip the length prefix and deserialize."""
    frame = FrameSlice(cell)
    ok, payload = frame.read_cell()
    if not ok:
        raise DeserializationError(type_name(cls), typ, DeserializationErrorKind.UNEXPECTED_END)
    if frame.remaining():
        raise DeserializationError(type_name(cls), typ, DeserializationErrorKind.TRAILING_BYTES)
    return deserialize(cls, typ, payload)
