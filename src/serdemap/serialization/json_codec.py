"""JSON backend for the map protocol.

``json.dumps`` on a dict cannot express duplicate keys, and ``json.loads``
keeps only the last one. This module streams objects itself on the way
out and parses with ``object_pairs_hook`` on the way in, so a SerdeMap
survives a JSON round trip with its order and duplicates intact.

Nested objects keep their duplicates only when decoded into a SerdeMap
(``value_type=SerdeMap`` or ``SerdeMap[str, int]`` and the like); by
default they become plain dicts.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from io import StringIO
from typing import IO, Any, get_origin

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError, to_jsonable_python

from serdemap.domain.container import SerdeMap
from serdemap.errors import KeyEncodeError, MapShapeError
from serdemap.serialization.protocol import PairsSource, decode_map, encode_map
from serdemap.serialization.pydantic_schema import resolve_type_args

logger = logging.getLogger(__name__)


class _ObjectPairs(list[tuple[str, Any]]):
    """Parsed JSON object, kept as its raw ordered pairs."""


def _key_text(key: Any) -> str:
    """Coerce a projected key to a JSON object key.

    Scalars follow ``json`` (``1`` -> ``"1"``, ``None`` -> ``"null"``); values
    pydantic serializes to a string (UUIDs, datetimes, bytes) use that string.
    """
    if isinstance(key, str):
        return key
    if key is True:
        return "true"
    if key is False:
        return "false"
    if key is None:
        return "null"
    if isinstance(key, (int, float)):
        return json.dumps(key)
    # UUIDs, datetimes, bytes and the like have a canonical string form.
    msg = f"keys must be str, int, float, bool, None or string-like, not {type(key).__name__}"
    try:
        text = to_jsonable_python(key, bytes_mode="base64")
    except PydanticSerializationError as exc:
        raise KeyEncodeError(msg) from exc
    if isinstance(text, str):
        return text
    raise KeyEncodeError(msg)


class JsonMapSink:
    """Writes one JSON object to a text stream as entries arrive."""

    def __init__(
        self,
        out: IO[str],
        *,
        indent: int | None = None,
        ensure_ascii: bool = True,
        _depth: int = 0,
    ) -> None:
        self._out = out
        self._indent = indent
        self._ensure_ascii = ensure_ascii
        self._depth = _depth
        self._count = 0

    def _newline(self, depth: int) -> str:
        if self._indent is None:
            return ""
        return "\n" + " " * (self._indent * depth)

    def begin_map(self, length: int | None) -> None:
        self._out.write("{")

    def write_entry(self, key: Any, value: Any) -> None:
        if self._count:
            self._out.write("," if self._indent is not None else ", ")
        self._out.write(self._newline(self._depth + 1))
        self._out.write(json.dumps(_key_text(key), ensure_ascii=self._ensure_ascii))
        self._out.write(": ")
        self._write_value(value, self._depth + 1)
        self._count += 1

    def end_map(self) -> None:
        if self._count:
            self._out.write(self._newline(self._depth))
        self._out.write("}")

    def _child(self, depth: int) -> JsonMapSink:
        return JsonMapSink(
            self._out, indent=self._indent, ensure_ascii=self._ensure_ascii, _depth=depth
        )

    def _write_value(self, value: Any, depth: int) -> None:
        if isinstance(value, SerdeMap):
            encode_map(value, self._child(depth))
        elif isinstance(value, Mapping):
            sink = self._child(depth)
            sink.begin_map(len(value))
            for key, item in value.items():
                sink.write_entry(key, item)
            sink.end_map()
        elif isinstance(value, (list, tuple)):
            self._write_array(value, depth)
        elif value is None or isinstance(value, (str, int, float, bool)):
            self._out.write(json.dumps(value, ensure_ascii=self._ensure_ascii))
        else:
            self._write_value(to_jsonable_python(value, bytes_mode="base64"), depth)

    def _write_array(self, items: list[Any] | tuple[Any, ...], depth: int) -> None:
        self._out.write("[")
        for index, item in enumerate(items):
            if index:
                self._out.write("," if self._indent is not None else ", ")
            self._out.write(self._newline(depth + 1))
            self._write_value(item, depth + 1)
        if items:
            self._out.write(self._newline(depth))
        self._out.write("]")


def dump(
    container: SerdeMap[Any, Any],
    fp: IO[str],
    *,
    indent: int | None = None,
    ensure_ascii: bool = True,
) -> None:
    """Write *container* as a JSON object to the text stream *fp*."""
    encode_map(container, JsonMapSink(fp, indent=indent, ensure_ascii=ensure_ascii))


def dumps(
    container: SerdeMap[Any, Any],
    *,
    indent: int | None = None,
    ensure_ascii: bool = True,
) -> str:
    """Return *container* as a JSON object string.

    Examples:
        >>> dumps(SerdeMap([("a", 1), ("a", 2)]))
        '{"a": 1, "a": 2}'
    """
    buf = StringIO()
    dump(container, buf, indent=indent, ensure_ascii=ensure_ascii)
    return buf.getvalue()


def _plain(value: Any) -> Any:
    """Turn parsed object pairs inside a value into ordinary dicts."""
    if isinstance(value, _ObjectPairs):
        return {key: _plain(item) for key, item in value}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _value_decoder(value_type: Any) -> Callable[[Any], Any]:
    if value_type is None:
        return _plain
    origin = get_origin(value_type) or value_type
    if isinstance(origin, type) and issubclass(origin, SerdeMap):
        nested: type[SerdeMap[Any, Any]] = origin
        _, inner_type = resolve_type_args(origin, value_type)
        inner = _plain if inner_type is Any else _value_decoder(inner_type)

        def decode_nested(value: Any) -> Any:
            if not isinstance(value, _ObjectPairs):
                raise MapShapeError(_plain(value))
            return decode_map(nested, PairsSource(value), value_decoder=inner)

        return decode_nested
    adapter: TypeAdapter[Any] = TypeAdapter(value_type)
    return lambda value: adapter.validate_python(_plain(value))


def loads[M: SerdeMap[Any, Any]](
    text: str | bytes,
    cls: type[M] = SerdeMap,  # type: ignore[assignment]
    *,
    value_type: Any = None,
) -> M:
    """Parse a JSON object into a *cls* instance, keeping duplicate keys.

    Args:
        text: JSON document; the top level must be an object.
        cls: SerdeMap type to build; its key strategy lifts the string keys.
        value_type: Optional type each value is validated against with
            pydantic. A SerdeMap type decodes nested objects recursively.

    Raises:
        json.JSONDecodeError: If *text* is not valid JSON.
        MapShapeError: If the top-level value is not an object.
        KeyDecodeError: If a key cannot be lifted.
        pydantic.ValidationError: If a value does not match *value_type*.
    """
    document = json.loads(text, object_pairs_hook=_ObjectPairs)
    if not isinstance(document, _ObjectPairs):
        raise MapShapeError(document)
    logger.debug("Parsed JSON object with %d entries", len(document))
    return decode_map(cls, PairsSource(document), value_decoder=_value_decoder(value_type))


def load[M: SerdeMap[Any, Any]](
    fp: IO[str],
    cls: type[M] = SerdeMap,  # type: ignore[assignment]
    *,
    value_type: Any = None,
) -> M:
    """Read a JSON object from the text stream *fp*; see :func:`loads`."""
    return loads(fp.read(), cls, value_type=value_type)
