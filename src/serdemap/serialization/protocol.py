"""Map protocol: how a SerdeMap meets a structured-data sink or source.

Encoding is a direct structural mapping: the sink is told the length up
front, then receives one entry per pair in insertion order with the key
already projected to its wire form.

Decoding pulls entries from a :class:`MapSource` one at a time (the
source may be a streaming parser with unknown total length). Each wire
key is lifted before the next entry is requested; the first bad key
aborts the whole decode and no partial map is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from serdemap.errors import KeyDecodeError, MapShapeError

if TYPE_CHECKING:
    from serdemap.domain.container import SerdeMap
    from serdemap.domain.strategy import ErrorFactory

logger = logging.getLogger(__name__)


@runtime_checkable
class MapSink(Protocol):
    """Receiver of an encoded map: declare length, write entries, close."""

    def begin_map(self, length: int | None) -> None: ...

    def write_entry(self, key: Any, value: Any) -> None: ...

    def end_map(self) -> None: ...


@runtime_checkable
class MapSource(Protocol):
    """Incremental map reader. ``next_entry`` returns None when exhausted."""

    def next_entry(self) -> tuple[Any, Any] | None: ...


class PairsSource:
    """Map-shaped source over an iterable of ``(wire_key, value)`` pairs.

    Parsers that keep duplicate keys (e.g. JSON with ``object_pairs_hook``)
    hand their pairs over through this wrapper.
    """

    def __init__(self, pairs: Iterable[tuple[Any, Any]]) -> None:
        self._it: Iterator[tuple[Any, Any]] = iter(pairs)

    def next_entry(self) -> tuple[Any, Any] | None:
        return next(self._it, None)


class MappingSource(PairsSource):
    """Map-shaped source over a :class:`~collections.abc.Mapping`."""

    def __init__(self, mapping: Mapping[Any, Any]) -> None:
        super().__init__(mapping.items())


def as_map_source(obj: Any) -> MapSource:
    """Adapt *obj* to a :class:`MapSource`.

    Raises:
        MapShapeError: If *obj* is neither a source nor a mapping.
    """
    if isinstance(obj, MapSource):
        return obj
    if isinstance(obj, Mapping):
        return MappingSource(obj)
    raise MapShapeError(obj)


def encode_map(container: SerdeMap[Any, Any], sink: MapSink) -> None:
    """Write *container* to *sink* in insertion order with projected keys."""
    strategy = container.key_strategy
    sink.begin_map(len(container))
    for key, value in container:
        sink.write_entry(strategy.project(key), value)
    sink.end_map()
    logger.debug("Encoded map with %d entries", len(container))


def decode_map[M: SerdeMap[Any, Any]](
    cls: type[M],
    source: Any,
    *,
    error: ErrorFactory = KeyDecodeError,
    value_decoder: Callable[[Any], Any] | None = None,
) -> M:
    """Build a *cls* instance from a map-shaped *source*.

    Args:
        cls: The SerdeMap type to build; its ``key_strategy`` lifts keys.
        source: A :class:`MapSource` or a mapping.
        error: Error constructor handed to ``key_strategy.lift``.
        value_decoder: Optional conversion applied to each value.

    Raises:
        MapShapeError: If *source* is not map-shaped.
        Exception: Whatever *error* builds, on the first malformed key.
    """
    access = as_map_source(source)
    strategy = cls.key_strategy
    result = cls()
    while (entry := access.next_entry()) is not None:
        wire_key, value = entry
        key = strategy.lift(wire_key, error)
        if value_decoder is not None:
            value = value_decoder(value)
        result.insert_unchecked(key, value)
    logger.debug("Decoded map with %d entries", len(result))
    return result
