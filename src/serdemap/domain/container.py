"""SerdeMap: an ordered, duplicate-tolerant key/value container.

The container is a plain list of entries, not a hash table. Insertion
order is preserved through iteration, serialization and round-trip
decoding, and equal keys are kept as separate entries. Nothing is ever
removed or looked up by key; callers that need lookups convert with
:meth:`SerdeMap.to_dict`.

INVARIANT: entries are only ever appended.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from functools import cache
from typing import TYPE_CHECKING, Any, ClassVar, Self

from serdemap.domain.strategy import LINEAR, KeyStrategy
from serdemap.errors import KeyDecodeError

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler
    from pydantic_core import CoreSchema

    from serdemap.domain.strategy import ErrorFactory
    from serdemap.serialization.protocol import MapSink


@dataclass(slots=True)
class Entry[K, V]:
    """A single mutable slot of a :class:`SerdeMap`."""

    key: K
    value: V

    def as_pair(self) -> tuple[K, V]:
        return self.key, self.value


class SerdeMap[K, V]:
    """Ordered sequence of ``(key, value)`` pairs with a pluggable key strategy.

    ``K`` is the *domain* key type. The wire key type is defined by
    :attr:`key_strategy`, a class attribute, so a specialised map is a
    subclass::

        class IdMap[V](SerdeMap[int, V]):
            key_strategy = IntFromStr()

    or, for ad-hoc use, ``SerdeMap.using(IntFromStr())``.
    """

    key_strategy: ClassVar[KeyStrategy[Any, Any]] = LINEAR

    __slots__ = ("_entries",)

    def __init__(self, pairs: Iterable[tuple[K, V]] | Mapping[K, V] | None = None) -> None:
        self._entries: list[Entry[K, V]] = []
        if pairs is None:
            return
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        for key, value in items:
            self._entries.append(Entry(key, value))

    # -- construction -------------------------------------------------

    @classmethod
    def with_capacity(cls, capacity: int) -> Self:
        """Create an empty map; *capacity* is only a sizing hint."""
        if capacity < 0:
            msg = f"capacity must be non-negative, got {capacity}"
            raise ValueError(msg)
        return cls()

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[K, V]]) -> Self:
        """Build from ordered pairs, keeping their order and duplicates."""
        return cls(pairs)

    @classmethod
    def from_mapping(cls, mapping: Mapping[K, V]) -> Self:
        """Build from a mapping; order follows the mapping's own iteration order."""
        return cls(mapping.items())

    @classmethod
    def using(cls, strategy: KeyStrategy[Any, Any]) -> type[SerdeMap[Any, Any]]:
        """Return a subclass of this map type bound to *strategy*."""
        return _bind_strategy(cls, strategy)

    # -- mutation -----------------------------------------------------

    def insert_unchecked(self, key: K, value: V) -> None:
        """Append a pair without looking for an existing equal key."""
        self._entries.append(Entry(key, value))

    def merge_append(self, key: K, value: Any) -> None:
        """Group *value* under *key* when the last entry has an equal key.

        Only the immediately preceding entry is compared, so equal keys
        separated by a different key stay separate entries. The value
        type of the map must be a list.
        """
        if self._entries:
            last = self._entries[-1]
            if last.key == key:
                last.value.append(value)  # type: ignore[attr-defined]
                return
        self._entries.append(Entry(key, [value]))  # type: ignore[arg-type]

    # -- inspection ---------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def __iter__(self) -> Iterator[tuple[K, V]]:
        for entry in self._entries:
            yield entry.key, entry.value

    def iter_mut(self) -> Iterator[Entry[K, V]]:
        """Yield the live entries; assigning ``entry.value`` updates the map."""
        return iter(self._entries)

    def drain(self) -> Iterator[tuple[K, V]]:
        """Move every pair out of the map, leaving it empty."""
        entries, self._entries = self._entries, []
        return (entry.as_pair() for entry in entries)

    def iter_keys(self) -> Iterator[K]:
        return (entry.key for entry in self._entries)

    def iter_values(self) -> Iterator[V]:
        return (entry.value for entry in self._entries)

    def pairs(self) -> list[tuple[K, V]]:
        """Return a copy of the pairs in insertion order."""
        return [entry.as_pair() for entry in self._entries]

    def to_dict(self) -> dict[K, V]:
        """Convert to a ``dict``; later duplicates overwrite earlier values."""
        return {entry.key: entry.value for entry in self._entries}

    # -- serialization ------------------------------------------------

    def encode(self, sink: MapSink) -> None:
        """Write this map to *sink* with keys projected to their wire form."""
        from serdemap.serialization.protocol import encode_map

        encode_map(self, sink)

    @classmethod
    def decode(
        cls,
        source: Any,
        *,
        error: ErrorFactory = KeyDecodeError,
        value_decoder: Callable[[Any], Any] | None = None,
    ) -> Self:
        """Build a map from a map-shaped *source*, lifting every wire key."""
        from serdemap.serialization.protocol import decode_map

        return decode_map(cls, source, error=error, value_decoder=value_decoder)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        from serdemap.serialization.pydantic_schema import build_core_schema

        return build_core_schema(cls, source, handler)

    # -- dunder -------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SerdeMap):
            return NotImplemented
        if self.key_strategy != other.key_strategy:
            return False
        return self.pairs() == other.pairs()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.pairs()!r})"


@cache
def _bind_strategy(
    base: type[SerdeMap[Any, Any]], strategy: KeyStrategy[Any, Any]
) -> type[SerdeMap[Any, Any]]:
    name = f"{base.__name__}[{type(strategy).__name__}]"
    return type(name, (base,), {"key_strategy": strategy, "__slots__": ()})
