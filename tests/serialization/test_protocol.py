"""Tests for the map protocol (encode_map / decode_map)."""

from __future__ import annotations

from typing import Any

import pytest

from serdemap.domain.container import SerdeMap
from serdemap.errors import KeyDecodeError, MapShapeError
from serdemap.serialization.protocol import (
    MappingSource,
    MapSink,
    MapSource,
    PairsSource,
    as_map_source,
    decode_map,
    encode_map,
)
from tests.conftest import IdMap


class RecordingSink:
    """MapSink that records every call it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def begin_map(self, length: int | None) -> None:
        self.calls.append(("begin", length))

    def write_entry(self, key: Any, value: Any) -> None:
        self.calls.append(("entry", key, value))

    def end_map(self) -> None:
        self.calls.append(("end",))


class CountingSource:
    """Streaming MapSource that counts how many entries were pulled."""

    def __init__(self, pairs: list[tuple[Any, Any]]) -> None:
        self._pairs = pairs
        self.pulled = 0

    def next_entry(self) -> tuple[Any, Any] | None:
        if self.pulled >= len(self._pairs):
            return None
        entry = self._pairs[self.pulled]
        self.pulled += 1
        return entry


class TestEncodeMap:
    def test_declares_length_then_entries_in_order(self) -> None:
        sink = RecordingSink()
        encode_map(SerdeMap([("b", 1), ("a", 2), ("b", 3)]), sink)
        assert sink.calls == [
            ("begin", 3),
            ("entry", "b", 1),
            ("entry", "a", 2),
            ("entry", "b", 3),
            ("end",),
        ]

    def test_empty_map(self) -> None:
        sink = RecordingSink()
        encode_map(SerdeMap(), sink)
        assert sink.calls == [("begin", 0), ("end",)]

    def test_keys_are_projected(self) -> None:
        sink = RecordingSink()
        IdMap([(42, "answer")]).encode(sink)
        assert sink.calls[1] == ("entry", "42", "answer")

    def test_recording_sink_satisfies_protocol(self) -> None:
        assert isinstance(RecordingSink(), MapSink)


class TestDecodeMap:
    def test_preserves_source_order_and_duplicates(self) -> None:
        source = PairsSource([("x", 1), ("y", 2), ("x", 3)])
        m = decode_map(SerdeMap, source)
        assert m.pairs() == [("x", 1), ("y", 2), ("x", 3)]

    def test_keys_are_lifted(self) -> None:
        m = IdMap.decode(PairsSource([("42", "answer")]))
        assert m.pairs() == [(42, "answer")]

    def test_bad_key_aborts_immediately(self) -> None:
        source = CountingSource([("1", "a"), ("abc", "b"), ("3", "c")])
        with pytest.raises(KeyDecodeError):
            decode_map(IdMap, source)
        assert source.pulled == 2

    def test_error_constructor_is_forwarded(self) -> None:
        class ContextError(Exception):
            pass

        with pytest.raises(ContextError):
            IdMap.decode({"abc": 1}, error=ContextError)

    def test_mapping_is_accepted(self) -> None:
        m = SerdeMap.decode({"a": 1, "b": 2})
        assert m.pairs() == [("a", 1), ("b", 2)]

    def test_value_decoder(self) -> None:
        m = SerdeMap.decode({"a": "1"}, value_decoder=int)
        assert m.pairs() == [("a", 1)]

    @pytest.mark.parametrize("source", [[("a", 1)], "text", 42, None])
    def test_non_map_source_is_shape_error(self, source: Any) -> None:
        with pytest.raises(MapShapeError, match="expected a map"):
            decode_map(SerdeMap, source)

    def test_result_type_is_requested_class(self) -> None:
        assert type(IdMap.decode({})) is IdMap

    def test_round_trip_through_protocol(self) -> None:
        original = SerdeMap([(i % 3, f"v{i}") for i in range(12)])
        sink = RecordingSink()
        original.encode(sink)
        entries = [(call[1], call[2]) for call in sink.calls if call[0] == "entry"]
        assert SerdeMap.decode(PairsSource(entries)) == original


class TestAsMapSource:
    def test_source_passes_through(self) -> None:
        source = PairsSource([])
        assert as_map_source(source) is source

    def test_mapping_is_wrapped(self) -> None:
        assert isinstance(as_map_source({"a": 1}), MappingSource)

    def test_counting_source_satisfies_protocol(self) -> None:
        assert isinstance(CountingSource([]), MapSource)

    def test_shape_error_names_type(self) -> None:
        with pytest.raises(MapShapeError) as excinfo:
            as_map_source([1, 2])
        assert excinfo.value.got == "list"
        assert str(excinfo.value) == "invalid type: list, expected a map"
