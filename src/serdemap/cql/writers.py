"""Cell writers for the CQL value encoding.

A cell is ``[i32 big-endian length][payload]``; a null cell has length
``-1`` and no payload. :class:`CellValueBuilder` lets a compound value
(a collection) append raw bytes and nested cells incrementally and fills
in its own length prefix on :meth:`~CellValueBuilder.finish`.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from serdemap.cql.errors import CellOverflowError

# Largest payload a cell length prefix can describe.
CELL_MAX_SIZE = 2**31 - 1

_I32 = struct.Struct(">i")


@dataclass(frozen=True)
class WrittenCell:
    """Proof that a cell was completely written; ``size`` excludes the prefix."""

    size: int


class CellWriter:
    """Writes exactly one cell into a shared buffer."""

    def __init__(self, buf: bytearray, *, max_size: int = CELL_MAX_SIZE) -> None:
        self._buf = buf
        self._max_size = max_size

    def set_null(self) -> WrittenCell:
        self._buf += _I32.pack(-1)
        return WrittenCell(size=0)

    def set_value(self, payload: bytes) -> WrittenCell:
        """Write a complete cell.

        Raises:
            CellOverflowError: If *payload* exceeds the size limit.
        """
        if len(payload) > self._max_size:
            msg = f"cell payload of {len(payload)} bytes exceeds {self._max_size}"
            raise CellOverflowError(msg)
        self._buf += _I32.pack(len(payload))
        self._buf += payload
        return WrittenCell(size=len(payload))

    def into_value_builder(self) -> CellValueBuilder:
        return CellValueBuilder(self._buf, max_size=self._max_size)


class CellValueBuilder:
    """Incrementally builds one cell whose length is known only at the end."""

    def __init__(self, buf: bytearray, *, max_size: int = CELL_MAX_SIZE) -> None:
        self._buf = buf
        self._max_size = max_size
        self._start = len(buf)
        buf += _I32.pack(0)

    def append_bytes(self, data: bytes) -> None:
        self._buf += data

    def make_sub_writer(self) -> CellWriter:
        return CellWriter(self._buf, max_size=self._max_size)

    def finish(self) -> WrittenCell:
        """Fill in the length prefix.

        Raises:
            CellOverflowError: If the accumulated payload exceeds the size limit.
        """
        size = len(self._buf) - self._start - _I32.size
        if size > self._max_size:
            msg = f"cell payload of {size} bytes exceeds {self._max_size}"
            raise CellOverflowError(msg)
        _I32.pack_into(self._buf, self._start, size)
        return WrittenCell(size=size)


@dataclass
class FrameSlice:
    """Read cursor over a cell payload."""

    data: bytes
    pos: int = 0

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def read_bytes(self, n: int) -> bytes | None:
        """Read *n* bytes, or return None if fewer are left."""
        if n > self.remaining():
            return None
        chunk = self.data[self.pos : self.pos + n]
        self.pos += n
        return chunk

    def read_i32(self) -> int | None:
        raw = self.read_bytes(_I32.size)
        if raw is None:
            return None
        return int(_I32.unpack(raw)[0])

    def read_cell(self) -> tuple[bool, bytes | None]:
        """Read a length-prefixed cell.

        Returns ``(ok, payload)``; ``ok`` is False when the slice ends early,
        ``payload`` is None for a null cell.
        """
        length = self.read_i32()
        if length is None:
            return False, None
        if length < 0:
            return True, None
        payload = self.read_bytes(length)
        if payload is None:
            return False, None
        return True, payload
