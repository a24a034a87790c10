"""CQL (Cassandra / ScyllaDB) adapter for ``map<K, V>`` columns.

Public entry points live in :mod:`serdemap.cql.mapping`; the value and
writer modules implement the cell encoding they build on.
"""

from __future__ import annotations

from serdemap.cql.mapping import decode_cell, deserialize, encode_cell, serialize, type_check
from serdemap.cql.types import parse_column_type

__all__ = [
    "decode_cell",
    "deserialize",
    "encode_cell",
    "parse_column_type",
    "serialize",
    "type_check",
]
