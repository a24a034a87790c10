"""Command group: CQL map cell encoding and decoding."""

from __future__ import annotations

import binascii
import json
from typing import IO, TYPE_CHECKING

import click

from serdemap.commands._base import SerdeMapGroup
from serdemap.commands._helpers import duplicate_keys, entry_rows
from serdemap.cql import decode_cell, encode_cell, parse_column_type
from serdemap.cql.types import ColumnTypeSyntaxError
from serdemap.errors import SerdeMapError
from serdemap.output.result import CommandResult
from serdemap.serialization import json_codec

if TYPE_CHECKING:
    from serdemap.commands._context import AppContext

_TYPE_OPTION = click.option(
    "--type",
    "column_type",
    required=True,
    help='CQL column type, e.g. "map<text, int>".',
)


@click.group(
    cls=SerdeMapGroup,
    examples="""\
  serdemap cql encode --type "map<text, int>" scores.json
  serdemap --key-strategy int cql encode --type "map<int, text>" names.json
  serdemap cql decode --type "map<text, int>" 0000001400000002...""",
)
def cql() -> None:
    """Encode and decode CQL map<K, V> cells."""


@cql.command()
@_TYPE_OPTION
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def encode(app: AppContext, column_type: str, source: IO[str]) -> None:
    """Encode the JSON object in SOURCE as a hex CQL map cell."""
    try:
        typ = parse_column_type(column_type)
        container = json_codec.load(source, app.map_type)
        cell = encode_cell(container, typ, max_size=app.settings.cql.max_cell_size)
    except (ColumnTypeSyntaxError, json.JSONDecodeError, SerdeMapError) as exc:
        app.emit(CommandResult.failure("cql_encode", type(exc).__name__, str(exc)))
        return

    app.emit(
        CommandResult(
            ok=True,
            op="cql_encode",
            data={
                "type": str(typ),
                "count": len(container),
                "size": len(cell),
                "hex": cell.hex(),
            },
        )
    )


@cql.command()
@_TYPE_OPTION
@click.argument("cell_hex", metavar="HEX")
@click.pass_obj
def decode(app: AppContext, column_type: str, cell_hex: str) -> None:
    """Decode a hex CQL map cell (length prefix included) into JSON."""
    try:
        typ = parse_column_type(column_type)
        cell = bytes.fromhex(cell_hex)
        container = decode_cell(app.map_type, typ, cell)
        encoding = app.settings.encoding
        as_json = json_codec.dumps(
            container, indent=encoding.indent, ensure_ascii=encoding.ensure_ascii
        )
    except (ColumnTypeSyntaxError, ValueError, binascii.Error, SerdeMapError) as exc:
        app.emit(CommandResult.failure("cql_decode", type(exc).__name__, str(exc)))
        return

    app.emit(
        CommandResult(
            ok=True,
            op="cql_decode",
            data={
                "type": str(typ),
                "count": len(container),
                "entries": entry_rows(container),
                "duplicate_keys": duplicate_keys(container),
                "json": as_json,
            },
        )
    )
