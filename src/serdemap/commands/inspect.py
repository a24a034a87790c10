"""Standalone command: list the entries of a JSON object in order."""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING

import click

from serdemap.commands._base import SerdeMapCommand
from serdemap.commands._helpers import duplicate_keys, entry_rows
from serdemap.errors import SerdeMapError
from serdemap.output.result import CommandResult
from serdemap.serialization import json_codec

if TYPE_CHECKING:
    from serdemap.commands._context import AppContext


@click.command(
    cls=SerdeMapCommand,
    examples="""\
  serdemap inspect config.json
  cat data.json | serdemap --json inspect -
  serdemap --key-strategy int inspect ids.json""",
)
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def inspect(app: AppContext, source: IO[str]) -> None:
    """List the entries of a JSON object in document order, duplicates included."""
    try:
        container = json_codec.load(source, app.map_type)
    except (json.JSONDecodeError, SerdeMapError) as exc:
        app.emit(CommandResult.failure("inspect", type(exc).__name__, str(exc)))
        return

    dups = duplicate_keys(container)
    warnings = [f"{len(dups)} key(s) occur more than once"] if dups else []
    app.emit(
        CommandResult(
            ok=True,
            op="inspect",
            data={
                "count": len(container),
                "entries": entry_rows(container),
                "duplicate_keys": dups,
            },
            warnings=warnings,
        )
    )
