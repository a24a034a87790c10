"""Rich/JSON output helpers.

The CLI renders CommandResult for humans (Rich tables and key-value
lines) or machines (--json). Renderers are dispatched by ``result.op``;
unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from serdemap.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from serdemap.output.result import CommandResult


def _short(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return _json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def _render_generic(result: CommandResult, console: Console) -> None:
    console.print(Text.assemble(("OK: ", "sm.ok"), (result.op, "sm.op")))
    for key, value in result.data.items():
        console.print(f"  {key}: {_short(value)}")


def _render_entries(result: CommandResult, console: Console) -> None:
    entries: list[dict[str, Any]] = result.data.get("entries", [])
    duplicates: list[Any] = result.data.get("duplicate_keys", [])
    table = Table(title=f"{len(entries)} entries", title_justify="left")
    table.add_column("#", style="sm.index", justify="right")
    table.add_column("key", style="sm.key")
    table.add_column("value")
    for index, entry in enumerate(entries):
        key_text = Text(str(entry["key"]))
        if entry["key"] in duplicates:
            key_text.stylize("sm.dup")
        table.add_row(str(index), key_text, _short(entry["value"]))
    console.print(table)
    for key, value in result.data.items():
        if key not in ("entries", "duplicate_keys"):
            console.print(f"  {key}: {_short(value)}")


_OP_RENDERERS: dict[str, Callable[[CommandResult, Console], None]] = {
    "inspect": _render_entries,
    "cql_decode": _render_entries,
}


def format_result(result: CommandResult, *, json_output: bool = False) -> str:
    """Format a CommandResult for display.

    Args:
        result: The command result to format.
        json_output: If True, return JSON; otherwise return human-readable text.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    if not result.ok:
        error_msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {error_msg}"

    console = create_console()
    renderer = _OP_RENDERERS.get(result.op, _render_generic)
    renderer(result, console)
    return get_output(console).rstrip("\n")
