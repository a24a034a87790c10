"""Command group: Typesense schema helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from serdemap.commands._base import SerdeMapGroup
from serdemap.output.result import CommandResult
from serdemap.typesense import collection_schema, typesense_field

if TYPE_CHECKING:
    from serdemap.commands._context import AppContext


@click.group(
    cls=SerdeMapGroup,
    examples="""\
  serdemap typesense field attributes
  serdemap --json typesense field attributes --optional --facet""",
)
def typesense() -> None:
    """Typesense schema helpers for map-typed fields."""


@typesense.command()
@click.argument("name")
@click.option("--optional", is_flag=True, help="Mark the field optional.")
@click.option("--facet", is_flag=True, help="Enable faceting on the field.")
@click.option("--collection", default=None, help="Wrap the field in a collection schema.")
@click.pass_obj
def field(
    app: AppContext, name: str, optional: bool, facet: bool, collection: str | None
) -> None:
    """Print the schema field for a map-typed attribute NAME."""
    entry = typesense_field(name, app.map_type, optional=optional, facet=facet)
    data = entry.model_dump()
    if collection:
        data = {"schema": collection_schema(collection, [entry])}
    app.emit(CommandResult(ok=True, op="typesense_field", data=data))
