"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Resolves the configured key strategy and emits
results (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from serdemap.domain.container import SerdeMap
from serdemap.domain.strategy import get_strategy
from serdemap.output.formatters import format_result

if TYPE_CHECKING:
    from serdemap.config.settings import SerdeMapSettings
    from serdemap.output.result import CommandResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: SerdeMapSettings) -> None:
        self.settings = settings

        from serdemap.config.logging import configure_logging

        configure_logging(settings)

    @property
    def map_type(self) -> type[SerdeMap[Any, Any]]:
        """SerdeMap type bound to the configured key strategy."""
        return SerdeMap.using(get_strategy(self.settings.keys.strategy))

    def emit(self, result: CommandResult) -> None:
        """Format and output a CommandResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        json_output = self.settings.json_output
        output = format_result(result, json_output=json_output)
        if result.ok:
            click.echo(output)
            if not json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
