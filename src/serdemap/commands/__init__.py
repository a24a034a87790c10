"""Subcommand modules for serdemap.

Provides register_commands() which uses deferred imports to keep
``serdemap --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from serdemap.commands.cql import cql
    from serdemap.commands.typesense import typesense

    cli.add_command(cql)
    cli.add_command(typesense)

    # --- Standalone commands ---
    from serdemap.commands.inspect import inspect

    cli.add_command(inspect)
