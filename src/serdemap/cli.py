"""Root CLI group for serdemap with global flags and command registration."""

from __future__ import annotations

import click

from serdemap import __version__
from serdemap.commands import register_commands
from serdemap.commands._context import AppContext
from serdemap.config.settings import SerdeMapSettings
from serdemap.domain.strategy import strategy_names


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="serdemap")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-k",
    "--key-strategy",
    type=click.Choice(strategy_names()),
    default=None,
    help="Key strategy applied to JSON object keys.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    key_strategy: str | None,
) -> None:
    """serdemap: ordered maps with pluggable key codecs."""
    ctx.ensure_object(dict)
    settings = SerdeMapSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
    )
    if key_strategy is not None:
        keys = settings.keys.model_copy(update={"strategy": key_strategy})
        settings = settings.model_copy(update={"keys": keys})
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
