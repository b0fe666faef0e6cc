"""``cupsmcp`` entry point: global flags, then one of the subcommands."""

from __future__ import annotations

from pathlib import Path

import click

from cupsmcp import __version__
from cupsmcp.commands import register_commands
from cupsmcp.commands._context import AppContext
from cupsmcp.config.settings import CupsSettings


def _load_settings(
    config_path: Path | None, *, json_output: bool, verbose: bool, log_json: bool
) -> CupsSettings:
    return CupsSettings.from_cli(
        config_path=str(config_path) if config_path else None,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
    )


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(__version__, prog_name="cupsmcp")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Use this cupsmcp.toml instead of searching for one.",
)
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and extra result fields.")
@click.option("--log-json", is_flag=True, help="Log JSON lines to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    json_output: bool,
    verbose: bool,
    log_json: bool,
) -> None:
    """Print through CUPS from MCP clients and the command line."""
    settings = _load_settings(
        config_path, json_output=json_output, verbose=verbose, log_json=log_json
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
