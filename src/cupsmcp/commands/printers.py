"""printers / add-printer: inspect and register CUPS destinations."""

from __future__ import annotations

import click

from cupsmcp.commands._base import CupsCommand
from cupsmcp.commands._context import AppContext


@click.command(
    cls=CupsCommand,
    examples="""\
  # Printers and the default destination
  cupsmcp printers

  # Same, against a remote CUPS server
  CUPSMCP_CUPS__SERVER=print.lan cupsmcp printers""",
)
@click.pass_obj
def printers(app: AppContext) -> None:
    """List printers and their status."""
    app.emit(app.service.list_printers())


@click.command(
    "add-printer",
    cls=CupsCommand,
    examples="""\
  # Make the server's "office" queue available locally
  cupsmcp add-printer office

  # Under a different local name, as the default
  cupsmcp add-printer office --local-name office-remote --set-default""",
)
@click.argument("printer_name")
@click.option("--local-name", default=None, help="Local queue name (default: same as remote).")
@click.option("--set-default", is_flag=True, help="Make it the default destination.")
@click.pass_obj
def add_printer(
    app: AppContext, printer_name: str, local_name: str | None, set_default: bool
) -> None:
    """Register a printer of the configured CUPS server locally."""
    app.emit(
        app.service.add_printer(printer_name, local_name=local_name, set_default=set_default)
    )
