"""check-path: explain the access policy decision for a path."""

from __future__ import annotations

import click

from cupsmcp.commands._base import CupsCommand
from cupsmcp.commands._context import AppContext


@click.command(
    "check-path",
    cls=CupsCommand,
    examples="""\
  # Would print_file accept this path?
  cupsmcp check-path ~/Documents/report.pdf

  # Machine-readable decision, including the denial reason
  cupsmcp --json check-path /etc/passwd""",
)
@click.argument("path")
@click.pass_obj
def check_path(app: AppContext, path: str) -> None:
    """Run the access policy on PATH without printing. Exits 1 when denied."""
    app.emit(app.service.check_path(path))
