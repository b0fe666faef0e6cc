"""print: send a local file through the print pipeline."""

from __future__ import annotations

import click

from cupsmcp.commands._base import CupsCommand
from cupsmcp.commands._context import AppContext
from cupsmcp.services.rendering import RenderOverrides
from cupsmcp.services.result import ServiceResult


@click.command(
    "print",
    cls=CupsCommand,
    examples="""\
  # Print a PDF on the default printer
  cupsmcp print ~/Documents/report.pdf

  # Two copies, double-sided, pages 1-4
  cupsmcp print ~/Documents/report.pdf -n 2 -o "sides=two-sided-long-edge page-ranges=1-4"

  # Print a long file without the page-count confirmation
  cupsmcp print ~/Documents/book.pdf --yes

  # Decide at the prompt when the threshold is hit
  cupsmcp print ~/Documents/book.pdf --ask""",
)
@click.argument("path")
@click.option("-P", "--printer", default=None, help="Destination printer.")
@click.option("-n", "--copies", default=1, type=int, show_default=True, help="Number of copies.")
@click.option("-o", "--options", default=None, help="CUPS options, space separated.")
@click.option("--yes", "skip_confirmation", is_flag=True, help="Skip the page-count confirmation.")
@click.option("--ask", is_flag=True, help="Prompt instead of stopping at the page-count threshold.")
@click.option(
    "--render/--no-render",
    default=None,
    help="Force or suppress rendering Markdown and source code to PDF.",
)
@click.pass_obj
def print_cmd(
    app: AppContext,
    path: str,
    printer: str | None,
    copies: int,
    options: str | None,
    skip_confirmation: bool,
    ask: bool,
    render: bool | None,
) -> None:
    """Print PATH (must be under an allowed directory)."""

    def submit(confirmed: bool) -> ServiceResult:
        return app.service.print_file(
            path,
            printer=printer,
            copies=copies,
            options=options,
            skip_confirmation=confirmed,
            render=RenderOverrides(markdown=render, code=render),
        )

    result = submit(skip_confirmation)
    if ask and app.confirm_large_job(result):
        result = submit(True)
    app.emit(result)
