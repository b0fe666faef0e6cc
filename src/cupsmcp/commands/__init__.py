"""Subcommand modules for cupsmcp.

Provides register_commands(), which uses deferred imports to keep
``cupsmcp --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from cupsmcp.commands.check_path import check_path
    from cupsmcp.commands.print_cmd import print_cmd
    from cupsmcp.commands.printers import add_printer, printers
    from cupsmcp.commands.serve import serve

    cli.add_command(serve)
    cli.add_command(printers)
    cli.add_command(add_printer)
    cli.add_command(print_cmd)
    cli.add_command(check_path)
