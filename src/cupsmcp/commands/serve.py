"""serve: start the MCP server."""

from __future__ import annotations

import click

from cupsmcp.commands._base import CupsCommand
from cupsmcp.commands._context import AppContext


@click.command(
    cls=CupsCommand,
    examples="""\
  # Start the MCP server (stdio transport, default)
  cupsmcp serve

  # SSE on the address from [network] in cupsmcp.toml
  cupsmcp serve --transport sse

  # SSE on a custom host/port
  cupsmcp serve --transport sse --host 0.0.0.0 --port 9000""",
)
@click.option(
    "--transport",
    default="stdio",
    type=click.Choice(["stdio", "sse"]),
    help="MCP transport protocol.",
)
@click.option("--host", default=None, help="Bind address (SSE only; default from config).")
@click.option("--port", default=None, type=int, help="Listen port (SSE only; default from config).")
@click.pass_obj
def serve(app: AppContext, transport: str, host: str | None, port: int | None) -> None:
    """Start the MCP server."""
    from cupsmcp.mcp.server import run_server

    run_server(app.settings, transport=transport, host=host, port=port)
