"""FastMCP server setup.

Transport: stdio default (one client), SSE for many concurrent clients
through the session-routed Starlette app in :mod:`cupsmcp.mcp.http`.
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from cupsmcp.config.settings import CupsSettings
from cupsmcp.infrastructure.backend import PrintBackend
from cupsmcp.mcp.http import serve_http
from cupsmcp.mcp.resources import register_resources
from cupsmcp.mcp.tools import register_tools
from cupsmcp.services.printing import PrintService

__all__ = ["TRANSPORTS", "create_server", "run_server"]

TRANSPORTS = ("stdio", "sse")

_INSTRUCTIONS = (
    "Print documents through CUPS. Use list_printers to see destinations, "
    "print_file for files on the server (allowed directories only), and "
    "upload_and_print to send content. Markdown and source code are rendered "
    "to PDF automatically. A result with status 'awaiting_confirmation' has "
    "not printed yet: confirm with the user, then call again with "
    "skip_confirmation=true."
)


def create_server(settings: CupsSettings, *, backend: PrintBackend | None = None) -> FastMCP:
    """Create the MCP server and register all tools and resources.

    *backend* defaults to one built from *settings*; tests pass one with
    fake collaborators.
    """
    backend = backend or PrintBackend.from_settings(settings)
    server = FastMCP("cupsmcp", instructions=_INSTRUCTIONS)

    register_tools(server, PrintService(backend))
    register_resources(server, settings)

    return server


def run_server(
    settings: CupsSettings,
    *,
    transport: str = "stdio",
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Serve until interrupted. *host* and *port* only apply to SSE."""
    if transport not in TRANSPORTS:
        msg = f"Unknown transport {transport!r}; expected one of {', '.join(TRANSPORTS)}"
        raise ValueError(msg)

    server = create_server(settings)
    if transport == "stdio":
        server.run(transport="stdio")
        return
    serve_http(
        server,
        settings,
        host=host or settings.network.host,
        port=port if port is not None else settings.network.port,
    )
