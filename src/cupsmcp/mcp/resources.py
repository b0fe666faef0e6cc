"""MCP resource definitions: the effective server configuration.

URI: cupsmcp://config.
"""

from __future__ import annotations

import json
from typing import Any

from cupsmcp.config.settings import CupsSettings


def config_impl(settings: CupsSettings) -> dict[str, Any]:
    """Security roots, upload limits and render toggles the server enforces."""
    security = settings.security
    return {
        "cups": {
            "server": settings.cups.server or "localhost",
            "default_printer": settings.cups.default_printer or None,
        },
        "security": {
            "allowed_paths": [str(p) for p in security.allowed_paths],
            "denied_paths": [str(p) for p in security.effective_denied_paths],
        },
        "upload": {
            "max_size": settings.upload.max_size,
            "blocked_extensions": sorted(settings.upload.blocked_extensions),
        },
        "printing": {
            "max_copies": settings.printing.max_copies,
            "confirm_if_over_pages": settings.printing.confirm_if_over_pages,
        },
        "render": settings.render.model_dump(mode="json"),
    }


def register_resources(server: Any, settings: CupsSettings) -> None:
    """Register the MCP resources on the FastMCP server."""

    @server.resource("cupsmcp://config")  # type: ignore[untyped-decorator]
    def config_resource() -> str:
        """Effective security and limit configuration."""
        return json.dumps(config_impl(settings), indent=2)
