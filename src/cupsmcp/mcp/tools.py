"""MCP tool definitions: 4 tools.

Printing (2): print_file, upload_and_print.
Printer management (2): list_printers, add_printer.

Each tool has a ``<name>_impl`` function testable without a running server.
``register_tools()`` wraps them with FastMCP decorators; the wrappers run the
blocking pipeline in a worker thread so one session's print job never stalls
another's.
"""

from __future__ import annotations

import functools
from typing import Any

import anyio.to_thread

from cupsmcp.services.printing import PrintService
from cupsmcp.services.rendering import RenderOverrides
from cupsmcp.services.result import ServiceResult


def _to_mcp_response(result: ServiceResult) -> dict[str, Any]:
    """Convert a ServiceResult to an MCP-friendly dict."""
    response: dict[str, Any] = {
        "ok": result.ok,
        "op": result.op,
        "data": result.data,
    }
    if result.warnings:
        response["warnings"] = result.warnings
    if result.error is not None:
        response["error"] = {
            "code": result.error.code,
            "message": result.error.message,
        }
        if result.error.detail:
            response["error"]["detail"] = result.error.detail
    return response


# ---------------------------------------------------------------------------
# Printing tools (2)
# ---------------------------------------------------------------------------


def print_file_impl(
    service: PrintService,
    file_path: str,
    *,
    printer: str | None = None,
    copies: int = 1,
    options: str | None = None,
    skip_confirmation: bool = False,
    line_numbers: bool | None = None,
    color_scheme: str | None = None,
    font_size: str | None = None,
    line_spacing: str | None = None,
    force_markdown_render: bool | None = None,
    force_code_render: bool | None = None,
) -> dict[str, Any]:
    """Print a file already on the server."""
    render = RenderOverrides(
        markdown=force_markdown_render,
        code=force_code_render,
        line_numbers=line_numbers,
        color_scheme=color_scheme,
        font_size=font_size,
        line_spacing=line_spacing,
    )
    result = service.print_file(
        file_path,
        printer=printer,
        copies=copies,
        options=options,
        skip_confirmation=skip_confirmation,
        render=render,
    )
    return _to_mcp_response(result)


def upload_and_print_impl(
    service: PrintService,
    filename: str,
    content: str,
    *,
    encoding: str = "base64",
    printer: str | None = None,
    copies: int = 1,
    options: str | None = None,
    skip_confirmation: bool = False,
    line_numbers: bool | None = None,
    color_scheme: str | None = None,
    font_size: str | None = None,
    line_spacing: str | None = None,
    force_markdown_render: bool | None = None,
    force_code_render: bool | None = None,
) -> dict[str, Any]:
    """Print content supplied by the client."""
    render = RenderOverrides(
        markdown=force_markdown_render,
        code=force_code_render,
        line_numbers=line_numbers,
        color_scheme=color_scheme,
        font_size=font_size,
        line_spacing=line_spacing,
    )
    result = service.upload_and_print(
        filename,
        content,
        encoding=encoding,
        printer=printer,
        copies=copies,
        options=options,
        skip_confirmation=skip_confirmation,
        render=render,
    )
    return _to_mcp_response(result)


# ---------------------------------------------------------------------------
# Printer management tools (2)
# ---------------------------------------------------------------------------


def list_printers_impl(service: PrintService) -> dict[str, Any]:
    """List printers and their status."""
    return _to_mcp_response(service.list_printers())


def add_printer_impl(
    service: PrintService,
    printer_name: str,
    *,
    local_name: str | None = None,
    set_default: bool = False,
) -> dict[str, Any]:
    """Register a remote CUPS printer locally."""
    result = service.add_printer(printer_name, local_name=local_name, set_default=set_default)
    return _to_mcp_response(result)


# ---------------------------------------------------------------------------
# Registration: wraps _impl functions with FastMCP decorators
# ---------------------------------------------------------------------------


async def _in_worker(func: Any, *args: Any, **kwargs: Any) -> dict[str, Any]:
    result: dict[str, Any] = await anyio.to_thread.run_sync(
        functools.partial(func, *args, **kwargs)
    )
    return result


def register_tools(server: Any, service: PrintService) -> None:
    """Register all 4 MCP tools on the FastMCP server."""

    @server.tool()  # type: ignore[untyped-decorator]
    async def list_printers() -> dict[str, Any]:
        """List available printers and their status (output of ``lpstat -p -d``)."""
        return await _in_worker(list_printers_impl, service)

    @server.tool()  # type: ignore[untyped-decorator]
    async def print_file(
        file_path: str,
        printer: str | None = None,
        copies: int = 1,
        options: str | None = None,
        skip_confirmation: bool = False,
        line_numbers: bool | None = None,
        color_scheme: str | None = None,
        font_size: str | None = None,
        line_spacing: str | None = None,
        force_markdown_render: bool | None = None,
        force_code_render: bool | None = None,
    ) -> dict[str, Any]:
        """Print a file from the server's filesystem.

        The path must lie under an allowed directory. Markdown and source
        files are rendered to PDF first unless disabled. ``options`` takes
        CUPS options such as ``"sides=two-sided-long-edge page-ranges=1-4"``.
        Large jobs return ``status: awaiting_confirmation``; call again with
        ``skip_confirmation=true`` to print.
        """
        return await _in_worker(
            print_file_impl,
            service,
            file_path,
            printer=printer,
            copies=copies,
            options=options,
            skip_confirmation=skip_confirmation,
            line_numbers=line_numbers,
            color_scheme=color_scheme,
            font_size=font_size,
            line_spacing=line_spacing,
            force_markdown_render=force_markdown_render,
            force_code_render=force_code_render,
        )

    @server.tool()  # type: ignore[untyped-decorator]
    async def upload_and_print(
        filename: str,
        content: str,
        encoding: str = "base64",
        printer: str | None = None,
        copies: int = 1,
        options: str | None = None,
        skip_confirmation: bool = False,
        line_numbers: bool | None = None,
        color_scheme: str | None = None,
        font_size: str | None = None,
        line_spacing: str | None = None,
        force_markdown_render: bool | None = None,
        force_code_render: bool | None = None,
    ) -> dict[str, Any]:
        """Print file content sent by the client.

        ``content`` is base64 by default; use ``encoding="text"`` for plain
        text. The filename's extension selects rendering and is checked
        against the blocked list.
        """
        return await _in_worker(
            upload_and_print_impl,
            service,
            filename,
            content,
            encoding=encoding,
            printer=printer,
            copies=copies,
            options=options,
            skip_confirmation=skip_confirmation,
            line_numbers=line_numbers,
            color_scheme=color_scheme,
            font_size=font_size,
            line_spacing=line_spacing,
            force_markdown_render=force_markdown_render,
            force_code_render=force_code_render,
        )

    @server.tool()  # type: ignore[untyped-decorator]
    async def add_printer(
        printer_name: str,
        local_name: str | None = None,
        set_default: bool = False,
    ) -> dict[str, Any]:
        """Make a printer of the configured CUPS server available locally."""
        return await _in_worker(
            add_printer_impl,
            service,
            printer_name,
            local_name=local_name,
            set_default=set_default,
        )
