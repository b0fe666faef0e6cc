"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`. Unknown
ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.text import Text

from cupsmcp.output.console import create_console, get_output, label_style

if TYPE_CHECKING:
    from rich.console import Console

    from cupsmcp.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult, *, label: str = "OK") -> None:
    console.print(Text.assemble((label, label_style(label)), (f"  {result.op}", "cups.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="cups.key")
    if key in ("file", "path", "absolute", "real", "matched_root"):
        v = Text(str(value), style="cups.path")
    elif key == "printer":
        v = Text(str(value), style="cups.printer")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text.assemble(
            ("ERROR", label_style("ERROR")),
            (f"  {result.op}{code}", "cups.op"),
            f": {msg}",
        )
    )

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_print(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    data = result.data
    if result.awaiting_confirmation:
        _status_line(console, result, label="CONFIRM")
        for key in ("file", "pages", "sheets", "duplex", "threshold"):
            _field(console, key, data.get(key))
        console.print(Text("  Re-run with --yes to print.", style="cups.warning"))
        return

    _status_line(console, result)
    for key in ("file", "printer", "copies"):
        _field(console, key, data.get(key))
    if data.get("options"):
        _field(console, "options", data["options"])
    if data.get("render_kind"):
        _field(console, "rendered", data["render_kind"])
    if verbose:
        for key in ("pages", "sheets"):
            if key in data:
                _field(console, key, data[key])


def _render_printers(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    output = str(result.data.get("output", "")).rstrip()
    console.print(
        Panel(
            output or "No printers reported.",
            title=f"Printers on {result.data.get('server', 'localhost')}",
            title_align="left",
            expand=False,
        )
    )


def _render_add_printer(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("printer", "uri"):
        _field(console, key, result.data.get(key))
    if result.data.get("default"):
        _field(console, "default", "yes")


def _render_check_path(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    console.print(Text("  allowed", style="cups.allowed"))
    for key in ("absolute", "real", "matched_root"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    "print_file": _render_print,
    "upload_and_print": _render_print,
    "list_printers": _render_printers,
    "add_printer": _render_add_printer,
    "check_path": _render_check_path,
}
