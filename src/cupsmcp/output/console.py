"""Rich console and theme for CLI output.

Output is rendered into an in-memory buffer and returned as a string, so the
caller decides between stdout and stderr. Rich drops color codes when the
real stream is not a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CUPS_THEME = Theme(
    {
        "cups.ok": "bold green",
        "cups.error": "bold red",
        "cups.warning": "bold yellow",
        "cups.pending": "bold magenta",
        "cups.op": "bold cyan",
        "cups.key": "dim",
        "cups.path": "dim",
        "cups.printer": "bold blue",
        "cups.allowed": "green",
        "cups.denied": "red",
    }
)

# Leading label of a result line -> theme style.
_LABEL_STYLES: dict[str, str] = {
    "OK": "cups.ok",
    "CONFIRM": "cups.pending",
    "ERROR": "cups.error",
}


def label_style(label: str) -> str:
    return _LABEL_STYLES.get(label, "cups.op")


def create_console(*, no_color: bool = False, width: int = 120) -> Console:
    """Console writing to a StringIO; *width* is fixed so output is stable in pipes."""
    return Console(
        file=StringIO(),
        theme=CUPS_THEME,
        no_color=no_color,
        highlight=False,
        width=width,
    )


def get_output(console: Console) -> str:
    """Text rendered so far by a console from :func:`create_console`."""
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console was not created by create_console()")
    return buffer.getvalue()
