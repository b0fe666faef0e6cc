"""Document renderers: markdown and source code to PDF.

Both go through HTML. markdown-it-py and Pygments produce the markup, and a
headless Chromium (Playwright) prints it to PDF. The rendered PDF lands in a
private temp directory owned by the returned :class:`RenderedArtifact`.

Any failure, from reading the source to writing the PDF, surfaces as
:class:`RenderError`; the rendering gate decides whether that is fatal.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import structlog
from markdown_it import MarkdownIt
from playwright.sync_api import Route, sync_playwright
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import find_lexer_class_for_filename, get_lexer_by_name, get_lexer_for_filename
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

from cupsmcp.config.models import CodeRenderConfig
from cupsmcp.domain.errors import RenderError, ValidationError
from cupsmcp.infrastructure.artifacts import RENDER_DIR_PREFIX, RenderedArtifact, make_private_dir

log = structlog.get_logger(__name__)

MARKDOWN_EXTENSIONS = frozenset({"md", "markdown", "mdown", "mkd", "mkdn"})

# Lexers that match a filename but do not make it "source code".
_PLAIN_ALIASES = frozenset({"text", "markdown", "md"})

_FONT_SIZE_RE = re.compile(r"^\d+(\.\d+)?(pt|px|em|rem)$")
_LINE_SPACING_RE = re.compile(r"^\d+(\.\d+)?$")

_PAGE_CSS = """
body { font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif;
       font-size: 11pt; line-height: 1.5; color: #1f2328; }
pre, code { font-family: "SFMono-Regular", Menlo, Consolas, monospace; font-size: 9.5pt; }
pre { background: #f6f8fa; padding: 8px 12px; white-space: pre-wrap; }
table { border-collapse: collapse; }
th, td { border: 1px solid #d0d7de; padding: 4px 8px; }
img { max-width: 100%; }
"""

PdfWriter = Callable[[str, Path], None]


class Renderer(Protocol):
    kind: str

    def render(self, source: Path, style: CodeStyle | None = None) -> RenderedArtifact: ...


@dataclass(frozen=True)
class CodeStyle:
    """Presentation options for code rendering.

    Values end up in CSS, so they are checked against a strict shape.
    """

    line_numbers: bool = True
    color_scheme: str = "default"
    font_size: str = "10pt"
    line_spacing: str = "1.4"

    def __post_init__(self) -> None:
        if not _FONT_SIZE_RE.fullmatch(self.font_size):
            msg = f"Invalid font size {self.font_size!r}; use e.g. '10pt' or '12px'."
            raise ValidationError(msg, detail={"font_size": self.font_size})
        if not _LINE_SPACING_RE.fullmatch(self.line_spacing):
            msg = f"Invalid line spacing {self.line_spacing!r}; use e.g. '1' or '1.5'."
            raise ValidationError(msg, detail={"line_spacing": self.line_spacing})

    @classmethod
    def from_config(
        cls,
        config: CodeRenderConfig,
        *,
        line_numbers: bool | None = None,
        color_scheme: str | None = None,
        font_size: str | None = None,
        line_spacing: str | None = None,
    ) -> CodeStyle:
        """Configured defaults with per-call overrides applied."""
        return cls(
            line_numbers=config.line_numbers if line_numbers is None else line_numbers,
            color_scheme=color_scheme or config.color_scheme,
            font_size=font_size or config.font_size,
            line_spacing=line_spacing or config.line_spacing,
        )


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def is_markdown(path: Path) -> bool:
    return path.suffix.lstrip(".").lower() in MARKDOWN_EXTENSIONS


def is_source_code(path: Path) -> bool:
    """True when Pygments knows a programming-language lexer for *path*."""
    if is_markdown(path):
        return False
    lexer_cls = find_lexer_class_for_filename(path.name)
    if lexer_cls is None:
        return False
    return not (set(lexer_cls.aliases) & _PLAIN_ALIASES)


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------


def _html_page(title: str, body: str, css: str) -> str:
    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>{html.escape(title)}</title><style>{css}</style></head>"
        f"<body>{body}</body></html>"
    )


def _highlight_fence(code: str, lang: str, _attrs: str) -> str:
    if not lang:
        return ""
    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound:
        return ""
    return highlight(code, lexer, HtmlFormatter(nowrap=True))


def markdown_to_html(text: str, *, title: str = "document") -> str:
    """Render markdown to a standalone HTML page. Raw HTML in the source is escaped."""
    md = MarkdownIt("commonmark", {"html": False, "highlight": _highlight_fence})
    md.enable(["table", "strikethrough"])
    css = _PAGE_CSS + HtmlFormatter().get_style_defs("pre")
    return _html_page(title, md.render(text), css)


def code_to_html(text: str, *, filename: str, style: CodeStyle) -> str:
    """Syntax-highlight *text* as a standalone HTML page."""
    try:
        lexer = get_lexer_for_filename(filename, text, stripnl=False)
    except ClassNotFound:
        lexer = TextLexer(stripnl=False)
    formatter = HtmlFormatter(
        style=style.color_scheme,
        linenos="inline" if style.line_numbers else False,
        full=True,
        title=filename,
        prestyles=f"font-size: {style.font_size}; line-height: {style.line_spacing}; "
        "white-space: pre-wrap;",
    )
    return highlight(text, lexer, formatter)


# ---------------------------------------------------------------------------
# PDF output
# ---------------------------------------------------------------------------


def _block_request(route: Route) -> None:
    route.abort()


def write_pdf_with_playwright(page_html: str, destination: Path) -> None:
    """Print *page_html* to an A4 PDF with headless Chromium.

    All subresource requests are aborted: rendered documents come from
    untrusted callers and must not reach the network.
    """
    with sync_playwright() as p:
        browser = p.chromium.launch()
        try:
            page = browser.new_page()
            page.route("**/*", _block_request)
            page.set_content(page_html, wait_until="load")
            page.pdf(
                path=str(destination),
                format="A4",
                print_background=True,
                margin={"top": "15mm", "bottom": "15mm", "left": "12mm", "right": "12mm"},
            )
        finally:
            browser.close()


class HtmlPdfRenderer:
    """Shared render flow: source → HTML → PDF in a fresh temp directory."""

    kind = ""

    def __init__(self, *, pdf_writer: PdfWriter | None = None) -> None:
        self._pdf_writer: PdfWriter = pdf_writer or write_pdf_with_playwright

    def to_html(self, source: Path, text: str, style: CodeStyle | None) -> str:
        raise NotImplementedError

    def render(self, source: Path, style: CodeStyle | None = None) -> RenderedArtifact:
        try:
            text = source.read_text(encoding="utf-8")
            page_html = self.to_html(source, text, style)
        except (OSError, UnicodeDecodeError, ClassNotFound) as exc:
            msg = f"Failed to render {source.name} ({self.kind}): {exc}"
            raise RenderError(msg, detail={"kind": self.kind}) from exc

        directory = make_private_dir(RENDER_DIR_PREFIX)
        artifact = RenderedArtifact(
            directory=directory,
            path=directory / f"{source.stem}.pdf",
            kind=self.kind,
        )
        try:
            self._pdf_writer(page_html, artifact.path)
        except Exception as exc:
            artifact.cleanup()
            msg = f"Failed to render {source.name} ({self.kind}): {exc}"
            raise RenderError(msg, detail={"kind": self.kind}) from exc
        log.debug("render.complete", kind=self.kind, source=source.name)
        return artifact


class MarkdownRenderer(HtmlPdfRenderer):
    kind = "markdown"

    def to_html(self, source: Path, text: str, style: CodeStyle | None) -> str:
        return markdown_to_html(text, title=source.name)


class CodeRenderer(HtmlPdfRenderer):
    kind = "code"

    def to_html(self, source: Path, text: str, style: CodeStyle | None) -> str:
        return code_to_html(text, filename=source.name, style=style or CodeStyle())
