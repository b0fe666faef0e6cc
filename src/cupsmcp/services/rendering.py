"""Rendering gate: decide whether a file is rendered to PDF before printing.

Decision order:
  1. markdown: explicit override (forcing on needs a markdown extension),
     else ``render.auto_markdown`` + extension
  2. code: explicit override, else ``render.auto_code`` + Pygments detection
  3. nothing

At most one renderer runs per file. The gate never checks the path itself;
callers pass either a policy-approved path or a quarantined upload.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from cupsmcp.domain.errors import RenderError
from cupsmcp.infrastructure.renderers import CodeStyle, is_markdown, is_source_code

if TYPE_CHECKING:
    from cupsmcp.infrastructure.artifacts import RenderedArtifact
    from cupsmcp.infrastructure.backend import PrintBackend
    from cupsmcp.infrastructure.renderers import Renderer

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RenderOverrides:
    """Per-call rendering choices. ``None`` means "use configuration"."""

    markdown: bool | None = None
    code: bool | None = None
    line_numbers: bool | None = None
    color_scheme: str | None = None
    font_size: str | None = None
    line_spacing: str | None = None


@dataclass(frozen=True)
class PreparedFile:
    final_path: Path
    rendered: RenderedArtifact | None = None
    render_kind: str | None = None
    warning: str | None = None


class RenderingGate:
    def __init__(self, backend: PrintBackend) -> None:
        self._backend = backend
        self._config = backend.settings.render

    def should_render_markdown(self, path: Path, overrides: RenderOverrides) -> bool:
        if overrides.markdown is not None:
            return overrides.markdown and is_markdown(path)
        return self._config.auto_markdown and is_markdown(path)

    def should_render_code(self, path: Path, overrides: RenderOverrides) -> bool:
        if overrides.code is not None:
            return overrides.code
        return self._config.auto_code and is_source_code(path)

    def prepare(self, path: Path, overrides: RenderOverrides | None = None) -> PreparedFile:
        """Render *path* if warranted.

        Returns the file to print plus the rendered artifact (if any), which
        the caller must register for cleanup.

        Raises:
            ValidationError: code style overrides are malformed.
            RenderError: the renderer failed and fallback is disabled.
        """
        overrides = overrides or RenderOverrides()
        if self.should_render_markdown(path, overrides):
            return self._render(self._backend.markdown_renderer, path, None)
        if self.should_render_code(path, overrides):
            style = CodeStyle.from_config(
                self._config.code,
                line_numbers=overrides.line_numbers,
                color_scheme=overrides.color_scheme,
                font_size=overrides.font_size,
                line_spacing=overrides.line_spacing,
            )
            return self._render(self._backend.code_renderer, path, style)
        return PreparedFile(final_path=path)

    def _render(self, renderer: Renderer, path: Path, style: CodeStyle | None) -> PreparedFile:
        try:
            artifact = renderer.render(path, style)
        except RenderError as exc:
            if not self._config.fallback_on_error:
                raise
            log.warning("render.fallback", kind=renderer.kind, source=path.name, error=exc.message)
            return PreparedFile(
                final_path=path,
                warning=f"{exc.message}; printing the original file instead.",
            )
        return PreparedFile(final_path=artifact.path, rendered=artifact, render_kind=renderer.kind)
