"""PrintBackend: the single dependency injected into every service.

Bundles the read-only settings with the collaborators the pipeline talks
to: the CUPS client, the two renderers, and the PDF page counter. Tests
build one with fakes; production code uses :meth:`PrintBackend.from_settings`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

from cupsmcp.domain.policy import AccessPolicy
from cupsmcp.infrastructure.cups import CupsClient
from cupsmcp.infrastructure.pdf import count_pages
from cupsmcp.infrastructure.renderers import CodeRenderer, MarkdownRenderer, Renderer
from cupsmcp.infrastructure.uploads import UploadIntake

if TYPE_CHECKING:
    from cupsmcp.config.settings import CupsSettings

PageCounter = Callable[[Path], int | None]


@dataclass
class PrintBackend:
    settings: CupsSettings
    cups: CupsClient
    markdown_renderer: Renderer = field(default_factory=MarkdownRenderer)
    code_renderer: Renderer = field(default_factory=CodeRenderer)
    page_counter: PageCounter = count_pages

    @classmethod
    def from_settings(cls, settings: CupsSettings) -> PrintBackend:
        return cls(settings=settings, cups=CupsClient(settings.cups))

    @cached_property
    def policy(self) -> AccessPolicy:
        security = self.settings.security
        return AccessPolicy(security.allowed_paths, security.effective_denied_paths)

    @cached_property
    def intake(self) -> UploadIntake:
        return UploadIntake(self.settings.upload)
