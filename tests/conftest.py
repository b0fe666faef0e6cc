"""Shared pytest fixtures and test helpers for cupsmcp tests."""

from __future__ import annotations

import subprocess
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from pypdf import PdfWriter

from cupsmcp.config.settings import CupsSettings
from cupsmcp.domain.errors import RenderError
from cupsmcp.infrastructure.artifacts import RENDER_DIR_PREFIX, RenderedArtifact, make_private_dir
from cupsmcp.infrastructure.backend import PrintBackend
from cupsmcp.infrastructure.cups import CupsClient
from cupsmcp.infrastructure.renderers import CodeStyle
from cupsmcp.services.printing import PrintService

LPSTAT_OUTPUT = (
    "printer office is idle.  enabled since Mon 01 Jan 2024\n"
    "printer lab is idle.  enabled since Mon 01 Jan 2024\n"
    "system default destination: office"
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def write_pdf(path: Path, pages: int) -> Path:
    """Write a PDF with *pages* blank Letter pages."""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    with path.open("wb") as fh:
        writer.write(fh)
    return path


class FakeRunner:
    """Stands in for ``subprocess.run`` in CupsClient.

    Commands succeed with canned stdout unless listed in ``failures``.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.outputs: dict[str, str] = {"lpstat": LPSTAT_OUTPUT}
        self.failures: dict[str, str] = {}
        self.missing: set[str] = set()

    def __call__(self, args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(args))
        command = args[0]
        if command in self.missing:
            raise FileNotFoundError(command)
        if command in self.failures:
            return subprocess.CompletedProcess(args, 1, stdout="", stderr=self.failures[command])
        return subprocess.CompletedProcess(args, 0, stdout=self.outputs.get(command, ""), stderr="")

    def commands(self, name: str) -> list[list[str]]:
        return [call for call in self.calls if call[0] == name]


class FakeRenderer:
    """Renderer double producing a real PDF artifact, or failing on demand."""

    def __init__(self, kind: str, *, pages: int = 1, fail: bool = False) -> None:
        self.kind = kind
        self.pages = pages
        self.fail = fail
        self.calls: list[tuple[Path, CodeStyle | None]] = []
        self.produced: list[RenderedArtifact] = []

    def render(self, source: Path, style: CodeStyle | None = None) -> RenderedArtifact:
        self.calls.append((source, style))
        if self.fail:
            raise RenderError(f"Failed to render {source.name} ({self.kind}): boom")
        directory = make_private_dir(RENDER_DIR_PREFIX)
        artifact = RenderedArtifact(
            directory=directory, path=directory / f"{source.stem}.pdf", kind=self.kind
        )
        write_pdf(artifact.path, self.pages)
        self.produced.append(artifact)
        return artifact


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def scratch_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Route every temp directory the pipeline creates into one inspectable place."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    monkeypatch.delenv("CUPSMCP_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    return scratch


@pytest.fixture
def allowed_root(tmp_path: Path) -> Path:
    root = tmp_path / "allowed"
    root.mkdir()
    return root


@pytest.fixture
def make_settings(tmp_path: Path, allowed_root: Path) -> Callable[..., CupsSettings]:
    """Factory for settings rooted in the test's tmp_path."""

    def _make(**overrides: Any) -> CupsSettings:
        overrides.setdefault(
            "security",
            {"allowed_paths": [allowed_root], "denied_paths": [allowed_root / "secret"]},
        )
        return CupsSettings.from_cli(search_from=tmp_path, **overrides)

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., CupsSettings]) -> CupsSettings:
    return make_settings()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def markdown_renderer() -> FakeRenderer:
    return FakeRenderer("markdown")


@pytest.fixture
def code_renderer() -> FakeRenderer:
    return FakeRenderer("code")


@pytest.fixture
def make_backend(
    fake_runner: FakeRunner,
    markdown_renderer: FakeRenderer,
    code_renderer: FakeRenderer,
) -> Callable[[CupsSettings], PrintBackend]:
    def _make(settings: CupsSettings) -> PrintBackend:
        return PrintBackend(
            settings=settings,
            cups=CupsClient(settings.cups, runner=fake_runner),
            markdown_renderer=markdown_renderer,
            code_renderer=code_renderer,
        )

    return _make


@pytest.fixture
def backend(
    settings: CupsSettings, make_backend: Callable[[CupsSettings], PrintBackend]
) -> PrintBackend:
    return make_backend(settings)


@pytest.fixture
def service(backend: PrintBackend) -> PrintService:
    return PrintService(backend)


@pytest.fixture
def cli_config(tmp_path: Path, allowed_root: Path) -> Path:
    """A cupsmcp.toml confining the CLI to the test's allowed root."""
    config = tmp_path / "cupsmcp.toml"
    config.write_text(
        "[security]\n"
        f'allowed_paths = ["{allowed_root}"]\n'
        f'denied_paths = ["{allowed_root / "secret"}"]\n',
        encoding="utf-8",
    )
    return config


@pytest.fixture
def fake_cli_backend(
    monkeypatch: pytest.MonkeyPatch, make_backend: Callable[[CupsSettings], PrintBackend]
) -> None:
    """Make the CLI build its backend with the fake runner and renderers."""
    monkeypatch.setattr(
        PrintBackend, "from_settings", classmethod(lambda cls, settings: make_backend(settings))
    )
