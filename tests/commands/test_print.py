"""Tests for the print command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from cupsmcp.cli import cli
from tests.conftest import FakeRenderer, FakeRunner, write_pdf


@pytest.mark.usefixtures("fake_cli_backend")
class TestPrintCommand:
    def test_prints_pdf(
        self,
        cli_runner: CliRunner,
        cli_config: Path,
        allowed_root: Path,
        fake_runner: FakeRunner,
    ) -> None:
        path = write_pdf(allowed_root / "memo.pdf", 1)
        result = cli_runner.invoke(cli, ["-c", str(cli_config), "print", str(path)])
        assert result.exit_code == 0, result.output
        assert "OK" in result.output
        assert "print_file" in result.output
        assert "office" in result.output
        assert fake_runner.commands("lpr") == [["lpr", str(path)]]

    def test_printer_copies_options(
        self,
        cli_runner: CliRunner,
        cli_config: Path,
        allowed_root: Path,
        fake_runner: FakeRunner,
    ) -> None:
        path = write_pdf(allowed_root / "memo.pdf", 1)
        result = cli_runner.invoke(
            cli,
            ["-c", str(cli_config), "print", str(path), "-P", "lab", "-n", "2", "-o", "media=A4"],
        )
        assert result.exit_code == 0, result.output
        assert fake_runner.commands("lpr") == [
            ["lpr", "-P", "lab", "-#", "2", "-o", "media=A4", str(path)]
        ]

    def test_large_job_needs_yes(
        self,
        cli_runner: CliRunner,
        cli_config: Path,
        allowed_root: Path,
        fake_runner: FakeRunner,
    ) -> None:
        path = write_pdf(allowed_root / "book.pdf", 25)

        pending = cli_runner.invoke(cli, ["-c", str(cli_config), "print", str(path)])
        assert pending.exit_code == 0, pending.output
        assert "CONFIRM" in pending.output
        assert "--yes" in pending.output
        assert fake_runner.commands("lpr") == []

        confirmed = cli_runner.invoke(cli, ["-c", str(cli_config), "print", str(path), "--yes"])
        assert confirmed.exit_code == 0, confirmed.output
        assert len(fake_runner.commands("lpr")) == 1

    def test_no_render(
        self,
        cli_runner: CliRunner,
        cli_config: Path,
        allowed_root: Path,
        markdown_renderer: FakeRenderer,
    ) -> None:
        path = allowed_root / "notes.md"
        path.write_text("# Notes\n", encoding="utf-8")
        result = cli_runner.invoke(cli, ["-c", str(cli_config), "print", str(path), "--no-render"])
        assert result.exit_code == 0, result.output
        assert markdown_renderer.calls == []

    def test_renders_markdown_by_default(
        self,
        cli_runner: CliRunner,
        cli_config: Path,
        allowed_root: Path,
        markdown_renderer: FakeRenderer,
    ) -> None:
        path = allowed_root / "notes.md"
        path.write_text("# Notes\n", encoding="utf-8")
        result = cli_runner.invoke(cli, ["-c", str(cli_config), "print", str(path)])
        assert result.exit_code == 0, result.output
        assert "markdown" in result.output
        assert len(markdown_renderer.calls) == 1

    def test_denied_path_exits_1(
        self, cli_runner: CliRunner, cli_config: Path, fake_runner: FakeRunner
    ) -> None:
        result = cli_runner.invoke(cli, ["-c", str(cli_config), "print", "/etc/passwd"])
        assert result.exit_code == 1
        assert "ACCESS_DENIED" in result.output
        assert fake_runner.commands("lpr") == []

    def test_missing_file_exits_1(
        self, cli_runner: CliRunner, cli_config: Path, allowed_root: Path
    ) -> None:
        result = cli_runner.invoke(
            cli, ["-c", str(cli_config), "print", str(allowed_root / "nope.pdf")]
        )
        assert result.exit_code == 1
        assert "FILE_NOT_FOUND" in result.output

    def test_json_output(
        self, cli_runner: CliRunner, cli_config: Path, allowed_root: Path
    ) -> None:
        path = write_pdf(allowed_root / "memo.pdf", 3)
        result = cli_runner.invoke(cli, ["--json", "-c", str(cli_config), "print", str(path)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["op"] == "print_file"
        assert data["data"]["pages"] == 3


@pytest.mark.usefixtures("fake_cli_backend")
class TestAskFlag:
    @pytest.fixture
    def book(self, allowed_root: Path) -> Path:
        return write_pdf(allowed_root / "book.pdf", 25)

    def test_accepting_prints(
        self, cli_runner: CliRunner, cli_config: Path, book: Path, fake_runner: FakeRunner
    ) -> None:
        result = cli_runner.invoke(
            cli, ["-c", str(cli_config), "print", str(book), "--ask"], input="y\n"
        )
        assert result.exit_code == 0, result.output
        assert "25 pages" in result.output
        assert len(fake_runner.commands("lpr")) == 1

    def test_declining_keeps_job_held(
        self, cli_runner: CliRunner, cli_config: Path, book: Path, fake_runner: FakeRunner
    ) -> None:
        result = cli_runner.invoke(
            cli, ["-c", str(cli_config), "print", str(book), "--ask"], input="n\n"
        )
        assert result.exit_code == 0, result.output
        assert "CONFIRM" in result.output
        assert fake_runner.commands("lpr") == []

    def test_never_prompts_in_json_mode(
        self, cli_runner: CliRunner, cli_config: Path, book: Path, fake_runner: FakeRunner
    ) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "-c", str(cli_config), "print", str(book), "--ask"], input="y\n"
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["data"]["status"] == "awaiting_confirmation"
        assert fake_runner.commands("lpr") == []
