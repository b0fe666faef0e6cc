"""Tests for PDF page counting."""

from __future__ import annotations

from pathlib import Path

from cupsmcp.infrastructure.pdf import count_pages, is_pdf
from tests.conftest import write_pdf


def test_counts_pages(tmp_path: Path) -> None:
    assert count_pages(write_pdf(tmp_path / "doc.pdf", 24)) == 24


def test_extension_does_not_matter(tmp_path: Path) -> None:
    assert count_pages(write_pdf(tmp_path / "upload.bin", 3)) == 3


def test_non_pdf_is_unknown(tmp_path: Path) -> None:
    text = tmp_path / "notes.pdf"
    text.write_text("just text")
    assert not is_pdf(text)
    assert count_pages(text) is None


def test_missing_file_is_unknown(tmp_path: Path) -> None:
    assert count_pages(tmp_path / "missing.pdf") is None
