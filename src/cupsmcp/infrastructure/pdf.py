"""PDF inspection for the confirmation gate."""

from __future__ import annotations

import logging
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

logger = logging.getLogger(__name__)

_PDF_MAGIC = b"%PDF-"


def is_pdf(path: Path) -> bool:
    try:
        with path.open("rb") as fh:
            return fh.read(len(_PDF_MAGIC)) == _PDF_MAGIC
    except OSError:
        return False


def count_pages(path: Path) -> int | None:
    """Number of pages in *path*, or None when it is not a readable PDF."""
    if not is_pdf(path):
        return None
    try:
        return len(PdfReader(path).pages)
    except (PyPdfError, OSError, ValueError, KeyError):
        logger.debug("Could not read page count from %s", path, exc_info=True)
        return None
