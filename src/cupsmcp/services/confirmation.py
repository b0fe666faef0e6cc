"""Confirmation gate: stop large print runs until the caller confirms."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from cupsmcp.domain.pages import AwaitingConfirmation, ConfirmationOutcome, PageMetrics, Proceed

if TYPE_CHECKING:
    from cupsmcp.domain.options import PrintOptions
    from cupsmcp.infrastructure.backend import PrintBackend

log = structlog.get_logger(__name__)


class ConfirmationGate:
    def __init__(self, backend: PrintBackend) -> None:
        self._count_pages = backend.page_counter
        self._threshold = backend.settings.printing.confirm_if_over_pages

    @property
    def threshold(self) -> int:
        return self._threshold

    def check(
        self,
        path: Path,
        options: PrintOptions,
        *,
        skip_confirmation: bool = False,
    ) -> ConfirmationOutcome:
        """Proceed, or halt when physical sheets exceed the threshold.

        Files whose page count cannot be determined (anything but a readable
        PDF) always proceed.
        """
        if skip_confirmation or self._threshold <= 0:
            return Proceed()

        pages = self._count_pages(path)
        if pages is None:
            return Proceed()

        metrics = PageMetrics(pages=pages, duplex=options.duplex)
        if metrics.sheets > self._threshold:
            log.info(
                "confirmation.required",
                pages=pages,
                sheets=metrics.sheets,
                threshold=self._threshold,
            )
            return AwaitingConfirmation(metrics=metrics, threshold=self._threshold)
        return Proceed(metrics)
