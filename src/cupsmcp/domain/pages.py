"""Physical sheet math and the confirmation outcome types."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageMetrics:
    pages: int
    duplex: bool

    @property
    def sheets(self) -> int:
        return physical_sheets(self.pages, duplex=self.duplex)


def physical_sheets(pages: int, *, duplex: bool) -> int:
    """Sheets of paper a job uses; duplex puts two pages on each sheet."""
    return math.ceil(pages / 2) if duplex else pages


@dataclass(frozen=True)
class Proceed:
    """Dispatch may go ahead. *metrics* is None when pages were not counted."""

    metrics: PageMetrics | None = None


@dataclass(frozen=True)
class AwaitingConfirmation:
    """Halted before dispatch; the caller must re-invoke with skip_confirmation."""

    metrics: PageMetrics
    threshold: int

    @property
    def sheets(self) -> int:
        return self.metrics.sheets


ConfirmationOutcome = Proceed | AwaitingConfirmation
