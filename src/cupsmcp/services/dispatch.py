"""Job dispatch and artifact cleanup.

:class:`ArtifactScope` is the cleanup coordinator: an artifact is tracked
the moment it is created, and every tracked artifact is removed when the
scope exits, whether the pipeline printed, halted for confirmation, or
raised. :class:`JobDispatcher` performs the final copy-count check and hands
the job to CUPS.
"""

from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, TypeVar

import structlog

from cupsmcp.domain.errors import DispatchFailure, ValidationError
from cupsmcp.domain.options import PrintOptions
from cupsmcp.infrastructure.artifacts import TempArtifact
from cupsmcp.infrastructure.cups import CupsCommandError

if TYPE_CHECKING:
    from cupsmcp.infrastructure.backend import PrintBackend

log = structlog.get_logger(__name__)

_A = TypeVar("_A", bound=TempArtifact)

SYSTEM_DEFAULT_LABEL = "default printer"


class ArtifactScope:
    """Removes every tracked artifact on exit, newest first.

    Cleanup errors are logged by the artifacts themselves and never replace
    the result or exception of the enclosed pipeline.
    """

    def __init__(self) -> None:
        self._stack = ExitStack()
        self._tracked: list[TempArtifact] = []

    def __enter__(self) -> ArtifactScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def track(self, artifact: _A) -> _A:
        self._tracked.append(artifact)
        self._stack.callback(artifact.cleanup)
        return artifact

    @property
    def tracked(self) -> tuple[TempArtifact, ...]:
        return tuple(self._tracked)

    def close(self) -> None:
        self._stack.close()


@dataclass(frozen=True)
class PrintJobSpec:
    """Everything CUPS needs for one submission. Built once, never changed."""

    source: Path
    printer: str | None = None
    copies: int = 1
    options: PrintOptions = field(default_factory=PrintOptions)


@dataclass(frozen=True)
class DispatchReceipt:
    printer_name: str
    copies: int
    source: Path


class JobDispatcher:
    def __init__(self, backend: PrintBackend) -> None:
        self._cups = backend.cups
        self._max_copies = backend.settings.printing.max_copies
        self._default_printer = backend.settings.cups.default_printer

    def validate_copies(self, copies: int) -> None:
        if copies < 1:
            msg = f"Copy count must be at least 1 (got {copies})."
            raise ValidationError(msg, detail={"copies": copies, "max_copies": self._max_copies})
        if self._max_copies > 0 and copies > self._max_copies:
            msg = (
                f"Copy count ({copies}) exceeds maximum ({self._max_copies}). "
                "Raise printing.max_copies to allow more."
            )
            raise ValidationError(msg, detail={"copies": copies, "max_copies": self._max_copies})

    def resolve_printer(self, requested: str | None) -> tuple[str | None, str]:
        """Return ``(printer passed to lpr, printer name reported to the caller)``.

        Explicit beats configured default; with neither, lpr picks the
        scheduler default and we report its name when CUPS will tell us.
        """
        target = requested or self._default_printer or None
        if target:
            return target, target
        return None, self._cups.default_destination() or SYSTEM_DEFAULT_LABEL

    def dispatch(self, job: PrintJobSpec) -> DispatchReceipt:
        """Submit *job* to CUPS.

        Raises:
            ValidationError: copy count out of range; nothing is submitted.
            DispatchFailure: ``lpr`` failed. Not retried.
        """
        self.validate_copies(job.copies)
        target, display = self.resolve_printer(job.printer)
        try:
            self._cups.submit(job.source, printer=target, copies=job.copies, options=job.options)
        except CupsCommandError as exc:
            raise DispatchFailure(
                f"Failed to print: {exc.message}",
                detail={"printer": display, "command": exc.command},
            ) from exc
        log.info("job.dispatched", printer=display, copies=job.copies, options=job.options.raw)
        return DispatchReceipt(printer_name=display, copies=job.copies, source=job.source)
