"""PrintService: the print pipeline and printer management.

Pipelines:
  upload_and_print: INTAKE → RENDER → CONFIRM → DISPATCH → CLEANUP
  print_file:       POLICY → RENDER → CONFIRM → DISPATCH → CLEANUP

Every artifact goes into an :class:`ArtifactScope` as soon as it exists, so
cleanup happens on every exit path before the result is returned.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cupsmcp.domain.errors import DispatchFailure, FileNotFound, PrintPipelineError, ValidationError
from cupsmcp.domain.options import PrintOptions
from cupsmcp.domain.pages import AwaitingConfirmation
from cupsmcp.infrastructure.cups import CupsCommandError
from cupsmcp.services.base import BaseService
from cupsmcp.services.confirmation import ConfirmationGate
from cupsmcp.services.dispatch import ArtifactScope, JobDispatcher, PrintJobSpec
from cupsmcp.services.rendering import RenderingGate, RenderOverrides
from cupsmcp.services.result import PrintStatus, ServiceResult

if TYPE_CHECKING:
    from cupsmcp.infrastructure.backend import PrintBackend

# lpadmin accepts any printable characters except space, tab, slash and '#'.
_PRINTER_NAME_RE = re.compile(r"^[^\s/#]{1,127}$")

_PERMISSION_MARKERS = ("permission denied", "not authorized", "forbidden")
_PERMISSION_HINT = (
    "Permission denied. Adding printers needs CUPS admin rights: run as root, "
    "or add the user to the 'lpadmin' group (sudo usermod -aG lpadmin $USER)."
)


class PrintService(BaseService):
    """Print operations exposed to the CLI and MCP tools."""

    def __init__(self, backend: PrintBackend) -> None:
        super().__init__(backend)
        self._rendering = RenderingGate(backend)
        self._confirmation = ConfirmationGate(backend)
        self._dispatcher = JobDispatcher(backend)

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def upload_and_print(
        self,
        filename: str,
        content: str,
        *,
        encoding: str = "base64",
        printer: str | None = None,
        copies: int = 1,
        options: str | None = None,
        skip_confirmation: bool = False,
        render: RenderOverrides | None = None,
    ) -> ServiceResult:
        """Quarantine uploaded content, then render, confirm, and print it."""
        op = "upload_and_print"
        warnings: list[str] = []
        try:
            with ArtifactScope() as scope:
                upload = scope.track(self._backend.intake.intake(filename, content, encoding))
                return self._run_pipeline(
                    op,
                    scope,
                    upload.path,
                    label=filename,
                    printer=printer,
                    copies=copies,
                    options=options,
                    skip_confirmation=skip_confirmation,
                    render=render,
                    warnings=warnings,
                )
        except PrintPipelineError as exc:
            return self._failure(op, exc, data={"file": filename}, warnings=warnings)

    def print_file(
        self,
        file_path: str,
        *,
        printer: str | None = None,
        copies: int = 1,
        options: str | None = None,
        skip_confirmation: bool = False,
        render: RenderOverrides | None = None,
    ) -> ServiceResult:
        """Print a file that lives on the server, subject to the access policy."""
        op = "print_file"
        warnings: list[str] = []
        try:
            decision = self._backend.policy.evaluate(file_path)
            decision.raise_if_denied()
            source = decision.candidate.real
            if not source.is_file():
                raise FileNotFound(f"File not found: {file_path}", detail={"path": file_path})
            with ArtifactScope() as scope:
                return self._run_pipeline(
                    op,
                    scope,
                    source,
                    label=file_path,
                    printer=printer,
                    copies=copies,
                    options=options,
                    skip_confirmation=skip_confirmation,
                    render=render,
                    warnings=warnings,
                )
        except PrintPipelineError as exc:
            return self._failure(op, exc, data={"file": file_path}, warnings=warnings)

    def _run_pipeline(
        self,
        op: str,
        scope: ArtifactScope,
        source: Path,
        *,
        label: str,
        printer: str | None,
        copies: int,
        options: str | None,
        skip_confirmation: bool,
        render: RenderOverrides | None,
        warnings: list[str],
    ) -> ServiceResult:
        parsed = PrintOptions.parse(options)

        prepared = self._rendering.prepare(source, render)
        if prepared.rendered is not None:
            scope.track(prepared.rendered)
        if prepared.warning:
            warnings.append(prepared.warning)

        outcome = self._confirmation.check(
            prepared.final_path, parsed, skip_confirmation=skip_confirmation
        )
        if isinstance(outcome, AwaitingConfirmation):
            metrics = outcome.metrics
            duplex_note = ", duplex" if metrics.duplex else ""
            warnings.append(
                f"Confirmation required for {label}: {metrics.pages} pages "
                f"({metrics.sheets} sheets{duplex_note}) exceeds the threshold of "
                f"{outcome.threshold} sheets. Call again with skip_confirmation=true to print."
            )
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "status": PrintStatus.AWAITING_CONFIRMATION,
                    "file": label,
                    "pages": metrics.pages,
                    "sheets": metrics.sheets,
                    "duplex": metrics.duplex,
                    "threshold": outcome.threshold,
                    "render_kind": prepared.render_kind,
                },
                warnings=list(warnings),
            )

        receipt = self._dispatcher.dispatch(
            PrintJobSpec(source=prepared.final_path, printer=printer, copies=copies, options=parsed)
        )
        data: dict[str, Any] = {
            "status": PrintStatus.PRINTED,
            "file": label,
            "printer": receipt.printer_name,
            "copies": receipt.copies,
            "options": parsed.raw or None,
            "render_kind": prepared.render_kind,
        }
        if outcome.metrics is not None:
            data["pages"] = outcome.metrics.pages
            data["sheets"] = outcome.metrics.sheets
        return ServiceResult(ok=True, op=op, data=data, warnings=list(warnings))

    # ------------------------------------------------------------------
    # Access policy diagnostics
    # ------------------------------------------------------------------

    def check_path(self, file_path: str) -> ServiceResult:
        """Run the access policy on *file_path* without printing anything."""
        op = "check_path"
        decision = self._backend.policy.evaluate(file_path)
        candidate = decision.candidate
        data: dict[str, Any] = {
            "path": file_path,
            "absolute": str(candidate.absolute),
            "real": str(candidate.real),
            "allowed": decision.allowed,
        }
        if decision.matched_root is not None:
            data["matched_root"] = str(decision.matched_root)
        try:
            decision.raise_if_denied()
        except PrintPipelineError as exc:
            return self._failure(op, exc, data=data)
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Printer management
    # ------------------------------------------------------------------

    def list_printers(self) -> ServiceResult:
        """Printer and queue status, passed through from ``lpstat`` unmodified."""
        op = "list_printers"
        cups = self._backend.cups
        try:
            output = cups.list_printers()
        except CupsCommandError as exc:
            return self._failure(
                op,
                DispatchFailure(f"Failed to list printers on {cups.display}: {exc.message}"),
                data={"server": cups.display},
            )
        return ServiceResult(ok=True, op=op, data={"server": cups.display, "output": output})

    def add_printer(
        self,
        printer_name: str,
        *,
        local_name: str | None = None,
        set_default: bool = False,
    ) -> ServiceResult:
        """Make a queue of the remote CUPS server available locally."""
        op = "add_printer"
        cups = self._backend.cups
        local = local_name or printer_name
        try:
            if not self.settings.cups.server:
                raise ValidationError(
                    "Cannot add printer: no CUPS server configured (set cups.server)."
                )
            for name in (printer_name, local):
                if not _PRINTER_NAME_RE.fullmatch(name):
                    raise ValidationError(
                        f"Invalid printer name {name!r}: no spaces, '/' or '#' allowed.",
                        detail={"printer": name},
                    )
            try:
                uri = cups.add_printer(printer_name, local)
            except CupsCommandError as exc:
                lowered = exc.message.lower()
                if any(marker in lowered for marker in _PERMISSION_MARKERS):
                    raise DispatchFailure(_PERMISSION_HINT, detail={"printer": local}) from exc
                raise DispatchFailure(
                    f"Failed to add printer: {exc.message}", detail={"printer": local}
                ) from exc
        except PrintPipelineError as exc:
            return self._failure(op, exc, data={"printer": local})

        warnings: list[str] = []
        is_default = False
        if set_default:
            try:
                cups.set_default(local)
                is_default = True
            except CupsCommandError as exc:
                warnings.append(f"Could not set {local} as default: {exc.message}")

        return ServiceResult(
            ok=True,
            op=op,
            data={"printer": local, "uri": uri, "default": is_default},
            warnings=warnings,
        )
