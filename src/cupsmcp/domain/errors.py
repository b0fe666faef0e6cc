"""Print pipeline error taxonomy.

Every stage fails fast by raising a :class:`PrintPipelineError` subclass.
The service operation boundary catches it, lets the artifact scope clean
up, and turns it into a ``ServiceResult`` carrying :attr:`code`, the
message, and :attr:`detail`.

Waiting for page-count confirmation is deliberately *not* an error.
"""

from __future__ import annotations

from typing import Any


class PrintPipelineError(Exception):
    """Base class for all caller-facing pipeline failures."""

    code = "PIPELINE_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = dict(detail or {})


class ValidationError(PrintPipelineError):
    """Bad extension, oversized upload, bad encoding, or copies over limit.

    Always raised before any side effect of the failing stage.
    """

    code = "VALIDATION_ERROR"


class AccessDenied(PrintPipelineError):
    """The access policy rejected a server-side path."""

    code = "ACCESS_DENIED"

    def __init__(self, message: str, *, reason: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message, detail={"reason": reason, **(detail or {})})
        self.reason = reason


class FileNotFound(PrintPipelineError):
    code = "FILE_NOT_FOUND"


class RenderError(PrintPipelineError):
    """A renderer failed and fallback-on-render-error is disabled."""

    code = "RENDER_ERROR"


class DispatchFailure(PrintPipelineError):
    """A CUPS command (lpr, lpstat, lpadmin) failed. Never retried."""

    code = "DISPATCH_FAILED"


class CleanupFailure(PrintPipelineError):
    """An artifact could not be removed. Logged only, never surfaced."""

    code = "CLEANUP_FAILED"
