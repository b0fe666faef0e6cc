"""ServiceResult: what every PrintService operation hands back.

The CLI and the MCP adapter both consume this type; pipeline exceptions
never cross the service boundary. A print request ends in one of three
ways: printed, halted for page-count confirmation (still ``ok``), or
failed with a :class:`ServiceError`.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from cupsmcp.domain.errors import PrintPipelineError


class PrintStatus(StrEnum):
    """``data["status"]`` of a successful print operation."""

    PRINTED = "printed"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class ServiceError(BaseModel):
    """Caller-facing error: a stable code, a readable message, structured detail."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: PrintPipelineError) -> ServiceError:
        return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: False only when the operation failed.
        op: Operation name, e.g. ``"upload_and_print"``.
        data: Operation payload; print operations carry ``status``.
        warnings: Non-fatal issues, such as a render that fell back to the
            original file.
        error: Set exactly when ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @property
    def status(self) -> PrintStatus | None:
        try:
            return PrintStatus(self.data.get("status"))
        except ValueError:
            return None

    @property
    def awaiting_confirmation(self) -> bool:
        return self.status is PrintStatus.AWAITING_CONFIRMATION
