"""BaseService: foundation for print services.

Every service receives a :class:`PrintBackend` at construction time and
holds no other state, so one instance can serve concurrent sessions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from cupsmcp.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from cupsmcp.config.settings import CupsSettings
    from cupsmcp.domain.errors import PrintPipelineError
    from cupsmcp.infrastructure.backend import PrintBackend

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class PrintService(BaseService):
            def print_file(self, file_path: str, ...) -> ServiceResult:
                try:
                    ...
                except PrintPipelineError as exc:
                    return self._failure("print_file", exc)
    """

    def __init__(self, backend: PrintBackend) -> None:
        self._backend = backend

    @property
    def settings(self) -> CupsSettings:
        return self._backend.settings

    @staticmethod
    def _failure(
        op: str,
        exc: PrintPipelineError,
        *,
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Translate a pipeline exception into a failed ServiceResult."""
        logger.info("%s failed: [%s] %s", op, exc.code, exc.message)
        return ServiceResult(
            ok=False,
            op=op,
            data=data or {},
            warnings=warnings or [],
            error=ServiceError.from_exception(exc),
        )
