"""Temporary artifacts created while preparing a print job.

Each artifact owns exactly one private temp directory holding exactly one
file. Removal is file first, then directory, and is safe to repeat.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from cupsmcp.domain.errors import CleanupFailure

log = structlog.get_logger(__name__)

UPLOAD_DIR_PREFIX = "cupsmcp-upload-"
RENDER_DIR_PREFIX = "cupsmcp-render-"


def make_private_dir(prefix: str) -> Path:
    """Create a fresh, uniquely named temp directory readable only by us."""
    return Path(tempfile.mkdtemp(prefix=prefix))


@dataclass
class TempArtifact:
    """A file inside a directory that belongs to one pipeline invocation."""

    directory: Path
    path: Path
    removed: bool = field(default=False, init=False)

    def remove(self) -> None:
        """Delete the file, then its directory.

        Raises:
            CleanupFailure: if either could not be removed. The artifact is
                still marked removed; a second call is a no-op.
        """
        if self.removed:
            return
        self.removed = True
        errors: list[str] = []
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            errors.append(f"{self.path}: {exc}")
        try:
            self.directory.rmdir()
        except FileNotFoundError:
            pass
        except OSError as exc:
            errors.append(f"{self.directory}: {exc}")
        if errors:
            raise CleanupFailure(
                f"Failed to remove temporary artifact: {'; '.join(errors)}",
                detail={"path": str(self.path)},
            )

    def cleanup(self) -> None:
        """Best-effort :meth:`remove`; failures are logged, never raised."""
        try:
            self.remove()
        except CleanupFailure as exc:
            log.warning("artifact.cleanup_failed", path=str(self.path), error=exc.message)


@dataclass
class UploadedArtifact(TempArtifact):
    """Quarantined upload. Trusted by construction, never policy-checked."""

    original_name: str = ""
    size: int = 0


@dataclass
class RenderedArtifact(TempArtifact):
    """A PDF produced by a renderer for a single invocation."""

    kind: str = ""
