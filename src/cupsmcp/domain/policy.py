"""Access policy for server-resident files.

A pure decision function over a caller-supplied path. Checks run in a fixed
order and short-circuit on the first match:

1. NUL bytes (no filesystem can name such a path)
2. hidden component in the absolute form (never overridable)
3. hidden component in the symlink-resolved form, when it differs
4. denied roots
5. allowed roots (no match → outside allow-list)

Denied roots are checked before allowed roots, so a path under both is
denied. Uploaded files never pass through here; their quarantine directory
is trusted by construction.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from cupsmcp.domain.errors import AccessDenied

_RELATIVE_MARKERS = frozenset({".", ".."})


class DenyReason(StrEnum):
    HIDDEN_COMPONENT = "hidden_component"
    DENIED_ANCESTOR = "denied_ancestor"
    OUTSIDE_ALLOWLIST = "outside_allowlist"
    INVALID_PATH = "invalid_path"


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Resolved:
    """Symlink resolution succeeded."""

    real: Path


@dataclass(frozen=True)
class Unresolved:
    """Symlink resolution failed; the absolute form stands in for the real one."""

    absolute: Path
    error: str

    @property
    def real(self) -> Path:
        return self.absolute


Resolution = Resolved | Unresolved


def absolute_form(raw: str) -> Path:
    """Expand ``~`` and make *raw* absolute without touching symlinks."""
    return Path(os.path.abspath(os.path.expanduser(raw)))


def resolve_real(absolute: Path) -> Resolution:
    """Follow symlinks in *absolute*; a missing target, a loop or a NUL byte is Unresolved."""
    try:
        return Resolved(absolute.resolve(strict=True))
    except (OSError, RuntimeError, ValueError) as exc:
        return Unresolved(absolute, str(exc))


@dataclass(frozen=True)
class PathCandidate:
    """A caller-supplied path in raw, absolute, and real forms."""

    raw: str
    absolute: Path
    resolution: Resolution

    @classmethod
    def from_raw(cls, raw: str) -> PathCandidate:
        absolute = absolute_form(raw)
        return cls(raw=raw, absolute=absolute, resolution=resolve_real(absolute))

    @property
    def real(self) -> Path:
        return self.resolution.real


def has_hidden_component(path: Path) -> bool:
    """True if any component of *path* (other than ``.``/``..``) starts with a dot."""
    return any(part.startswith(".") and part not in _RELATIVE_MARKERS for part in path.parts)


# ---------------------------------------------------------------------------
# Decision
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of :meth:`AccessPolicy.evaluate`. Never partially allowed."""

    candidate: PathCandidate
    reason: DenyReason | None = None
    message: str = ""
    matched_root: Path | None = None

    @property
    def allowed(self) -> bool:
        return self.reason is None

    def raise_if_denied(self) -> None:
        if self.reason is not None:
            raise AccessDenied(
                self.message,
                reason=self.reason.value,
                detail={"path": self.candidate.raw},
            )


@dataclass(frozen=True)
class _Root:
    """A configured root, matched in both its absolute and its real form."""

    configured: str
    absolute: Path
    real: Path

    @classmethod
    def from_config(cls, root: Path | str) -> _Root:
        absolute = absolute_form(str(root))
        return cls(configured=str(root), absolute=absolute, real=Path(os.path.realpath(absolute)))

    def contains(self, path: Path) -> bool:
        return path.is_relative_to(self.absolute) or path.is_relative_to(self.real)


class AccessPolicy:
    """Allow/deny/dotfile rules for server-side print paths.

    Roots are normalized once at construction; :meth:`evaluate` is
    deterministic for a given filesystem state and never writes.
    """

    def __init__(
        self,
        allowed_roots: Iterable[Path | str],
        denied_roots: Iterable[Path | str] = (),
    ) -> None:
        self._allowed = tuple(_Root.from_config(r) for r in allowed_roots)
        self._denied = tuple(_Root.from_config(r) for r in denied_roots)

    @property
    def allowed_roots(self) -> tuple[Path, ...]:
        return tuple(r.absolute for r in self._allowed)

    @property
    def denied_roots(self) -> tuple[Path, ...]:
        return tuple(r.absolute for r in self._denied)

    def evaluate(self, raw_path: str) -> AccessDecision:
        candidate = PathCandidate.from_raw(raw_path)

        if "\x00" in raw_path:
            return AccessDecision(
                candidate,
                DenyReason.INVALID_PATH,
                "Access denied: path contains a NUL byte.",
            )

        if has_hidden_component(candidate.absolute):
            return AccessDecision(
                candidate,
                DenyReason.HIDDEN_COMPONENT,
                "Access denied: dotfiles and hidden directories cannot be printed. "
                f'Path "{raw_path}" contains hidden components.',
            )

        if candidate.real != candidate.absolute and has_hidden_component(candidate.real):
            return AccessDecision(
                candidate,
                DenyReason.HIDDEN_COMPONENT,
                "Access denied: dotfiles and hidden directories cannot be printed. "
                f'Path "{raw_path}" resolves to a hidden file or directory.',
            )

        for root in self._denied:
            if root.contains(candidate.real):
                return AccessDecision(
                    candidate,
                    DenyReason.DENIED_ANCESTOR,
                    f'Access denied: "{raw_path}" is in a restricted directory '
                    f"({root.configured}).",
                    matched_root=root.absolute,
                )

        for root in self._allowed:
            if root.contains(candidate.real):
                return AccessDecision(candidate, matched_root=root.absolute)

        allowed = ", ".join(r.configured for r in self._allowed) or "none configured"
        return AccessDecision(
            candidate,
            DenyReason.OUTSIDE_ALLOWLIST,
            f'Access denied: "{raw_path}" is outside the allowed directories '
            f"({allowed}). Add a root to security.allowed_paths to grant access.",
        )
