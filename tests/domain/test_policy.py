"""Tests for the access policy."""

from __future__ import annotations

from pathlib import Path

import pytest

from cupsmcp.domain.errors import AccessDenied
from cupsmcp.domain.policy import (
    AccessPolicy,
    DenyReason,
    PathCandidate,
    Resolved,
    Unresolved,
    has_hidden_component,
)


@pytest.fixture
def docs(tmp_path: Path) -> Path:
    root = tmp_path / "docs"
    root.mkdir()
    return root


@pytest.fixture
def policy(docs: Path) -> AccessPolicy:
    return AccessPolicy([docs], [docs / "private", "/etc"])


class TestHiddenComponents:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/home/u/.ssh/id_rsa", True),
            ("/home/u/docs/.env", True),
            ("/home/u/docs/report.pdf", False),
            ("/home/u/docs/../docs/report.pdf", False),
            ("/home/u/docs/./report.pdf", False),
        ],
    )
    def test_has_hidden_component(self, path: str, expected: bool) -> None:
        assert has_hidden_component(Path(path)) is expected

    def test_hidden_file_under_allowed_root(self, policy: AccessPolicy, docs: Path) -> None:
        (docs / ".secret").write_text("x")
        decision = policy.evaluate(str(docs / ".secret"))
        assert not decision.allowed
        assert decision.reason is DenyReason.HIDDEN_COMPONENT

    def test_hidden_directory_under_allowed_root(self, policy: AccessPolicy, docs: Path) -> None:
        decision = policy.evaluate(str(docs / ".git" / "config"))
        assert decision.reason is DenyReason.HIDDEN_COMPONENT

    def test_symlink_to_hidden_target(self, policy: AccessPolicy, docs: Path) -> None:
        hidden = docs / ".hidden"
        hidden.mkdir()
        (hidden / "keys.txt").write_text("k")
        link = docs / "innocent.txt"
        link.symlink_to(hidden / "keys.txt")

        decision = policy.evaluate(str(link))

        assert decision.reason is DenyReason.HIDDEN_COMPONENT
        assert "resolves to a hidden" in decision.message


class TestRoots:
    def test_allowed_file(self, policy: AccessPolicy, docs: Path) -> None:
        (docs / "report.pdf").write_bytes(b"%PDF-1.4")
        decision = policy.evaluate(str(docs / "report.pdf"))
        assert decision.allowed
        assert decision.matched_root == docs

    def test_deny_wins_over_allow(self, policy: AccessPolicy, docs: Path) -> None:
        private = docs / "private"
        private.mkdir()
        (private / "salary.pdf").write_bytes(b"%PDF-1.4")

        decision = policy.evaluate(str(private / "salary.pdf"))

        assert decision.reason is DenyReason.DENIED_ANCESTOR
        assert decision.matched_root == private

    def test_outside_allowlist(self, policy: AccessPolicy, tmp_path: Path) -> None:
        decision = policy.evaluate(str(tmp_path / "elsewhere.pdf"))
        assert decision.reason is DenyReason.OUTSIDE_ALLOWLIST
        assert "security.allowed_paths" in decision.message

    def test_system_root(self, policy: AccessPolicy) -> None:
        decision = policy.evaluate("/etc/passwd")
        assert decision.reason is DenyReason.DENIED_ANCESTOR

    def test_dotdot_escape(self, policy: AccessPolicy, docs: Path) -> None:
        decision = policy.evaluate(str(docs / ".." / "outside.pdf"))
        assert decision.reason is DenyReason.OUTSIDE_ALLOWLIST

    def test_symlink_escaping_allowed_root(
        self, policy: AccessPolicy, docs: Path, tmp_path: Path
    ) -> None:
        target = tmp_path / "outside.pdf"
        target.write_bytes(b"%PDF-1.4")
        link = docs / "link.pdf"
        link.symlink_to(target)

        assert policy.evaluate(str(link)).reason is DenyReason.OUTSIDE_ALLOWLIST

    def test_symlinked_root_matches_both_forms(self, tmp_path: Path) -> None:
        real_root = tmp_path / "real"
        real_root.mkdir()
        (real_root / "a.pdf").write_bytes(b"%PDF-1.4")
        alias = tmp_path / "alias"
        alias.symlink_to(real_root)
        policy = AccessPolicy([alias])

        assert policy.evaluate(str(alias / "a.pdf")).allowed
        assert policy.evaluate(str(real_root / "a.pdf")).allowed

    def test_no_roots_configured(self, tmp_path: Path) -> None:
        decision = AccessPolicy([]).evaluate(str(tmp_path / "a.pdf"))
        assert decision.reason is DenyReason.OUTSIDE_ALLOWLIST
        assert "none configured" in decision.message

    def test_home_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / "Documents").mkdir()
        policy = AccessPolicy(["~/Documents"])
        assert policy.allowed_roots == (tmp_path / "Documents",)
        assert policy.evaluate("~/Documents/note.txt").allowed

    def test_nul_byte_denied_even_under_allowed_root(
        self, policy: AccessPolicy, docs: Path
    ) -> None:
        decision = policy.evaluate(str(docs / "a\x00.pdf"))
        assert decision.reason is DenyReason.INVALID_PATH
        with pytest.raises(AccessDenied) as excinfo:
            decision.raise_if_denied()
        assert excinfo.value.reason == "invalid_path"


class TestCandidate:
    def test_existing_path_resolves(self, docs: Path) -> None:
        (docs / "a.txt").write_text("a")
        candidate = PathCandidate.from_raw(str(docs / "a.txt"))
        assert isinstance(candidate.resolution, Resolved)
        assert candidate.real == (docs / "a.txt").resolve()

    def test_missing_path_falls_back_to_absolute(self, docs: Path) -> None:
        candidate = PathCandidate.from_raw(str(docs / "missing.txt"))
        assert isinstance(candidate.resolution, Unresolved)
        assert candidate.real == candidate.absolute

    def test_nul_byte_is_unresolved(self, docs: Path) -> None:
        candidate = PathCandidate.from_raw(str(docs / "a\x00.pdf"))
        assert isinstance(candidate.resolution, Unresolved)
        assert candidate.real == candidate.absolute


class TestRaiseIfDenied:
    def test_allowed_does_not_raise(self, policy: AccessPolicy, docs: Path) -> None:
        policy.evaluate(str(docs / "a.pdf")).raise_if_denied()

    def test_denied_raises_with_reason(self, policy: AccessPolicy) -> None:
        with pytest.raises(AccessDenied) as excinfo:
            policy.evaluate("/etc/shadow").raise_if_denied()
        assert excinfo.value.code == "ACCESS_DENIED"
        assert excinfo.value.detail == {"reason": "denied_ancestor", "path": "/etc/shadow"}
