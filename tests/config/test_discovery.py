"""Tests for config file discovery."""

from pathlib import Path

import pytest

from cupsmcp.config.discovery import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    find_config,
    user_config_path,
)


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text('[cups]\nserver = "print.lan"\n')
        assert find_config(tmp_path) == config_file.resolve()

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file.resolve()

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom.toml"
        custom.write_text("")
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))
        assert find_config(tmp_path) == custom

    def test_env_var_pointing_nowhere(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None

    def test_user_config_fallback(self, tmp_path: Path) -> None:
        user_file = user_config_path()
        user_file.parent.mkdir(parents=True)
        user_file.write_text("")
        child = tmp_path / "project"
        child.mkdir()
        assert user_file == tmp_path / "xdg" / "cupsmcp" / CONFIG_FILENAME
        assert find_config(child) == user_file

    def test_project_file_beats_user_file(self, tmp_path: Path) -> None:
        user_file = user_config_path()
        user_file.parent.mkdir(parents=True)
        user_file.write_text("")
        project_file = tmp_path / CONFIG_FILENAME
        project_file.write_text("")
        assert find_config(tmp_path) == project_file.resolve()

    def test_env_var_expands_user(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / "mine.toml").write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, "~/mine.toml")
        assert find_config(tmp_path) == tmp_path / "mine.toml"
