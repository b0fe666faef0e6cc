"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from cupsmcp.config.logging import configure_logging, session_context


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    names = ("cupsmcp", "uvicorn.access", "uvicorn.error", "mcp", "sse_starlette")
    levels = {name: logging.getLogger(name).level for name in names}
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("cupsmcp").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("cupsmcp").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("cupsmcp.test")
        log.warning("render.fallback", kind="markdown")
        captured = capfd.readouterr()
        assert captured.out == ""
        parsed = json.loads(captured.err.strip())
        assert parsed["event"] == "render.fallback"
        assert parsed["kind"] == "markdown"
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "cupsmcp.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)

        logging.getLogger("cupsmcp.infrastructure.cups").debug("Running lpstat -p -d")

        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Running lpstat -p -d"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "cupsmcp.infrastructure.cups"

    def test_quiet_mode_hides_debug(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)

        structlog.get_logger("cupsmcp.test").info("upload.materialized", size=10)
        logging.getLogger("uvicorn.access").info("GET /health 200")

        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=False, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1

    def test_verbose_raises_library_levels(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("mcp").level == logging.INFO
        assert logging.getLogger("uvicorn.access").level == logging.DEBUG


class TestSessionContext:
    def test_binds_session_id(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("cupsmcp.test")

        with session_context("a" * 32):
            log.info("job.dispatched", printer="office")
        log.info("server.idle")

        inside, outside = (json.loads(line) for line in capfd.readouterr().err.splitlines())
        assert inside["session_id"] == "a" * 32
        assert "session_id" not in outside
