"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from layerctl.config.logging import bind_run_context, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger("layerctl")
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)
    structlog.contextvars.clear_contextvars()


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("layerctl").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_default_is_warning(self) -> None:
        configure_logging()
        assert logging.getLogger("layerctl").level == logging.WARNING

    def test_quiet_only_errors(self) -> None:
        configure_logging(quiet=True)
        assert logging.getLogger("layerctl").level == logging.ERROR

    def test_verbose_beats_quiet(self) -> None:
        configure_logging(verbose=True, quiet=True)
        assert logging.getLogger("layerctl").level == logging.DEBUG

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("layerctl.test")
        log.warning("json test", answer=42)
        captured = capfd.readouterr()
        assert captured.out == ""
        parsed = json.loads(captured.err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "layerctl.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("layerctl.infrastructure.loader").debug("loaded")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "loaded"
        assert parsed["level"] == "debug"

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("ruamel").debug("parser noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=True)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1


class TestRunContext:
    def test_context_added_to_log_lines(
        self, tmp_path: Path, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(log_json=True)
        bind_run_context(cwd=tmp_path, config_path=None)
        structlog.get_logger("layerctl.test").warning("with context")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["cwd"] == str(tmp_path)
        assert parsed["config"] is None
