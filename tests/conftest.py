"""Shared pytest fixtures and test helpers for layerctl tests."""

from __future__ import annotations

from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from layerctl.domain.config import ScopeConfig
from layerctl.domain.scopes import ScopeLevel
from layerctl.services.telemetry import disable_telemetry

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    yield
    disable_telemetry()


@pytest.fixture
def home_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated home directory; ``Path.home()`` points here."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("LAYERCTL_CONFIG", raising=False)
    return home


@pytest.fixture
def project_dir(home_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A project directory beneath the isolated home, used as CWD."""
    project = home_dir / "work" / "app"
    project.mkdir(parents=True)
    monkeypatch.chdir(project)
    return project


def write_layer(directory: Path, filename: str, content: str) -> Path:
    """Write a layer file into a scope directory, creating it if needed."""
    path = directory / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def scope_config(scope: ScopeLevel | str, **layers: object) -> ScopeConfig:
    """Build a ScopeConfig from layer dicts (camelCase or snake_case keys)."""
    level = ScopeLevel(scope)
    return ScopeConfig.model_validate(
        {"scope": level, "base_path": f"/{level.value}/.claude", **layers}
    )
