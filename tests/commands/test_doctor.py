"""Tests for the doctor command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from layerctl.cli import cli
from tests.conftest import write_layer


@pytest.fixture
def layered_project(project_dir: Path, tmp_path: Path) -> Path:
    """System security rules, project forbidden rules, a goal without criteria."""
    system = tmp_path / "system"
    write_layer(system, "rules.yaml", "security:\n  - no secrets\n")
    claude = project_dir / ".claude"
    write_layer(claude, "rules.yaml", "forbidden:\n  - delete prod db\n")
    write_layer(claude, "goals.md", "---\ncurrent: ship login\n---\nShip it.\n")
    (project_dir / "layerctl.toml").write_text(
        f'[scopes]\nsystem_dir = "{system.as_posix()}"\n', encoding="utf-8"
    )
    return project_dir


class TestDoctorCommand:
    def test_human_output(self, cli_runner: CliRunner, layered_project: Path) -> None:
        result = cli_runner.invoke(cli, ["doctor"])
        assert result.exit_code == 0, result.output
        assert "Health score: 95/100" in result.output
        assert "goals-no-criteria" not in result.output
        assert "Current goals have no success criteria" in result.output
        assert "Quick wins" in result.output

    def test_json_output(self, cli_runner: CliRunner, layered_project: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "doctor"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["ok"] is True
        assert payload["op"] == "doctor"
        data = payload["data"]
        assert data["health_score"] == 95
        assert data["assessment"] == "healthy"
        assert data["scopes"] == ["project", "system"]

    def test_cwd_option(self, cli_runner: CliRunner, layered_project: Path, home_dir: Path) -> None:
        elsewhere = home_dir / "elsewhere"
        elsewhere.mkdir()
        result = cli_runner.invoke(cli, ["-C", str(elsewhere), "--json", "doctor"])
        assert result.exit_code == 1

        result = cli_runner.invoke(cli, ["-C", str(layered_project), "--json", "doctor"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data"]["health_score"] == 95

    def test_errors_only(self, cli_runner: CliRunner, layered_project: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "doctor", "--errors-only"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["conflicts"] == []
        assert data["counts"]["warnings"] == 1

    def test_min_severity(self, cli_runner: CliRunner, layered_project: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "doctor", "--min-severity", "warning"])
        assert result.exit_code == 0
        ids = [c["id"] for c in json.loads(result.stdout)["data"]["conflicts"]]
        assert ids == ["goals-no-criteria"]

    def test_no_recommendations(self, cli_runner: CliRunner, layered_project: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "doctor", "--no-recommendations"])
        assert result.exit_code == 0
        assert "recommendations" not in json.loads(result.stdout)["data"]

    def test_quiet_lists_conflict_ids(self, cli_runner: CliRunner, layered_project: Path) -> None:
        result = cli_runner.invoke(cli, ["-q", "doctor"])
        assert result.exit_code == 0
        assert result.output.strip() == "goals-no-criteria"

    def test_verbose_shows_telemetry(self, cli_runner: CliRunner, layered_project: Path) -> None:
        result = cli_runner.invoke(cli, ["-v", "doctor"])
        assert result.exit_code == 0, result.output
        assert "DoctorService.doctor" in result.output
        assert "detect_conflicts" in result.output

    def test_load_warning_reported(self, cli_runner: CliRunner, layered_project: Path) -> None:
        write_layer(layered_project / ".claude", "tools.yaml", "mcpServers: [unclosed\n")
        result = cli_runner.invoke(cli, ["doctor"])
        assert result.exit_code == 0
        assert "WARNING: Skipped project tools layer" in result.output


class TestDoctorErrors:
    def test_no_scopes_exit_code(self, cli_runner: CliRunner, project_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["doctor"])
        assert result.exit_code == 1
        assert "No configuration scope directories found" in result.output

    def test_invalid_severity_rejected_by_click(
        self, cli_runner: CliRunner, layered_project: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["doctor", "--min-severity", "fatal"])
        assert result.exit_code == 2

    def test_examples(self, cli_runner: CliRunner, project_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["doctor", "--examples"])
        assert result.exit_code == 0
        assert "layerctl doctor --errors-only" in result.output
