"""Tests for the root layerctl CLI."""

from pathlib import Path

from click.testing import CliRunner

from layerctl import __version__
from layerctl.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "layerctl" in result.output
    for name in ("doctor", "show", "sources", "scopes"):
        assert name in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner, project_dir: Path) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


# --- Global flags ---


def test_json_flag_accepted(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--json", "--version"])
    assert result.exit_code == 0


def test_quiet_flag_accepted(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["-q", "--version"])
    assert result.exit_code == 0


def test_log_json_flag_accepted(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--log-json", "--version"])
    assert result.exit_code == 0


def test_missing_cwd_rejected(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["-C", str(tmp_path / "nope"), "scopes"])
    assert result.exit_code == 2


def test_explicit_config_file(cli_runner: CliRunner, project_dir: Path, tmp_path: Path) -> None:
    system = tmp_path / "sys"
    (system).mkdir()
    (system / "rules.yaml").write_text("security: [audit]\n", encoding="utf-8")
    config = tmp_path / "custom.toml"
    config.write_text(f'[scopes]\nsystem_dir = "{system.as_posix()}"\n', encoding="utf-8")
    result = cli_runner.invoke(cli, ["-q", "-c", str(config), "scopes"])
    assert result.exit_code == 0, result.output
    assert result.output.split() == ["system"]
