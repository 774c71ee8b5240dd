"""Tests for LayerctlSettings: unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from layerctl.config.settings import LayerctlSettings, read_toml_sections


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LAYERCTL_CONFIG", "LAYERCTL_DOCTOR__HEURISTICS", "LAYERCTL_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = LayerctlSettings.from_cli(cwd=tmp_path, home=tmp_path)
        assert settings.cwd == tmp_path
        assert settings.home == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.verbose is False
        assert settings.scopes.task_dir == ".claude-task"
        assert settings.doctor.heuristics is True

    def test_frozen(self, tmp_path: Path) -> None:
        settings = LayerctlSettings.from_cli(cwd=tmp_path, home=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "layerctl.toml").write_text(
            '[scopes]\nsystem_dir = "/etc/claude"\n[doctor]\nheuristics = false\n'
        )
        settings = LayerctlSettings.from_cli(cwd=tmp_path, home=tmp_path)
        assert settings.scopes.system_dir == "/etc/claude"
        assert settings.scopes.project_dir == ".claude"
        assert settings.doctor.heuristics is False
        assert settings.config_path == (tmp_path / "layerctl.toml").resolve()

    def test_discovered_from_subdirectory(self, tmp_path: Path) -> None:
        (tmp_path / "layerctl.toml").write_text("[doctor]\nhealthy_threshold = 90\n")
        child = tmp_path / "src"
        child.mkdir()
        settings = LayerctlSettings.from_cli(cwd=child, home=tmp_path)
        assert settings.doctor.healthy_threshold == 90

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "my.toml"
        custom.parent.mkdir()
        custom.write_text("[doctor]\nrecommendations = false\n")
        settings = LayerctlSettings.from_cli(config_path=str(custom), cwd=tmp_path, home=tmp_path)
        assert settings.doctor.recommendations is False
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "layerctl.toml").write_text("[doctor\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            LayerctlSettings.from_cli(cwd=tmp_path, home=tmp_path)


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "layerctl.toml").write_text("[doctor]\nheuristics = false\n")
        monkeypatch.setenv("LAYERCTL_DOCTOR__HEURISTICS", "true")
        settings = LayerctlSettings.from_cli(cwd=tmp_path, home=tmp_path)
        assert settings.doctor.heuristics is True

    def test_cli_flags_beat_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAYERCTL_VERBOSE", "false")
        settings = LayerctlSettings.from_cli(cwd=tmp_path, home=tmp_path, verbose=True)
        assert settings.verbose is True


class TestTomlSections:
    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="Config file not found"):
            LayerctlSettings.from_cli(
                config_path=str(tmp_path / "absent.toml"), cwd=tmp_path, home=tmp_path
            )

    def test_unknown_sections_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "layerctl.toml").write_text(
            "[output]\ncolor = false\n[doctor]\nattention_threshold = 40\n"
        )
        settings = LayerctlSettings.from_cli(cwd=tmp_path, home=tmp_path)
        assert settings.doctor.attention_threshold == 40

    def test_read_toml_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "layerctl.toml"
        path.write_text('title = "x"\n[scopes]\ninclude_task = false\n')
        assert read_toml_sections(path) == {"scopes": {"include_task": False}}
