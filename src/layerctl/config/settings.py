"""LayerctlSettings: one frozen object built once per CLI run.

Sources, strongest first: CLI flags, ``LAYERCTL_*`` environment variables
(``LAYERCTL_DOCTOR__HEURISTICS=false`` reaches a nested field), the
``[scopes]`` and ``[doctor]`` tables of ``layerctl.toml``, then the defaults
in :mod:`layerctl.config.models`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from layerctl.config.discovery import find_config
from layerctl.config.models import DoctorConfig, ScopesConfig

log = structlog.get_logger(__name__)

TOML_SECTIONS = ("scopes", "doctor")


def read_toml_sections(path: Path) -> dict[str, Any]:
    """Return the known tables of *path*; other top-level keys are dropped.

    Raises:
        click.ClickException: The file is not valid TOML.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc

    unknown = sorted(set(data) - set(TOML_SECTIONS))
    if unknown:
        log.warning("config.unknown_sections", path=str(path), sections=unknown)
    return {k: v for k, v in data.items() if k in TOML_SECTIONS}


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Feeds the discovered ``layerctl.toml`` into pydantic-settings."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._sections = read_toml_sections(toml_path) if toml_path else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._sections.get(field_name), field_name, field_name in self._sections

    def __call__(self) -> dict[str, Any]:
        return dict(self._sections)


# pydantic-settings builds sources from the class, so the path found by
# from_cli() is handed over per thread for the duration of one construction.
_pending = threading.local()


class LayerctlSettings(BaseSettings):
    """Resolved settings for one layerctl invocation.

    Attributes:
        cwd: Directory scope discovery starts from (``-C``).
        home: Home directory; holds the user scope and bounds every walk-up.
        config_path: The ``layerctl.toml`` in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "LAYERCTL_",
        "env_nested_delimiter": "__",
    }

    cwd: Path = Field(default_factory=Path.cwd)
    home: Path = Field(default_factory=Path.home)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    scopes: ScopesConfig = Field(default_factory=ScopesConfig)
    doctor: DoctorConfig = Field(default_factory=DoctorConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_pending, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        cwd: Path | None = None,
        home: Path | None = None,
        **cli_flags: Any,
    ) -> LayerctlSettings:
        """Build settings for a run started in *cwd*.

        An explicit *config_path* (``--config``) must exist. Otherwise
        ``layerctl.toml`` is searched from *cwd* upward, stopping at *home*.

        Raises:
            click.ClickException: *config_path* is missing or a TOML file
                is malformed.
        """
        start = cwd or Path.cwd()
        home = home or Path.home()
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(start, stop_at=home)

        _pending.toml_path = toml_path
        try:
            return cls(cwd=start, home=home, config_path=toml_path, **cli_flags)
        finally:
            _pending.toml_path = None
