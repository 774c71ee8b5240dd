"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, layerctl.toml only contains
overrides. A project needs no config file at all to run ``layerctl doctor``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- layerctl.toml sections ---


class ScopesConfig(BaseModel):
    """[scopes] section: where each scope's directory lives."""

    model_config = {"frozen": True}

    task_dir: str = ".claude-task"
    project_dir: str = ".claude"
    user_dir: str = ".claude"
    system_dir: str | None = None
    include_task: bool = True


class DoctorConfig(BaseModel):
    """[doctor] section."""

    model_config = {"frozen": True}

    heuristics: bool = True
    recommendations: bool = True
    healthy_threshold: int = 80
    attention_threshold: int = 50


class LayerctlConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    scopes: ScopesConfig = Field(default_factory=ScopesConfig)
    doctor: DoctorConfig = Field(default_factory=DoctorConfig)
