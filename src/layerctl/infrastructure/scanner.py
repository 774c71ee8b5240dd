"""Scope directory discovery.

Finds the on-disk directory for each scope:

- task: ``<cwd>/<task_dir>``
- project: nearest ``<project_dir>`` walking up from cwd, similar to how
  git finds ``.git/``. The walk ends at the home directory, and the
  home directory's own ``<user_dir>`` is never taken as a project scope.
- user: ``<home>/<user_dir>``
- system: only when ``system_dir`` is configured
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from layerctl.config.models import ScopesConfig
from layerctl.domain.scopes import SCOPE_PRECEDENCE, ScopeLevel


class ScopeDirectory(BaseModel):
    """Where one scope lives on disk."""

    model_config = {"frozen": True}

    scope: ScopeLevel
    path: Path
    exists: bool


class ScanResult(BaseModel):
    """Scope directories in precedence order (task first)."""

    model_config = {"frozen": True}

    cwd: Path
    directories: list[ScopeDirectory] = Field(default_factory=list)

    @property
    def found(self) -> list[ScopeDirectory]:
        return [d for d in self.directories if d.exists]

    def get(self, scope: ScopeLevel) -> ScopeDirectory | None:
        for directory in self.directories:
            if directory.scope == scope:
                return directory
        return None


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def find_project_dir(cwd: Path, name: str, *, home: Path) -> Path | None:
    """Walk up from *cwd* looking for a directory called *name*.

    Stops after checking *home* when *cwd* lies beneath it. The candidate
    ``<home>/<name>`` is skipped since that is the user scope.
    """
    current = cwd.resolve()
    boundary = home.resolve()
    stop_at_home = _is_within(current, boundary)
    user_candidate = boundary / name

    while True:
        candidate = current / name
        if candidate.is_dir() and candidate != user_candidate:
            return candidate
        parent = current.parent
        if parent == current or (stop_at_home and current == boundary):
            return None
        current = parent


def scan_scope_directories(
    cwd: Path,
    *,
    home: Path | None = None,
    system_dir: str | Path | None = None,
    include_missing: bool = False,
    settings: ScopesConfig | None = None,
) -> ScanResult:
    """Locate every scope directory reachable from *cwd*.

    Args:
        cwd: Directory discovery starts from.
        home: Home directory for the user scope (default: ``Path.home()``).
        system_dir: Overrides ``settings.system_dir`` when given.
        include_missing: Also list scopes whose directory does not exist.
        settings: Directory names; defaults to :class:`ScopesConfig`.
    """
    cfg = settings or ScopesConfig()
    cwd = cwd.resolve()
    home = (home or Path.home()).resolve()
    system = system_dir if system_dir is not None else cfg.system_dir

    project = find_project_dir(cwd, cfg.project_dir, home=home)
    candidates: dict[ScopeLevel, Path | None] = {
        ScopeLevel.TASK: cwd / cfg.task_dir if cfg.include_task else None,
        ScopeLevel.PROJECT: project,
        ScopeLevel.USER: home / cfg.user_dir,
        ScopeLevel.SYSTEM: Path(system).expanduser() if system else None,
    }
    if project is None and include_missing:
        # Placeholder only; at home it would be the user directory.
        candidates[ScopeLevel.PROJECT] = cwd / cfg.project_dir

    directories: list[ScopeDirectory] = []
    for scope in SCOPE_PRECEDENCE:
        path = candidates[scope]
        if path is None:
            continue
        exists = path.is_dir() and (scope != ScopeLevel.PROJECT or project is not None)
        if exists or include_missing:
            directories.append(ScopeDirectory(scope=scope, path=path, exists=exists))

    return ScanResult(cwd=cwd, directories=directories)
