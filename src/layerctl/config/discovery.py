"""Config file discovery.

Walk-up finder locates layerctl.toml, similar to how git finds .git/.
The walk stops at the user's home directory so a stray
``~/layerctl.toml`` only applies to projects beneath it.
Supports LAYERCTL_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "layerctl.toml"
CONFIG_ENV_VAR = "LAYERCTL_CONFIG"


def find_config(start: Path | None = None, *, stop_at: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for layerctl.toml.

    Returns the path to the config file, or None if not found.
    Checks LAYERCTL_CONFIG env var first. When *stop_at* is given, the walk
    ends after checking that directory.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    boundary = stop_at.resolve() if stop_at else None
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current or current == boundary:
            return None
        current = parent
