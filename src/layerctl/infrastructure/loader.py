"""Layer file loading.

A scope directory holds at most one source per layer, in any of these
forms (all present forms are combined, in this order):

- ``<layer>.yaml`` / ``<layer>.yml``: a mapping validated into the
  layer's fragment model.
- ``<layer>.md``: YAML frontmatter validated into the fragment; the
  markdown body becomes ``raw_content``.
- ``<layer>/``: a directory of ``*.md`` files read in file-name order.
  Frontmatter mappings are merged (later files win per key) and bodies
  are concatenated.

Keys may use snake_case or camelCase. Parse and validation failures in
one layer never stop the others from loading: :func:`load_scope_config`
turns them into warnings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from layerctl.domain.config import ScopeConfig
from layerctl.domain.layers import FRAGMENT_MODELS, LayerRecord, LayerType
from layerctl.domain.scopes import ScopeLevel
from layerctl.infrastructure.scanner import ScanResult

log = structlog.get_logger(__name__)

_FRONTMATTER_DELIMITER = "---"
_RAW_KEYS = ("raw_content", "rawContent")


class LayerLoadError(ValueError):
    """A layer source exists but could not be parsed or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _load_yaml(text: str) -> Any:
    return YAML(typ="safe").load(text)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split markdown *content* into ``(frontmatter, body)``.

    The file must start with a ``---`` line; the next ``---`` line closes
    the YAML block. Without valid delimiters the whole content is the
    body. Raises ``YAMLError`` for malformed YAML and ``TypeError`` when
    the block is not a mapping.
    """
    normalized = content.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != _FRONTMATTER_DELIMITER:
        return {}, normalized

    end_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == _FRONTMATTER_DELIMITER:
            end_idx = i
            break

    if end_idx is None:
        return {}, normalized

    yaml_block = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :])

    fm = _load_yaml(yaml_block) or {}
    if not isinstance(fm, dict):
        msg = f"frontmatter must be a mapping, got {type(fm).__name__}"
        raise TypeError(msg)
    return fm, body


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        raise LayerLoadError(path, f"unreadable: {exc}") from exc


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    text = _read_text(path)
    try:
        data = _load_yaml(text)
    except YAMLError as exc:
        raise LayerLoadError(path, f"invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise LayerLoadError(path, f"expected a mapping, got {type(data).__name__}")
    return data


def _read_markdown(path: Path) -> tuple[dict[str, Any], str]:
    text = _read_text(path)
    try:
        return parse_frontmatter(text)
    except (YAMLError, TypeError) as exc:
        raise LayerLoadError(path, f"invalid frontmatter: {exc}") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def layer_sources(layer_type: LayerType, directory: Path) -> list[Path]:
    """Files under *directory* that contribute to *layer_type*, in load order."""
    name = layer_type.value
    sources = [
        directory / f"{name}{suffix}"
        for suffix in (".yaml", ".yml", ".md")
        if (directory / f"{name}{suffix}").is_file()
    ]
    folder = directory / name
    if folder.is_dir():
        sources.extend(sorted(p for p in folder.glob("*.md") if p.is_file()))
    return sources


def load_layer_fragment(layer_type: LayerType, directory: Path) -> LayerRecord | None:
    """Load one layer's fragment from a scope *directory*.

    Returns None when the directory has no source for the layer.

    Raises:
        LayerLoadError: A source failed to parse or validate.
    """
    sources = layer_sources(layer_type, directory)
    if not sources:
        return None

    data: dict[str, Any] = {}
    bodies: list[str] = []
    for path in sources:
        if path.suffix == ".md":
            fm, body = _read_markdown(path)
            data.update(fm)
            if body.strip():
                bodies.append(body.strip())
        else:
            data.update(_read_yaml_mapping(path))

    if bodies:
        explicit = [data.pop(key) for key in _RAW_KEYS if key in data]
        parts = [str(p).strip() for p in explicit if p] + bodies
        data["raw_content"] = "\n\n".join(parts)

    model = FRAGMENT_MODELS[layer_type]
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        reason = f"invalid {layer_type.value} layer: {exc.error_count()} validation error(s)"
        raise LayerLoadError(sources[0], reason) from exc


def load_scope_config(directory: Path, scope: ScopeLevel) -> tuple[ScopeConfig, list[str]]:
    """Load every layer found in *directory* as a :class:`ScopeConfig`.

    Layers that fail to load are left unset and reported in the returned
    warnings list.
    """
    fragments: dict[str, LayerRecord] = {}
    warnings: list[str] = []

    for layer_type in LayerType:
        try:
            fragment = load_layer_fragment(layer_type, directory)
        except LayerLoadError as exc:
            log.warning(
                "layer.load_failed",
                scope=scope.value,
                layer=layer_type.value,
                path=str(exc.path),
                reason=exc.reason,
            )
            warnings.append(f"Skipped {scope.value} {layer_type.value} layer: {exc}")
            continue
        if fragment is not None:
            fragments[layer_type.value] = fragment

    log.debug("scope.loaded", scope=scope.value, path=str(directory), layers=sorted(fragments))
    config = ScopeConfig(scope=scope, base_path=str(directory), **fragments)
    return config, warnings


def load_all_scopes(scan: ScanResult) -> tuple[list[ScopeConfig], list[str]]:
    """Load a :class:`ScopeConfig` for every existing directory in *scan*."""
    configs: list[ScopeConfig] = []
    warnings: list[str] = []
    for directory in scan.found:
        config, scope_warnings = load_scope_config(directory.path, directory.scope)
        configs.append(config)
        warnings.extend(scope_warnings)
    return configs, warnings
