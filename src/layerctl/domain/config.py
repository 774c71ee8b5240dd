"""Configuration records: per-scope input and merged output.

A :class:`ScopeConfig` is one scope's full set of fragments, built by the
loader (or by callers directly). :class:`MergedConfig` is created exactly
once per resolution and never mutated.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from layerctl.domain.layers import (
    GoalsContent,
    GoalsLayer,
    KnowledgeLayer,
    LayerRecord,
    LayerType,
    MethodsContent,
    MethodsLayer,
    RulesLayer,
    ToolsLayer,
)
from layerctl.domain.scopes import ScopeLevel


class ScopeConfig(BaseModel):
    """All layer fragments defined at one scope."""

    model_config = {"frozen": True}

    scope: ScopeLevel
    base_path: str
    rules: RulesLayer | None = None
    tools: ToolsLayer | None = None
    methods: MethodsLayer | None = None
    knowledge: KnowledgeLayer | None = None
    goals: GoalsLayer | None = None

    def layer(self, layer_type: LayerType) -> LayerRecord | None:
        """Return this scope's fragment for *layer_type*, or None."""
        match layer_type:
            case LayerType.RULES:
                return self.rules
            case LayerType.TOOLS:
                return self.tools
            case LayerType.METHODS:
                return self.methods
            case LayerType.KNOWLEDGE:
                return self.knowledge
            case LayerType.GOALS:
                return self.goals
            case _:
                msg = f"Unknown layer: {layer_type!r}"
                raise ValueError(msg)


class MergeMetadata(BaseModel):
    """Provenance of a merge.

    Attributes:
        merged_at: When the merge ran (UTC).
        scopes_included: Contributing scopes, highest precedence first.
        layer_sources: Per layer, base paths of every scope that supplied
            a fragment, lowest precedence first.
    """

    model_config = {"frozen": True}

    merged_at: datetime
    scopes_included: list[ScopeLevel] = Field(default_factory=list)
    layer_sources: dict[LayerType, list[str]] = Field(default_factory=dict)


class MergedConfig(BaseModel):
    """One fragment per layer, combined across all scopes."""

    model_config = {"frozen": True}

    rules: RulesLayer = Field(default_factory=RulesLayer)
    tools: ToolsLayer = Field(default_factory=ToolsLayer)
    methods: MethodsContent = Field(default_factory=MethodsContent)
    knowledge: KnowledgeLayer = Field(default_factory=KnowledgeLayer)
    goals: GoalsContent = Field(default_factory=GoalsContent)
    metadata: MergeMetadata

    def layer(self, layer_type: LayerType) -> LayerRecord:
        """Return the merged fragment for *layer_type*."""
        match layer_type:
            case LayerType.RULES:
                return self.rules
            case LayerType.TOOLS:
                return self.tools
            case LayerType.METHODS:
                return self.methods
            case LayerType.KNOWLEDGE:
                return self.knowledge
            case LayerType.GOALS:
                return self.goals
            case _:
                msg = f"Unknown layer: {layer_type!r}"
                raise ValueError(msg)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict: camelCase layer fields plus metadata."""
        data: dict[str, Any] = {layer.value: self.layer(layer).to_wire() for layer in LayerType}
        data["metadata"] = {
            "mergedAt": self.metadata.merged_at.isoformat(),
            "scopesIncluded": [s.value for s in self.metadata.scopes_included],
            "layerSources": {k.value: list(v) for k, v in self.metadata.layer_sources.items()},
        }
        return data


class ConfigContext(BaseModel):
    """A resolved configuration together with the scopes it came from."""

    model_config = {"frozen": True}

    config: MergedConfig
    scopes: dict[ScopeLevel, ScopeConfig] = Field(default_factory=dict)
    created_at: datetime
    task_id: str | None = None


class LayerSummary(BaseModel):
    """Which scopes and source paths contributed to one layer."""

    model_config = {"frozen": True}

    layer: LayerType
    scopes: list[ScopeLevel] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
