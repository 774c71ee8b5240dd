"""Resolver: run the merge engine across every supplied scope.

Configs are sorted highest precedence first and then reversed, so each
merge function receives fragments lowest precedence first. That is what
makes the merge engine's "last wins" equal "highest precedence wins".
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from layerctl.domain.config import (
    ConfigContext,
    LayerSummary,
    MergedConfig,
    MergeMetadata,
    ScopeConfig,
)
from layerctl.domain.layers import LayerRecord, LayerType
from layerctl.domain.merge import (
    merge_goals,
    merge_knowledge,
    merge_methods,
    merge_rules,
    merge_tools,
)
from layerctl.domain.precedence import sort_by_precedence
from layerctl.domain.scopes import SCOPE_PRECEDENCE

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock for merge and context timestamps."""
    return datetime.now(UTC)


def resolve_config(
    configs: Iterable[ScopeConfig],
    *,
    clock: Clock | None = None,
) -> MergedConfig:
    """Merge *configs* into a single :class:`MergedConfig`.

    Args:
        configs: Per-scope configurations, in any order.
        clock: Zero-argument callable returning the merge timestamp.
    """
    descending = sort_by_precedence(configs)
    ascending = list(reversed(descending))

    metadata = MergeMetadata(
        merged_at=(clock or utc_now)(),
        scopes_included=[c.scope for c in descending],
        layer_sources={
            layer: [c.base_path for c in ascending if c.layer(layer) is not None]
            for layer in LayerType
        },
    )

    return MergedConfig(
        rules=merge_rules([c.rules for c in ascending]),
        tools=merge_tools([c.tools for c in ascending]),
        methods=merge_methods([c.methods for c in ascending]),
        knowledge=merge_knowledge([c.knowledge for c in ascending]),
        goals=merge_goals([c.goals for c in ascending]),
        metadata=metadata,
    )


def create_config_context(
    configs: Iterable[ScopeConfig],
    task_id: str | None = None,
    *,
    clock: Clock | None = None,
) -> ConfigContext:
    """Resolve *configs* and keep the per-scope inputs alongside the result."""
    configs = list(configs)
    now = clock or utc_now
    return ConfigContext(
        config=resolve_config(configs, clock=now),
        scopes={c.scope: c for c in configs},
        created_at=now(),
        task_id=task_id,
    )


def resolve_for_task(
    task: ScopeConfig | None = None,
    project: ScopeConfig | None = None,
    user: ScopeConfig | None = None,
    system: ScopeConfig | None = None,
    task_id: str | None = None,
    *,
    clock: Clock | None = None,
) -> ConfigContext:
    """Build a :class:`ConfigContext` from up to four named scope configs."""
    configs = [c for c in (system, user, project, task) if c is not None]
    return create_config_context(configs, task_id, clock=clock)


def extract_layer(config: MergedConfig, layer: LayerType) -> LayerRecord:
    """Return the merged fragment for *layer*."""
    return config.layer(layer)


def has_layer_content(config: MergedConfig, layer: LayerType) -> bool:
    """True if the merged *layer* has any non-empty field."""
    return config.layer(layer).has_content()


def scope_summary(context: ConfigContext) -> list[LayerSummary]:
    """Per layer, which scopes (strongest first) and paths contributed."""
    summary: list[LayerSummary] = []
    for layer in LayerType:
        scopes = [
            scope
            for scope in SCOPE_PRECEDENCE
            if scope in context.scopes and context.scopes[scope].layer(layer) is not None
        ]
        summary.append(
            LayerSummary(
                layer=layer,
                scopes=scopes,
                sources=list(context.config.metadata.layer_sources.get(layer, [])),
            )
        )
    return summary
