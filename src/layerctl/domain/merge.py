"""Merge engine: combine per-scope fragments of one layer into one fragment.

Every merge function takes fragments ordered lowest precedence first (the
resolver guarantees this), so "last writer wins" means "highest precedence
wins". ``None`` entries stand for scopes that said nothing and are skipped.

Field rules:

- Additive lists: concatenate in input order, then drop duplicates. The
  order of surviving items is not part of the contract.
- Free text: join present values in input order with
  :data:`RAW_CONTENT_DIVIDER`.
- Keyed collections: a later item replaces an earlier one with the same key;
  order follows the first appearance of each key.
- Maps: shallow merge, later keys overwrite earlier ones.
- Override layers (methods, goals): the last fragment with ``override: true``
  discards everything before it.

No function here raises; empty input gives an empty fragment.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any, TypeVar

from layerctl.domain.layers import (
    Adr,
    GoalsContent,
    GoalsLayer,
    KnowledgeLayer,
    LayerRecord,
    LayerType,
    MethodsContent,
    MethodsLayer,
    RulesLayer,
    SuccessCriterion,
    ToolsLayer,
)

RAW_CONTENT_DIVIDER = "\n\n---\n\n"

_F = TypeVar("_F", bound=LayerRecord)
_T = TypeVar("_T")


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _present(fragments: Iterable[_F | None]) -> list[_F]:
    return [f for f in fragments if f is not None]


def _dedupe(values: Iterable[_T]) -> list[_T]:
    return list(dict.fromkeys(values))


def _merge_list(fragments: Sequence[LayerRecord], field: str) -> list[Any] | None:
    collected: list[Any] = []
    for frag in fragments:
        values = getattr(frag, field)
        if values:
            collected.extend(values)
    return _dedupe(collected) if collected else None


def _join_text(parts: Iterable[str | None]) -> str | None:
    present = [p for p in parts if p]
    return RAW_CONTENT_DIVIDER.join(present) if present else None


def _merge_text(fragments: Sequence[LayerRecord], field: str) -> str | None:
    return _join_text(getattr(frag, field) for frag in fragments)


def _merge_map(fragments: Sequence[LayerRecord], field: str) -> dict[str, Any] | None:
    merged: dict[str, Any] = {}
    for frag in fragments:
        values = getattr(frag, field)
        if values:
            merged.update(values)
    return merged or None


def _merge_keyed(
    fragments: Sequence[LayerRecord],
    field: str,
    key: Callable[[Any], Hashable],
) -> list[Any] | None:
    by_key: dict[Hashable, Any] = {}
    for frag in fragments:
        for item in getattr(frag, field) or []:
            by_key[key(item)] = item
    return list(by_key.values()) or None


def _override_tail(fragments: Sequence[_F]) -> list[_F]:
    """Drop every fragment before the last one that sets ``override``."""
    for idx in range(len(fragments) - 1, -1, -1):
        if getattr(fragments[idx], "override", None):
            return list(fragments[idx:])
    return list(fragments)


def _merge_override_text(fragments: Sequence[MethodsLayer | GoalsLayer]) -> str | None:
    """Join raw content, restarting at any fragment that sets ``override``."""
    parts: list[str] = []
    for frag in fragments:
        if not frag.raw_content:
            continue
        if frag.override:
            parts.clear()
        parts.append(frag.raw_content)
    return _join_text(parts)


# ---------------------------------------------------------------------------
# Per-layer merges
# ---------------------------------------------------------------------------


def merge_rules(fragments: Sequence[RulesLayer | None]) -> RulesLayer:
    """Additive merge of the rules layer."""
    frags = _present(fragments)
    return RulesLayer(
        security=_merge_list(frags, "security"),
        output_requirements=_merge_list(frags, "output_requirements"),
        forbidden=_merge_list(frags, "forbidden"),
        required=_merge_list(frags, "required"),
        compliance=_merge_list(frags, "compliance"),
        raw_content=_merge_text(frags, "raw_content"),
    )


def merge_tools(fragments: Sequence[ToolsLayer | None]) -> ToolsLayer:
    """Additive merge of the tools layer; servers and commands keyed by name."""
    frags = _present(fragments)
    return ToolsLayer(
        mcp_servers=_merge_keyed(frags, "mcp_servers", lambda s: s.name),
        commands=_merge_keyed(frags, "commands", lambda c: c.name),
        scripts=_merge_map(frags, "scripts"),
        apis=_merge_map(frags, "apis"),
        services=_merge_list(frags, "services"),
        raw_content=_merge_text(frags, "raw_content"),
    )


def merge_methods(fragments: Sequence[MethodsLayer | None]) -> MethodsContent:
    """Override-aware merge of the methods layer."""
    frags = _override_tail(_present(fragments))
    return MethodsContent(
        workflows=_merge_map(frags, "workflows"),
        patterns=_merge_keyed(frags, "patterns", lambda p: p.name),
        best_practices=_merge_list(frags, "best_practices"),
        decisions=_merge_map(frags, "decisions"),
        checklists=_merge_map(frags, "checklists"),
        raw_content=_merge_override_text(frags),
    )


def merge_knowledge(fragments: Sequence[KnowledgeLayer | None]) -> KnowledgeLayer:
    """Additive merge of the knowledge layer; ADRs keyed and sorted by number."""
    frags = _present(fragments)
    adrs: list[Adr] | None = _merge_keyed(frags, "adrs", lambda a: a.number)
    return KnowledgeLayer(
        overview=_merge_text(frags, "overview"),
        architecture=_merge_text(frags, "architecture"),
        glossary=_merge_map(frags, "glossary"),
        adrs=sorted(adrs, key=lambda a: a.number) if adrs else None,
        specs=_merge_map(frags, "specs"),
        business_rules=_merge_list(frags, "business_rules"),
        history=_merge_text(frags, "history"),
        raw_content=_merge_text(frags, "raw_content"),
    )


def _merge_success_criteria(fragments: Sequence[GoalsLayer]) -> list[SuccessCriterion] | None:
    by_description: dict[str, SuccessCriterion] = {}
    for frag in fragments:
        for criterion in frag.success_criteria or []:
            existing = by_description.get(criterion.description)
            if existing is None:
                by_description[criterion.description] = criterion
                continue
            by_description[criterion.description] = existing.model_copy(
                update={
                    "completed": existing.completed or criterion.completed,
                    "test": criterion.test or existing.test,
                }
            )
    return list(by_description.values()) or None


def merge_goals(fragments: Sequence[GoalsLayer | None]) -> GoalsContent:
    """Override-aware merge of the goals layer.

    ``current`` keeps the FIRST non-empty value in input order, which with
    the resolver's ordering is the least specific scope. Every other field
    in this layer lets the more specific scope win.
    """
    frags = _override_tail(_present(fragments))

    current: str | None = None
    priorities: list[str] | None = None
    for frag in frags:
        if frag.current and current is None:
            current = frag.current
        if frag.priorities:
            priorities = list(frag.priorities)

    return GoalsContent(
        current=current,
        success_criteria=_merge_success_criteria(frags),
        non_goals=_merge_list(frags, "non_goals"),
        priorities=priorities,
        done=_merge_list(frags, "done"),
        raw_content=_merge_override_text(frags),
    )


def merge_layer(layer: LayerType, fragments: Sequence[Any]) -> LayerRecord:
    """Dispatch to the merge function for *layer*."""
    match layer:
        case LayerType.RULES:
            return merge_rules(fragments)
        case LayerType.TOOLS:
            return merge_tools(fragments)
        case LayerType.METHODS:
            return merge_methods(fragments)
        case LayerType.KNOWLEDGE:
            return merge_knowledge(fragments)
        case LayerType.GOALS:
            return merge_goals(fragments)
        case _:
            msg = f"Unknown layer: {layer!r}"
            raise ValueError(msg)
