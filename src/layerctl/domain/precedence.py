"""Precedence rules over the scope hierarchy.

All functions are pure and total over :class:`ScopeLevel`. A value outside
the four known scopes is a programming error and raises ``ValueError``.
"""

from __future__ import annotations

import functools
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field

from layerctl.domain.config import ScopeConfig
from layerctl.domain.scopes import SCOPE_PRECEDENCE, ScopeLevel, coerce_scope


class ScopeResolutionPath(BaseModel):
    """Scopes checked during resolution, split by availability."""

    model_config = {"frozen": True}

    checked: list[ScopeLevel] = Field(default_factory=list)
    available: list[ScopeLevel] = Field(default_factory=list)
    missing: list[ScopeLevel] = Field(default_factory=list)


def scope_precedence(scope: ScopeLevel | str) -> int:
    """Numeric rank of *scope*; higher means stronger (task=4 ... system=1)."""
    level = coerce_scope(scope)
    return len(SCOPE_PRECEDENCE) - SCOPE_PRECEDENCE.index(level)


def compare_scope_precedence(a: ScopeLevel | str, b: ScopeLevel | str) -> int:
    """Three-way comparison: -1 if *a* is weaker, 1 if stronger, 0 if equal."""
    rank_a = scope_precedence(a)
    rank_b = scope_precedence(b)
    if rank_a < rank_b:
        return -1
    if rank_a > rank_b:
        return 1
    return 0


def is_higher_precedence(a: ScopeLevel | str, b: ScopeLevel | str) -> bool:
    """True if *a* outranks *b*."""
    return compare_scope_precedence(a, b) > 0


def sort_by_precedence(
    configs: Iterable[ScopeConfig],
    *,
    descending: bool = True,
) -> list[ScopeConfig]:
    """Return a new list of *configs* ordered by scope precedence.

    Highest precedence first by default. The sort is stable.
    """
    key = functools.cmp_to_key(lambda x, y: compare_scope_precedence(x.scope, y.scope))
    return sorted(configs, key=key, reverse=descending)


def highest_precedence_scope(configs: Sequence[ScopeConfig]) -> ScopeLevel | None:
    """Scope of the strongest config in *configs*, or None if empty."""
    if not configs:
        return None
    return sort_by_precedence(configs)[0].scope


def filter_by_minimum_scope(
    configs: Iterable[ScopeConfig],
    min_scope: ScopeLevel | str,
) -> list[ScopeConfig]:
    """Keep only configs at or above *min_scope*."""
    floor = scope_precedence(min_scope)
    return [c for c in configs if scope_precedence(c.scope) >= floor]


def scope_resolution_path(configs: Iterable[ScopeConfig]) -> ScopeResolutionPath:
    """Walk every scope in precedence order, noting which have a config."""
    present = {c.scope for c in configs}
    available = [s for s in SCOPE_PRECEDENCE if s in present]
    missing = [s for s in SCOPE_PRECEDENCE if s not in present]
    return ScopeResolutionPath(
        checked=list(SCOPE_PRECEDENCE),
        available=available,
        missing=missing,
    )
