"""Conflict detector: contradictions and gaps in a merged configuration.

Runs a fixed battery of independent checks, one function per layer plus
one for cross-layer heuristics, and accumulates a flat list of
:class:`Conflict` values in check order. Severity grouping and the health
score are derived views over that list.

"Errors" here are a classification of configuration problems. They are
always returned as data, never raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum

from pydantic import BaseModel, Field

from layerctl.domain.config import MergedConfig, ScopeConfig
from layerctl.domain.layers import LayerType
from layerctl.domain.scopes import ScopeLevel, coerce_scope

ScopeMap = Mapping[ScopeLevel | str, ScopeConfig | None]

ERROR_PENALTY = 15
WARNING_PENALTY = 5
INFO_PENALTY = 1


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Assessment(StrEnum):
    """Overall verdict derived from the health score."""

    HEALTHY = "healthy"
    NEEDS_ATTENTION = "needs-attention"
    CRITICAL = "critical"


class Conflict(BaseModel):
    """One detected configuration issue."""

    model_config = {"frozen": True}

    id: str
    layer: LayerType
    severity: Severity
    message: str
    details: str | None = None
    suggestion: str | None = None
    scopes: list[ScopeLevel] = Field(default_factory=list)


class ConflictsBySeverity(BaseModel):
    model_config = {"frozen": True}

    errors: list[Conflict] = Field(default_factory=list)
    warnings: list[Conflict] = Field(default_factory=list)
    info: list[Conflict] = Field(default_factory=list)


class ConflictDetectionResult(BaseModel):
    """Conflicts in check order, grouped by severity, plus a health score."""

    model_config = {"frozen": True}

    conflicts: list[Conflict] = Field(default_factory=list)
    by_severity: ConflictsBySeverity = Field(default_factory=ConflictsBySeverity)
    health_score: int = 100


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def detect_conflicts(
    merged: MergedConfig,
    scopes: ScopeMap,
    *,
    heuristics: bool = True,
) -> ConflictDetectionResult:
    """Inspect *merged* and the per-scope inputs it came from.

    Args:
        merged: The resolved configuration.
        scopes: Scope name (or level) to that scope's config; None values
            are ignored.
        heuristics: Run the free-text cross-layer checks.
    """
    named = _normalize_scopes(scopes)
    conflicts: list[Conflict] = []

    conflicts.extend(detect_rules_conflicts(merged, named))
    conflicts.extend(detect_tools_conflicts(merged, named))
    conflicts.extend(detect_methods_conflicts(merged, named))
    conflicts.extend(detect_knowledge_conflicts(merged, named))
    conflicts.extend(detect_goals_conflicts(merged, named))
    if heuristics:
        conflicts.extend(detect_cross_layer_conflicts(merged, named))

    return ConflictDetectionResult(
        conflicts=conflicts,
        by_severity=group_by_severity(conflicts),
        health_score=calculate_health_score(conflicts),
    )


def group_by_severity(conflicts: Iterable[Conflict]) -> ConflictsBySeverity:
    """Partition *conflicts* by severity, keeping check order within each group."""
    conflicts = list(conflicts)
    return ConflictsBySeverity(
        errors=[c for c in conflicts if c.severity == Severity.ERROR],
        warnings=[c for c in conflicts if c.severity == Severity.WARNING],
        info=[c for c in conflicts if c.severity == Severity.INFO],
    )


def calculate_health_score(conflicts: Iterable[Conflict]) -> int:
    """100 minus 15 per error, 5 per warning, 1 per info; floored at 0."""
    score = 100
    for conflict in conflicts:
        match conflict.severity:
            case Severity.ERROR:
                score -= ERROR_PENALTY
            case Severity.WARNING:
                score -= WARNING_PENALTY
            case Severity.INFO:
                score -= INFO_PENALTY
    return max(0, score)


def assess_health(
    score: int,
    *,
    healthy_threshold: int = 80,
    attention_threshold: int = 50,
) -> Assessment:
    """Map a health score onto healthy / needs-attention / critical."""
    if score >= healthy_threshold:
        return Assessment.HEALTHY
    if score >= attention_threshold:
        return Assessment.NEEDS_ATTENTION
    return Assessment.CRITICAL


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalize_scopes(scopes: ScopeMap) -> dict[ScopeLevel, ScopeConfig]:
    return {coerce_scope(name): cfg for name, cfg in scopes.items() if cfg is not None}


def _layer_supplied(scopes: Mapping[ScopeLevel, ScopeConfig], layer: LayerType) -> bool:
    """True if at least one scope provided a fragment for *layer*."""
    return any(cfg.layer(layer) is not None for cfg in scopes.values())


def _scopes_by_value(
    pairs: Iterable[tuple[ScopeLevel, Iterable[str]]],
) -> dict[str, list[ScopeLevel]]:
    """Map each value to the distinct scopes that define it, in first-seen order."""
    found: dict[str, list[ScopeLevel]] = {}
    for scope, values in pairs:
        for value in values:
            holders = found.setdefault(value, [])
            if scope not in holders:
                holders.append(scope)
    return found


def _joined(scopes: Iterable[ScopeLevel]) -> str:
    return ", ".join(s.value for s in scopes)


# ---------------------------------------------------------------------------
# Layer checks
# ---------------------------------------------------------------------------


def detect_rules_conflicts(
    merged: MergedConfig,
    scopes: Mapping[ScopeLevel, ScopeConfig],
) -> list[Conflict]:
    rules = merged.rules
    conflicts: list[Conflict] = []

    security = _scopes_by_value(
        (scope, cfg.rules.security or []) for scope, cfg in scopes.items() if cfg.rules
    )
    for rule, holders in security.items():
        if len(holders) > 1:
            conflicts.append(
                Conflict(
                    id=f"rules-security-duplicate-{rule}",
                    layer=LayerType.RULES,
                    severity=Severity.WARNING,
                    message=f'Duplicate security rule: "{rule}"',
                    details=f"Rule appears in multiple scopes: {_joined(holders)}",
                    suggestion=(
                        "Remove duplicate rules or consolidate into higher-precedence scope"
                    ),
                    scopes=holders,
                )
            )

    if rules.forbidden and rules.required:
        required = set(rules.required)
        for item in dict.fromkeys(rules.forbidden):
            if item not in required:
                continue
            implicated = [
                scope
                for scope, cfg in scopes.items()
                if cfg.rules
                and (item in (cfg.rules.forbidden or []) or item in (cfg.rules.required or []))
            ]
            conflicts.append(
                Conflict(
                    id=f"rules-contradiction-{item}",
                    layer=LayerType.RULES,
                    severity=Severity.ERROR,
                    message=f'Contradiction: "{item}" is both forbidden and required',
                    details="Same item appears in both forbidden and required lists",
                    suggestion="Remove from one list or resolve the contradiction",
                    scopes=implicated,
                )
            )

    if _layer_supplied(scopes, LayerType.RULES) and not rules.has_content():
        conflicts.append(
            Conflict(
                id="rules-empty",
                layer=LayerType.RULES,
                severity=Severity.INFO,
                message="No rules defined",
                suggestion=(
                    "Consider adding security rules, forbidden actions, or required constraints"
                ),
            )
        )

    return conflicts


def detect_tools_conflicts(
    merged: MergedConfig,
    scopes: Mapping[ScopeLevel, ScopeConfig],
) -> list[Conflict]:
    conflicts: list[Conflict] = []

    servers = _scopes_by_value(
        (scope, [s.name for s in cfg.tools.mcp_servers or []])
        for scope, cfg in scopes.items()
        if cfg.tools
    )
    for name, holders in servers.items():
        if len(holders) > 1:
            conflicts.append(
                Conflict(
                    id=f"tools-mcp-duplicate-{name}",
                    layer=LayerType.TOOLS,
                    severity=Severity.WARNING,
                    message=f'MCP server "{name}" defined in multiple scopes',
                    details=f"Defined in: {_joined(holders)}",
                    suggestion="Keep the most specific scope and remove duplicates",
                    scopes=holders,
                )
            )

    if _layer_supplied(scopes, LayerType.TOOLS) and not merged.tools.has_content():
        conflicts.append(
            Conflict(
                id="tools-empty",
                layer=LayerType.TOOLS,
                severity=Severity.INFO,
                message="No tools defined",
                suggestion="Consider adding MCP servers, commands, or scripts",
            )
        )

    return conflicts


def detect_methods_conflicts(
    merged: MergedConfig,
    scopes: Mapping[ScopeLevel, ScopeConfig],
) -> list[Conflict]:
    methods = merged.methods
    conflicts: list[Conflict] = []

    workflows = _scopes_by_value(
        (scope, list(cfg.methods.workflows or {}))
        for scope, cfg in scopes.items()
        if cfg.methods
    )
    for name, holders in workflows.items():
        if len(holders) > 1:
            conflicts.append(
                Conflict(
                    id=f"methods-workflow-override-{name}",
                    layer=LayerType.METHODS,
                    severity=Severity.INFO,
                    message=f'Workflow "{name}" defined in multiple scopes',
                    details=(
                        f"Defined in: {_joined(holders)}. "
                        "More specific scope will take precedence."
                    ),
                    suggestion="Verify the intended workflow is being used",
                    scopes=holders,
                )
            )

    if methods.patterns and not methods.workflows:
        conflicts.append(
            Conflict(
                id="methods-patterns-no-workflows",
                layer=LayerType.METHODS,
                severity=Severity.INFO,
                message="Patterns defined but no workflows",
                suggestion="Consider adding workflows that use these patterns",
            )
        )

    if _layer_supplied(scopes, LayerType.METHODS) and not methods.has_content():
        conflicts.append(
            Conflict(
                id="methods-empty",
                layer=LayerType.METHODS,
                severity=Severity.INFO,
                message="No methods defined",
                suggestion="Consider adding workflows, patterns, or best practices",
            )
        )

    return conflicts


def detect_knowledge_conflicts(
    merged: MergedConfig,
    scopes: Mapping[ScopeLevel, ScopeConfig],
) -> list[Conflict]:
    conflicts: list[Conflict] = []

    documented = [
        scope
        for scope, cfg in scopes.items()
        if cfg.knowledge and cfg.knowledge.architecture
    ]
    if len(documented) > 1:
        conflicts.append(
            Conflict(
                id="knowledge-arch-duplicate",
                layer=LayerType.KNOWLEDGE,
                severity=Severity.INFO,
                message="Architecture documented in multiple scopes",
                details=f"Found in: {_joined(documented)}. All definitions will be merged.",
                suggestion="Verify all architecture documentation is consistent",
                scopes=documented,
            )
        )

    if _layer_supplied(scopes, LayerType.KNOWLEDGE) and not merged.knowledge.has_content():
        conflicts.append(
            Conflict(
                id="knowledge-empty",
                layer=LayerType.KNOWLEDGE,
                severity=Severity.WARNING,
                message="No knowledge base defined",
                suggestion="Add project overview, architecture docs, or glossary",
            )
        )

    return conflicts


def detect_goals_conflicts(
    merged: MergedConfig,
    scopes: Mapping[ScopeLevel, ScopeConfig],
) -> list[Conflict]:
    goals = merged.goals
    conflicts: list[Conflict] = []

    declaring = [scope for scope, cfg in scopes.items() if cfg.goals and cfg.goals.current]
    if len(declaring) > 1:
        conflicts.append(
            Conflict(
                id="goals-override",
                layer=LayerType.GOALS,
                severity=Severity.INFO,
                message="Current goals defined in multiple scopes",
                details=f"Defined in: {_joined(declaring)}.",
                suggestion="Remove from less specific scopes if the duplication is unintentional",
                scopes=declaring,
            )
        )

    if not goals.current or not goals.current.strip():
        conflicts.append(
            Conflict(
                id="goals-no-current",
                layer=LayerType.GOALS,
                severity=Severity.WARNING,
                message="No current goals defined",
                suggestion="Add current goals to guide the work",
            )
        )
    elif not goals.success_criteria:
        conflicts.append(
            Conflict(
                id="goals-no-criteria",
                layer=LayerType.GOALS,
                severity=Severity.WARNING,
                message="Current goals have no success criteria",
                suggestion="Add measurable success criteria to track progress",
            )
        )

    return conflicts


def detect_cross_layer_conflicts(
    merged: MergedConfig,
    scopes: Mapping[ScopeLevel, ScopeConfig],
) -> list[Conflict]:
    """Best-effort free-text checks between the goals and other layers.

    Matching is a case-insensitive substring test against the current goal,
    so short names ("db") can match unrelated words and renamed tools go
    unnoticed. Results are hints, not guarantees.
    """
    current = merged.goals.current
    if not current:
        return []
    goal_text = current.lower()
    conflicts: list[Conflict] = []

    available = {s.name for s in merged.tools.mcp_servers or []}
    configured = dict.fromkeys(
        server.name
        for cfg in scopes.values()
        if cfg.tools
        for server in cfg.tools.mcp_servers or []
    )
    for name in configured:
        if name.lower() in goal_text and name not in available:
            conflicts.append(
                Conflict(
                    id=f"cross-goal-tool-missing-{name}",
                    layer=LayerType.GOALS,
                    severity=Severity.WARNING,
                    message=f'Current goals may reference unavailable tool "{name}"',
                    suggestion="Verify tool is available or update goal description",
                )
            )

    for name in merged.methods.workflows or {}:
        if name.lower() in goal_text:
            conflicts.append(
                Conflict(
                    id=f"cross-goal-workflow-reference-{name}",
                    layer=LayerType.GOALS,
                    severity=Severity.INFO,
                    message=f'Current goals reference workflow "{name}"',
                    suggestion="Make sure the workflow covers what the goal needs",
                )
            )

    return conflicts
