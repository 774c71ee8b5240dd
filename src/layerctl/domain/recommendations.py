"""Recommendation engine: constructive suggestions for a merged configuration.

Checks run once each, in a fixed order: conflict follow-ups, one group per
layer, then structural checks. Output is partitioned by priority, and
quick wins (high impact, low effort) are derived from the full list.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, Field

from layerctl.domain.config import MergedConfig
from layerctl.domain.conflicts import ConflictDetectionResult, ScopeMap
from layerctl.domain.layers import LayerType


class Level(StrEnum):
    """Shared scale for priority, impact, and effort."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Recommendation(BaseModel):
    model_config = {"frozen": True}

    id: str
    title: str
    description: str
    action: str
    benefit: str | None = None
    priority: Level
    impact: Level
    effort: Level
    layer: LayerType | None = None

    @property
    def is_quick_win(self) -> bool:
        return self.impact == Level.HIGH and self.effort == Level.LOW


class RecommendationsByPriority(BaseModel):
    model_config = {"frozen": True}

    high: list[Recommendation] = Field(default_factory=list)
    medium: list[Recommendation] = Field(default_factory=list)
    low: list[Recommendation] = Field(default_factory=list)


class RecommendationResult(BaseModel):
    model_config = {"frozen": True}

    recommendations: list[Recommendation] = Field(default_factory=list)
    by_priority: RecommendationsByPriority = Field(default_factory=RecommendationsByPriority)
    quick_wins: list[Recommendation] = Field(default_factory=list)


def generate_recommendations(
    merged: MergedConfig,
    scopes: ScopeMap,
    conflicts: ConflictDetectionResult,
) -> RecommendationResult:
    """Suggest improvements for *merged* given its detected *conflicts*."""
    recs: list[Recommendation] = []
    recs.extend(_conflict_recommendations(conflicts))
    recs.extend(_rules_recommendations(merged))
    recs.extend(_tools_recommendations(merged))
    recs.extend(_methods_recommendations(merged))
    recs.extend(_knowledge_recommendations(merged))
    recs.extend(_goals_recommendations(merged))
    recs.extend(_structural_recommendations(merged, scopes))

    return RecommendationResult(
        recommendations=recs,
        by_priority=group_by_priority(recs),
        quick_wins=[r for r in recs if r.is_quick_win],
    )


def group_by_priority(recommendations: Iterable[Recommendation]) -> RecommendationsByPriority:
    recs = list(recommendations)
    return RecommendationsByPriority(
        high=[r for r in recs if r.priority == Level.HIGH],
        medium=[r for r in recs if r.priority == Level.MEDIUM],
        low=[r for r in recs if r.priority == Level.LOW],
    )


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _conflict_recommendations(conflicts: ConflictDetectionResult) -> list[Recommendation]:
    recs: list[Recommendation] = []
    errors = len(conflicts.by_severity.errors)
    warnings = len(conflicts.by_severity.warnings)

    if errors:
        recs.append(
            Recommendation(
                id="resolve-errors",
                title="Resolve configuration errors",
                description=f"{errors} error(s) detected in configuration",
                action="Review and fix all errors listed in the doctor report",
                benefit="Prevent contradictory instructions from reaching the agent",
                priority=Level.HIGH,
                impact=Level.HIGH,
                effort=Level.MEDIUM,
            )
        )
    if warnings:
        recs.append(
            Recommendation(
                id="address-warnings",
                title="Address configuration warnings",
                description=f"{warnings} warning(s) detected in configuration",
                action="Review warnings and implement suggested fixes",
                benefit="Improve configuration quality and prevent future issues",
                priority=Level.MEDIUM,
                impact=Level.MEDIUM,
                effort=Level.LOW,
            )
        )
    return recs


def _rules_recommendations(merged: MergedConfig) -> list[Recommendation]:
    rules = merged.rules
    recs: list[Recommendation] = []

    if not rules.security:
        recs.append(
            Recommendation(
                id="add-security-rules",
                title="Add security rules",
                description="No security rules defined in configuration",
                action=(
                    "Add security constraints to the rules layer "
                    "(e.g. forbidden file operations, API restrictions)"
                ),
                benefit="Establish clear security boundaries",
                priority=Level.HIGH,
                impact=Level.HIGH,
                effort=Level.LOW,
                layer=LayerType.RULES,
            )
        )
    if not rules.forbidden:
        recs.append(
            Recommendation(
                id="add-forbidden-actions",
                title="Define forbidden actions",
                description="No forbidden actions specified",
                action=(
                    'List actions that should never be performed (e.g. "delete production '
                    'database", "modify critical files")'
                ),
                benefit="Prevent catastrophic mistakes through explicit constraints",
                priority=Level.HIGH,
                impact=Level.HIGH,
                effort=Level.LOW,
                layer=LayerType.RULES,
            )
        )
    if not rules.required:
        recs.append(
            Recommendation(
                id="consider-required-items",
                title="Consider required constraints",
                description="No required items specified",
                action='Define must-have requirements (e.g. "tests must pass")',
                benefit="Ensure critical steps are never skipped",
                priority=Level.MEDIUM,
                impact=Level.MEDIUM,
                effort=Level.LOW,
                layer=LayerType.RULES,
            )
        )
    return recs


def _tools_recommendations(merged: MergedConfig) -> list[Recommendation]:
    tools = merged.tools
    recs: list[Recommendation] = []

    if not tools.mcp_servers:
        recs.append(
            Recommendation(
                id="add-mcp-servers",
                title="Configure MCP servers",
                description="No MCP servers configured",
                action="Add MCP server configurations to enable tool integrations",
                benefit="Unlock integrations for database, filesystem, and API access",
                priority=Level.MEDIUM,
                impact=Level.HIGH,
                effort=Level.MEDIUM,
                layer=LayerType.TOOLS,
            )
        )
    if not tools.commands and not tools.scripts:
        recs.append(
            Recommendation(
                id="add-commands-scripts",
                title="Define custom commands or scripts",
                description="No custom commands or scripts defined",
                action="Add project-specific commands or utility scripts",
                benefit="Streamline common tasks and workflows",
                priority=Level.LOW,
                impact=Level.MEDIUM,
                effort=Level.LOW,
                layer=LayerType.TOOLS,
            )
        )

    undocumented = [s.name for s in tools.mcp_servers or [] if not s.description]
    if undocumented:
        recs.append(
            Recommendation(
                id="add-mcp-descriptions",
                title="Add descriptions to MCP servers",
                description=f"{len(undocumented)} MCP server(s) lack descriptions",
                action=f"Add descriptions to: {', '.join(undocumented)}",
                benefit="Make it clear when each tool should be used",
                priority=Level.LOW,
                impact=Level.LOW,
                effort=Level.LOW,
                layer=LayerType.TOOLS,
            )
        )
    return recs


def _methods_recommendations(merged: MergedConfig) -> list[Recommendation]:
    methods = merged.methods
    recs: list[Recommendation] = []

    if not methods.workflows:
        recs.append(
            Recommendation(
                id="add-workflows",
                title="Define workflows",
                description="No workflows defined",
                action='Add workflow definitions for common tasks (e.g. "code review", "deploy")',
                benefit="Standardize processes and improve consistency",
                priority=Level.HIGH,
                impact=Level.HIGH,
                effort=Level.MEDIUM,
                layer=LayerType.METHODS,
            )
        )
    if not methods.patterns:
        recs.append(
            Recommendation(
                id="add-patterns",
                title="Document patterns",
                description="No patterns documented",
                action="Add common code, architecture, or design patterns",
                benefit="Keep generated work in line with project conventions",
                priority=Level.MEDIUM,
                impact=Level.MEDIUM,
                effort=Level.MEDIUM,
                layer=LayerType.METHODS,
            )
        )
    if not methods.best_practices:
        recs.append(
            Recommendation(
                id="add-best-practices",
                title="Document best practices",
                description="No best practices documented",
                action="Add project-specific best practices and coding guidelines",
                benefit="Ensure consistent code quality across the project",
                priority=Level.MEDIUM,
                impact=Level.MEDIUM,
                effort=Level.LOW,
                layer=LayerType.METHODS,
            )
        )
    return recs


def _knowledge_recommendations(merged: MergedConfig) -> list[Recommendation]:
    knowledge = merged.knowledge
    recs: list[Recommendation] = []

    if not knowledge.overview:
        recs.append(
            Recommendation(
                id="add-overview",
                title="Add project overview",
                description="No project overview in knowledge base",
                action="Write a high-level overview (purpose, architecture, key concepts)",
                benefit="Give every session the project context up front",
                priority=Level.HIGH,
                impact=Level.HIGH,
                effort=Level.LOW,
                layer=LayerType.KNOWLEDGE,
            )
        )
    if not knowledge.architecture:
        recs.append(
            Recommendation(
                id="add-architecture",
                title="Document architecture",
                description="No architecture documentation",
                action="Add architecture documentation (components, data flow, tech stack)",
                benefit="Enable architecture-aware decisions",
                priority=Level.HIGH,
                impact=Level.HIGH,
                effort=Level.MEDIUM,
                layer=LayerType.KNOWLEDGE,
            )
        )
    if not knowledge.glossary:
        recs.append(
            Recommendation(
                id="add-glossary",
                title="Create glossary",
                description="No project glossary defined",
                action="Add a glossary of project-specific terms and acronyms",
                benefit="Keep terminology consistent",
                priority=Level.LOW,
                impact=Level.MEDIUM,
                effort=Level.LOW,
                layer=LayerType.KNOWLEDGE,
            )
        )
    return recs


def _goals_recommendations(merged: MergedConfig) -> list[Recommendation]:
    goals = merged.goals
    recs: list[Recommendation] = []

    if not goals.current or not goals.current.strip():
        recs.append(
            Recommendation(
                id="add-current-goals",
                title="Define current goals",
                description="No current goals defined",
                action='Add current goals (e.g. "implement authentication")',
                benefit="Focus effort on what matters most right now",
                priority=Level.HIGH,
                impact=Level.HIGH,
                effort=Level.LOW,
                layer=LayerType.GOALS,
            )
        )
    elif not goals.success_criteria:
        recs.append(
            Recommendation(
                id="add-success-criteria",
                title="Add success criteria to goals",
                description="Current goals lack success criteria",
                action="Define measurable success criteria for current goals",
                benefit="Make goals trackable and know when they are complete",
                priority=Level.HIGH,
                impact=Level.HIGH,
                effort=Level.LOW,
                layer=LayerType.GOALS,
            )
        )
    return recs


def _structural_recommendations(merged: MergedConfig, scopes: ScopeMap) -> list[Recommendation]:
    recs: list[Recommendation] = []

    populated = sum(1 for layer in LayerType if merged.layer(layer).has_content())
    if populated <= 2:
        recs.append(
            Recommendation(
                id="use-more-layers",
                title="Utilize more configuration layers",
                description=f"Only {populated} out of {len(LayerType)} layers are populated",
                action="Consider populating more layers for comprehensive configuration",
                benefit="Make use of the full five-layer model",
                priority=Level.LOW,
                impact=Level.MEDIUM,
                effort=Level.MEDIUM,
            )
        )

    in_use = sum(
        1
        for cfg in scopes.values()
        if cfg is not None and any(cfg.layer(lt) is not None for lt in LayerType)
    )
    if in_use <= 1:
        recs.append(
            Recommendation(
                id="use-scope-hierarchy",
                title="Leverage scope hierarchy",
                description=f"{in_use} scope level(s) in use",
                action="Consider splitting config across user, project, and task scopes",
                benefit="Share common config across projects, customize per project",
                priority=Level.LOW,
                impact=Level.MEDIUM,
                effort=Level.MEDIUM,
            )
        )
    return recs
