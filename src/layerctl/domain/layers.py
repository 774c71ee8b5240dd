"""Layer types, merge strategies, and per-layer fragment models.

Five layers make up a configuration, each bound to one merge strategy:

- RULES, TOOLS, KNOWLEDGE: additive (every scope contributes).
- METHODS, GOALS: override (a scope may opt in to replacing less
  specific scopes via ``override: true``).

A fragment is one scope's content for one layer. Every field is optional;
``None`` means the scope said nothing about it. The ``override`` flag only
exists on the input fragments of the two override layers. Merged results
use :class:`MethodsContent` and :class:`GoalsContent`, which have no such
field, so the flag cannot leak into a merged configuration.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class LayerType(StrEnum):
    """The five configuration layers."""

    RULES = "rules"
    TOOLS = "tools"
    METHODS = "methods"
    KNOWLEDGE = "knowledge"
    GOALS = "goals"


class MergeStrategy(StrEnum):
    """How a layer combines contributions from several scopes."""

    ADDITIVE = "additive"
    OVERRIDE = "override"


def merge_strategy_for(layer: LayerType) -> MergeStrategy:
    """Return the fixed merge strategy bound to *layer*."""
    match layer:
        case LayerType.RULES | LayerType.TOOLS | LayerType.KNOWLEDGE:
            return MergeStrategy.ADDITIVE
        case LayerType.METHODS | LayerType.GOALS:
            return MergeStrategy.OVERRIDE
        case _:
            msg = f"Unknown layer: {layer!r}"
            raise ValueError(msg)


class LayerRecord(BaseModel):
    """Base for every layer model.

    Fields are snake_case in Python and camelCase on the wire; both
    spellings are accepted on input.
    """

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def has_content(self) -> bool:
        """True when any field other than ``override`` carries a value.

        Empty lists, empty mappings, and blank strings count as absent.
        """
        for name in type(self).model_fields:
            if name == "override":
                continue
            if has_value(getattr(self, name)):
                return True
        return False

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-ready dict using camelCase keys, omitting unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def has_value(value: Any) -> bool:
    """Presence test shared by emptiness checks across the engine."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) > 0
    return True


# --- Structured items -------------------------------------------------------


class McpServer(LayerRecord):
    """An MCP server definition, keyed by ``name``."""

    name: str
    command: str
    args: list[str] | None = None
    env: dict[str, str] | None = None
    description: str | None = None


class SlashCommand(LayerRecord):
    """A custom slash command, keyed by ``name``."""

    name: str
    description: str
    implementation: str
    parameters: dict[str, str] | None = None


class WorkflowStep(LayerRecord):
    step: int | str
    description: str
    substeps: list[str] | None = None


class Pattern(LayerRecord):
    """A reusable pattern, keyed by ``name``."""

    name: str
    when: str
    implementation: str
    example: str | None = None


class Adr(LayerRecord):
    """Architecture decision record, keyed by ``number``."""

    number: int
    title: str
    status: Literal["proposed", "accepted", "deprecated", "superseded"]
    context: str
    decision: str
    consequences: str | None = None


class SuccessCriterion(LayerRecord):
    """A success criterion, keyed by ``description``."""

    description: str
    completed: bool = False
    test: str | None = None


# --- Layer fragments --------------------------------------------------------


class RulesLayer(LayerRecord):
    """Layer 1: constraints that must be respected."""

    security: list[str] | None = None
    output_requirements: list[str] | None = None
    forbidden: list[str] | None = None
    required: list[str] | None = None
    compliance: list[str] | None = None
    raw_content: str | None = None


class ToolsLayer(LayerRecord):
    """Layer 2: available capabilities."""

    mcp_servers: list[McpServer] | None = None
    commands: list[SlashCommand] | None = None
    scripts: dict[str, str] | None = None
    apis: dict[str, str] | None = None
    services: list[str] | None = None
    raw_content: str | None = None


class MethodsContent(LayerRecord):
    """Layer 3 content: how things are done."""

    workflows: dict[str, list[WorkflowStep]] | None = None
    patterns: list[Pattern] | None = None
    best_practices: list[str] | None = None
    decisions: dict[str, str] | None = None
    checklists: dict[str, list[str]] | None = None
    raw_content: str | None = None


class MethodsLayer(MethodsContent):
    """Layer 3 input fragment; ``override`` replaces less specific scopes."""

    override: bool | None = None


class KnowledgeLayer(LayerRecord):
    """Layer 4: context and specifications."""

    overview: str | None = None
    architecture: str | None = None
    glossary: dict[str, str] | None = None
    adrs: list[Adr] | None = None
    specs: dict[str, str] | None = None
    business_rules: list[str] | None = None
    history: str | None = None
    raw_content: str | None = None


class GoalsContent(LayerRecord):
    """Layer 5 content: current objectives."""

    current: str | None = None
    success_criteria: list[SuccessCriterion] | None = None
    non_goals: list[str] | None = None
    priorities: list[str] | None = None
    done: list[str] | None = None
    raw_content: str | None = None


class GoalsLayer(GoalsContent):
    """Layer 5 input fragment; ``override`` replaces less specific scopes."""

    override: bool | None = None


# Input fragment model per layer (used by the loader to validate files).
FRAGMENT_MODELS: dict[LayerType, type[LayerRecord]] = {
    LayerType.RULES: RulesLayer,
    LayerType.TOOLS: ToolsLayer,
    LayerType.METHODS: MethodsLayer,
    LayerType.KNOWLEDGE: KnowledgeLayer,
    LayerType.GOALS: GoalsLayer,
}
