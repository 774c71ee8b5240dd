"""Tests for the resolver and its end-to-end behavior."""

from layerctl.domain.layers import LayerType
from layerctl.domain.resolver import (
    create_config_context,
    extract_layer,
    has_layer_content,
    resolve_config,
    resolve_for_task,
    scope_summary,
)
from layerctl.domain.scopes import ScopeLevel
from tests.conftest import FIXED_NOW, fixed_clock, scope_config


class TestResolveConfig:
    def test_empty_input(self) -> None:
        merged = resolve_config([], clock=fixed_clock)
        assert merged.metadata.merged_at == FIXED_NOW
        assert merged.metadata.scopes_included == []
        assert not any(merged.layer(lt).has_content() for lt in LayerType)

    def test_input_order_does_not_matter(self) -> None:
        system = scope_config("system", tools={"mcpServers": [{"name": "db", "command": "a"}]})
        project = scope_config("project", tools={"mcpServers": [{"name": "db", "command": "b"}]})
        forward = resolve_config([system, project], clock=fixed_clock)
        backward = resolve_config([project, system], clock=fixed_clock)
        assert forward == backward
        assert forward.tools.mcp_servers is not None
        assert forward.tools.mcp_servers[0].command == "b"

    def test_metadata(self) -> None:
        system = scope_config("system", rules={"security": ["s"]})
        task = scope_config("task", rules={"forbidden": ["f"]}, goals={"current": "g"})
        merged = resolve_config([system, task], clock=fixed_clock)
        assert merged.metadata.scopes_included == [ScopeLevel.TASK, ScopeLevel.SYSTEM]
        assert merged.metadata.layer_sources[LayerType.RULES] == [
            "/system/.claude",
            "/task/.claude",
        ]
        assert merged.metadata.layer_sources[LayerType.GOALS] == ["/task/.claude"]
        assert merged.metadata.layer_sources[LayerType.TOOLS] == []

    def test_override_uses_precedence_not_input_order(self) -> None:
        system = scope_config("system", methods={"workflows": {"legacy": []}})
        user = scope_config("user", methods={"workflows": {"review": []}, "override": True})
        project = scope_config("project", methods={"workflows": {"deploy": []}})
        merged = resolve_config([project, system, user], clock=fixed_clock)
        assert set(merged.methods.workflows or {}) == {"review", "deploy"}

    def test_first_wins_current_goal(self) -> None:
        system = scope_config("system", goals={"current": "A"})
        project = scope_config("project", goals={"current": "B"})
        merged = resolve_config([project, system], clock=fixed_clock)
        assert merged.goals.current == "A"

    def test_wire_format(self) -> None:
        merged = resolve_config(
            [scope_config("user", rules={"outputRequirements": ["json"]})],
            clock=fixed_clock,
        )
        wire = merged.to_wire()
        assert wire["rules"] == {"outputRequirements": ["json"]}
        assert wire["metadata"]["scopesIncluded"] == ["user"]
        assert wire["metadata"]["mergedAt"] == FIXED_NOW.isoformat()


class TestConfigContext:
    def test_context_keeps_scopes(self) -> None:
        user = scope_config("user", rules={"security": ["u"]})
        ctx = create_config_context([user], task_id="T-1", clock=fixed_clock)
        assert ctx.scopes == {ScopeLevel.USER: user}
        assert ctx.task_id == "T-1"
        assert ctx.created_at == FIXED_NOW

    def test_resolve_for_task(self) -> None:
        ctx = resolve_for_task(
            project=scope_config("project", goals={"current": "p"}),
            system=scope_config("system", goals={"current": "s"}),
            clock=fixed_clock,
        )
        assert set(ctx.scopes) == {ScopeLevel.PROJECT, ScopeLevel.SYSTEM}
        assert ctx.config.goals.current == "s"

    def test_extract_and_has_content(self) -> None:
        merged = resolve_config(
            [scope_config("user", knowledge={"overview": "hi"})], clock=fixed_clock
        )
        assert extract_layer(merged, LayerType.KNOWLEDGE).to_wire() == {"overview": "hi"}
        assert has_layer_content(merged, LayerType.KNOWLEDGE) is True
        assert has_layer_content(merged, LayerType.RULES) is False

    def test_scope_summary(self) -> None:
        ctx = create_config_context(
            [
                scope_config("system", rules={"security": ["s"]}),
                scope_config("project", rules={"forbidden": ["f"]}),
            ],
            clock=fixed_clock,
        )
        summary = {s.layer: s for s in scope_summary(ctx)}
        assert summary[LayerType.RULES].scopes == [ScopeLevel.PROJECT, ScopeLevel.SYSTEM]
        assert summary[LayerType.RULES].sources == ["/system/.claude", "/project/.claude"]
        assert summary[LayerType.GOALS].scopes == []
