"""Rich rendering of doctor, show, sources, and scopes results.

``render_result`` picks a renderer by ``result.op``; ops without one get
a flat key/value listing. Everything prints to a StringIO-backed console
(see :mod:`layerctl.output.console`), so the caller just gets a string.
Text taken from layer files is printed through ``Text`` or ``escape`` so
square brackets in it are never read as Rich markup.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.json import JSON
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from layerctl.output.console import (
    create_console,
    get_output,
    style_for_assessment,
    style_for_severity,
)
from layerctl.services.result import ErrorCode

if TYPE_CHECKING:
    from rich.console import Console

    from layerctl.services.result import ServiceResult

Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Human-readable report for *result*; ``verbose`` adds timings and actions.

    Colour codes only appear when the console sees a terminal.
    """
    console = create_console()
    if not result.ok:
        _render_error(result, console, verbose=verbose)
    else:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    One line per conflict id (doctor), populated layer (sources), or
    available scope (scopes). Falls back to ``OK: <op>``.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    data = result.data
    lines: list[str] = []
    if result.op == "doctor":
        lines = [str(c["id"]) for c in data.get("conflicts", [])]
    elif result.op == "sources":
        lines = [str(entry["layer"]) for entry in data.get("layers", []) if entry["has_content"]]
    elif result.op == "scopes":
        lines = [str(s) for s in data.get("resolution", {}).get("available", [])]

    return "\n".join(lines) if lines else f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _table(*columns: tuple[str, str]) -> Table:
    """Borderless-edge table; each column is ``(header, style)``."""
    table = Table(show_header=True, pad_edge=False, expand=False)
    for header, style in columns:
        table.add_column(header, style=style or None)
    return table


def _field(console: Console, key: str, value: Any) -> None:
    style = "lc.path" if key in ("path", "cwd") else ""
    console.print(Text.assemble((f"  {key}: ", "lc.key"), (str(value), style)))


def _timing_style(duration_ms: float) -> str:
    if duration_ms > 1000:
        return "bold red"
    if duration_ms > 100:
        return "yellow"
    return "dim"


def _span_label(span: dict[str, Any]) -> Text:
    duration = span.get("duration_ms", 0.0)
    label = Text.assemble(
        (f"{duration:.2f}ms", _timing_style(duration)), "  ", str(span.get("name", "?"))
    )
    notes = span.get("annotations") or {}
    if notes:
        label.append("  (" + ", ".join(f"{k}={v}" for k, v in notes.items()) + ")", "dim")
    return label


def _add_spans(tree: Tree, span: dict[str, Any]) -> None:
    node = tree.add(_span_label(span))
    for child in span.get("children", []):
        _add_spans(node, child)


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print ``meta`` under ``--verbose``; the span tree shows per-phase timings."""
    if not result.meta:
        return
    console.print()
    tree = Tree(Text("meta", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _add_spans(tree, value)
        else:
            tree.add(Text(f"{key}: {value}"))
    console.print(tree)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "lc.error"), (f"  {result.op}", "lc.op"), f": {msg}"))
    if err and err.code == ErrorCode.NO_SCOPES:
        for entry in err.detail.get("checked", []):
            console.print(Text(f"  checked {entry['scope']}: {entry['path']}"))
    elif verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Doctor ────────────────────────────────────────────────────────────


def _render_doctor(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the health score, conflicts by severity, and recommendations."""
    d = result.data
    assessment = str(d.get("assessment", ""))
    score_style = style_for_assessment(assessment)
    console.print(
        f"Health score: [{score_style}]{d.get('health_score', 0)}/100[/{score_style}]"
        f"  ({assessment})"
    )
    scopes = ", ".join(d.get("scopes", []))
    console.print(f"[lc.key]Scopes:[/lc.key] [lc.scope]{scopes}[/lc.scope]")

    conflicts = d.get("conflicts", [])
    if conflicts:
        console.print("\n[bold]Conflicts[/bold]")
        for conflict in conflicts:
            sev = str(conflict.get("severity", "info"))
            style = style_for_severity(sev)
            prefix = f"[{style}]{sev}[/{style}]" if style else sev
            layer = escape(f"[{conflict['layer']}]")
            console.print(f"  {prefix} {layer} {escape(conflict['message'])}")
            if conflict.get("details"):
                console.print(Text(f"    {conflict['details']}", style="dim"))
            if verbose and conflict.get("suggestion"):
                console.print(Text(f"    suggestion: {conflict['suggestion']}"))
    else:
        console.print("\n[lc.ok]OK[/lc.ok]  No conflicts found.")

    counts = d.get("counts", {})
    console.print(
        f"\n{counts.get('errors', 0)} errors, {counts.get('warnings', 0)} warnings, "
        f"{counts.get('info', 0)} info"
    )

    recs = d.get("recommendations")
    if recs:
        console.print("\n[bold]Recommendations[/bold]")
        table = _table(
            ("Priority", ""), ("ID", "lc.id"), ("Title", ""), ("Impact", ""), ("Effort", "")
        )
        table.columns[1].no_wrap = True
        if verbose:
            table.add_column("Action", style="dim")

        priority_styles = {"high": "yellow", "medium": "", "low": "dim"}
        for rec in recs:
            priority = str(rec.get("priority", ""))
            row: list[Any] = [
                Text(priority, style=priority_styles.get(priority, "")),
                str(rec.get("id", "")),
                str(rec.get("title", "")),
                str(rec.get("impact", "")),
                str(rec.get("effort", "")),
            ]
            if verbose:
                row.append(str(rec.get("action", "")))
            table.add_row(*row)
        console.print(table)

    quick_wins = d.get("quick_wins")
    if quick_wins:
        console.print("\n[bold]Quick wins[/bold]")
        for rec in quick_wins:
            console.print(Text(f"  - {rec['title']}: {rec['action']}"))

    if verbose:
        _render_meta(console, result)


# ── Show ──────────────────────────────────────────────────────────────


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the merged configuration, one section per layer."""
    d = result.data
    if "config" in d:
        config = dict(d["config"])
        metadata = config.pop("metadata", {})
        sources = metadata.get("layerSources", {})
        for layer, content in config.items():
            _layer_section(console, layer, content, sources.get(layer, []))
        scopes = ", ".join(metadata.get("scopesIncluded", []))
        console.print(f"\n[lc.key]Scopes:[/lc.key] [lc.scope]{scopes}[/lc.scope]")
        console.print(f"[lc.key]Merged at:[/lc.key] {metadata.get('mergedAt', '')}")
    else:
        _layer_section(console, d["layer"], d.get("content", {}), d.get("sources", []))

    if verbose:
        _render_meta(console, result)


def _layer_section(
    console: Console,
    layer: str,
    content: dict[str, Any],
    sources: list[str],
) -> None:
    console.print(f"\n[lc.layer]{layer}[/lc.layer]")
    for source in sources:
        console.print(Text(f"  {source}", style="lc.path"))
    if content:
        console.print(JSON.from_data(content, indent=2))
    else:
        console.print("  (empty)", style="dim")


# ── Sources / scopes ──────────────────────────────────────────────────


def _render_sources(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render which scopes contributed to each layer."""
    table = _table(("Layer", "lc.layer"), ("Scopes", "lc.scope"), ("Content", ""))
    if verbose:
        table.add_column("Sources", style="lc.path")

    for entry in result.data.get("layers", []):
        content = Text("yes", style="lc.ok") if entry.get("has_content") else Text("no", style="dim")
        row: list[Any] = [
            str(entry.get("layer", "")),
            ", ".join(entry.get("scopes", [])) or "-",
            content,
        ]
        if verbose:
            row.append("\n".join(entry.get("sources", [])))
        table.add_row(*row)

    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_scopes(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the scope directories checked, strongest first."""
    d = result.data
    _field(console, "cwd", d.get("cwd", ""))

    table = _table(("Scope", "lc.scope"), ("Path", "lc.path"), ("Status", ""))
    for entry in d.get("directories", []):
        status = Text("found", style="lc.ok") if entry.get("exists") else Text("missing", style="dim")
        table.add_row(str(entry.get("scope", "")), str(entry.get("path", "")), status)
    console.print(table)

    resolution = d.get("resolution", {})
    order = " > ".join(resolution.get("available", [])) or "-"
    console.print(f"\n[lc.key]Resolution:[/lc.key] {order}")
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Ops without a dedicated renderer: an OK line, then one line per data key."""
    console.print(Text.assemble(("OK", "lc.ok"), (f"  {result.op}", "lc.op")))
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "doctor": _render_doctor,
    "show": _render_show,
    "sources": _render_sources,
    "scopes": _render_scopes,
}
