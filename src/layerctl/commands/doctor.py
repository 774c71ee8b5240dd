"""Command: diagnose the resolved configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from layerctl.commands._base import LayerctlCommand

if TYPE_CHECKING:
    from layerctl.commands._context import AppContext


@click.command(
    cls=LayerctlCommand,
    examples="""\
  layerctl doctor
  layerctl doctor --errors-only
  layerctl doctor --min-severity warning
  layerctl doctor --no-recommendations
  layerctl --json doctor""",
)
@click.option(
    "--min-severity",
    type=click.Choice(["info", "warning", "error"]),
    default="info",
    help="Hide conflicts below this severity.",
)
@click.option("--errors-only", is_flag=True, help="Shortcut for --min-severity error.")
@click.option("--no-recommendations", is_flag=True, help="Skip the recommendation report.")
@click.option("--no-heuristics", is_flag=True, help="Skip cross-layer heuristic checks.")
@click.pass_obj
def doctor(
    app: AppContext,
    min_severity: str,
    errors_only: bool,
    no_recommendations: bool,
    no_heuristics: bool,
) -> None:
    """Detect conflicts, score configuration health, and suggest fixes."""
    threshold = "error" if errors_only else min_severity
    app.emit(
        app.doctor_service().doctor(
            recommendations=not no_recommendations,
            min_severity=threshold,
            heuristics=False if no_heuristics else None,
        )
    )
