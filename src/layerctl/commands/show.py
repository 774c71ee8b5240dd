"""Command: print the merged configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from layerctl.commands._base import LayerctlCommand
from layerctl.domain.layers import LayerType

if TYPE_CHECKING:
    from layerctl.commands._context import AppContext


@click.command(
    cls=LayerctlCommand,
    examples="""\
  layerctl show
  layerctl show --layer rules
  layerctl --json show --layer goals""",
)
@click.option(
    "--layer",
    type=click.Choice([lt.value for lt in LayerType]),
    default=None,
    help="Show a single layer.",
)
@click.pass_obj
def show(app: AppContext, layer: str | None) -> None:
    """Show the configuration merged across all scopes."""
    app.emit(app.doctor_service().show(layer=layer))
