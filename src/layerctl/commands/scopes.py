"""Command: scope directory discovery report."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from layerctl.commands._base import LayerctlCommand

if TYPE_CHECKING:
    from layerctl.commands._context import AppContext


@click.command(
    cls=LayerctlCommand,
    examples="""\
  layerctl scopes
  layerctl -C path/to/project scopes
  layerctl -q scopes""",
)
@click.pass_obj
def scopes(app: AppContext) -> None:
    """Show which scope directories were found, strongest first."""
    app.emit(app.doctor_service().scopes())
