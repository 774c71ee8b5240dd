"""Command: which scopes contributed to each layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from layerctl.commands._base import LayerctlCommand

if TYPE_CHECKING:
    from layerctl.commands._context import AppContext


@click.command(
    cls=LayerctlCommand,
    examples="""\
  layerctl sources
  layerctl -v sources
  layerctl --json sources""",
)
@click.pass_obj
def sources(app: AppContext) -> None:
    """List the scopes and files behind each layer."""
    app.emit(app.doctor_service().sources())
