"""Subcommand modules for layerctl.

Provides register_commands() which uses deferred imports to keep
``layerctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from layerctl.commands.doctor import doctor
    from layerctl.commands.scopes import scopes
    from layerctl.commands.show import show
    from layerctl.commands.sources import sources

    cli.add_command(doctor)
    cli.add_command(show)
    cli.add_command(sources)
    cli.add_command(scopes)
