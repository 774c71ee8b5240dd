"""Click classes that add an ``--examples`` flag to layerctl commands.

``--help`` stays short; ``layerctl doctor --examples`` prints a few
ready-to-paste invocations instead.
"""

from __future__ import annotations

from typing import Any

import click


class _ExamplesMixin:
    """Accept an ``examples=`` keyword and expose it as an eager flag."""

    examples: str | None
    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._print_examples,
                    help="Show usage examples.",
                )
            )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(f"Examples for '{ctx.command_path}':\n\n{self.examples}")
            ctx.exit(0)


class LayerctlCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class LayerctlGroup(_ExamplesMixin, click.Group):
    """Group whose ``@group.command()`` subcommands are :class:`LayerctlCommand`."""

    command_class = LayerctlCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
