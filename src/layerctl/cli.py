"""Root CLI group for layerctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from layerctl import __version__
from layerctl.commands import register_commands
from layerctl.commands._base import LayerctlGroup
from layerctl.commands._context import AppContext
from layerctl.config.settings import LayerctlSettings


@click.group(cls=LayerctlGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="layerctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-C",
    "--cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Run as if started in this directory.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    cwd: Path | None,
) -> None:
    """layerctl: resolve layered agent configuration and diagnose it."""
    ctx.ensure_object(dict)
    settings = LayerctlSettings.from_cli(
        config_path=config_path,
        cwd=cwd,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
