"""AppContext: per-run state shared by every layerctl command.

The root group builds one from the resolved settings and stores it in
``click.Context.obj``; commands receive it with ``@click.pass_obj``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from layerctl.config.logging import bind_run_context, configure_logging
from layerctl.output.formatters import OutputSettings, format_result
from layerctl.services.doctor import DoctorService
from layerctl.services.telemetry import disable_telemetry, enable_telemetry

if TYPE_CHECKING:
    from layerctl.config.settings import LayerctlSettings
    from layerctl.services.result import ServiceResult


class AppContext:
    """Logging, telemetry, and result output for one CLI run."""

    def __init__(self, settings: LayerctlSettings) -> None:
        self.settings = settings
        self.output = OutputSettings(
            json_output=settings.json_output,
            quiet=settings.quiet,
            verbose=settings.verbose,
        )

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )
        bind_run_context(cwd=settings.cwd, config_path=settings.config_path)
        if settings.verbose:
            enable_telemetry()
        else:
            disable_telemetry()

    def doctor_service(self) -> DoctorService:
        return DoctorService(self.settings)

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and set the exit status.

        Reports go to stdout. Load warnings go to stderr as ``WARNING:``
        lines (under ``--json`` they are already in the payload). A failed
        result goes to stderr and exits with status 1.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)

        click.echo(text)
        if not self.output.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
