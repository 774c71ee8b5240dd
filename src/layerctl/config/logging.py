"""Log routing for layerctl.

stdout carries command results (``--json`` output must stay parseable), so
every log line goes to stderr: a console renderer by default, one JSON
object per line with ``--log-json``. Loggers from ``logging.getLogger``
and ``structlog.get_logger`` share the same handler and processors.

Levels: ``layerctl.*`` at DEBUG with ``--verbose``, ERROR with
``--quiet``, WARNING otherwise. Everything else stays at WARNING.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from structlog.types import Processor

_PACKAGE_LOGGER = "layerctl"


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(*, log_json: bool) -> logging.Handler:
    renderer: Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Install the stderr handler and set levels. Safe to call repeatedly."""
    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers = [_stderr_handler(log_json=log_json)]
    root.setLevel(logging.WARNING)

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.getLogger(_PACKAGE_LOGGER).setLevel(level)


def bind_run_context(*, cwd: Path, config_path: Path | None) -> None:
    """Attach the working directory and config file to every later log line."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        cwd=str(cwd),
        config=str(config_path) if config_path else None,
    )
