"""Rich Console factory and theme for layerctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

LAYER_THEME = Theme(
    {
        "lc.ok": "bold green",
        "lc.error": "bold red",
        "lc.warning": "bold yellow",
        "lc.info": "cyan",
        "lc.op": "bold cyan",
        "lc.key": "dim",
        "lc.id": "bold blue",
        "lc.path": "dim",
        "lc.layer": "bold",
        "lc.scope": "magenta",
        "lc.score.healthy": "bold green",
        "lc.score.needs-attention": "bold yellow",
        "lc.score.critical": "bold red",
    }
)

_SEVERITY_STYLES: dict[str, str] = {
    "error": "lc.error",
    "warning": "lc.warning",
    "info": "lc.info",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=LAYER_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_severity(severity: str) -> str:
    """Return the Rich style name for a conflict severity."""
    return _SEVERITY_STYLES.get(severity, "")


def style_for_assessment(assessment: str) -> str:
    return f"lc.score.{assessment}" if assessment else ""
