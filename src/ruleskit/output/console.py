"""Rich Console factory and theme for ruleskit output.

Creates Console instances that render to a StringIO buffer, preserving the
``format_result() -> str`` contract. In non-TTY environments (tests, pipes)
Rich disables color codes on its own.
"""

from __future__ import annotations

import sys
from io import StringIO

from rich.console import Console
from rich.theme import Theme

RULESKIT_THEME = Theme(
    {
        "rk.ok": "bold green",
        "rk.error": "bold red",
        "rk.warning": "bold yellow",
        "rk.op": "bold cyan",
        "rk.key": "dim",
        "rk.path": "dim",
        "rk.title": "bold",
        "rk.layer.global": "magenta",
        "rk.layer.base": "blue",
        "rk.layer.architecture": "cyan",
        "rk.layer.version": "green",
        "rk.layer.tool": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=RULESKIT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def stderr_console() -> Console:
    """Console on stderr for live widgets (progress bars)."""
    return Console(file=sys.stderr, theme=RULESKIT_THEME, highlight=False)


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_layer(kind: str) -> str:
    return f"rk.layer.{kind}" if kind in ("global", "base", "architecture", "version", "tool") else ""
