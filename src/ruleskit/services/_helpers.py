"""Shared service-layer helper functions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def parse_options(pairs: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings into a dict (later keys win).

    Examples:
        >>> parse_options(["state_management=redux", "signals=true"])
        {'state_management': 'redux', 'signals': 'true'}

    Raises:
        ValueError: If an entry has no ``=`` or an empty key.
    """
    options: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip().replace("-", "_")
        if not sep or not key:
            msg = f"Expected KEY=VALUE, got {pair!r}"
            raise ValueError(msg)
        options[key] = value.strip()
    return options


def relpaths(paths: list[Path], root: Path) -> list[str]:
    """Render *paths* relative to *root* where possible, POSIX-style."""
    rendered: list[str] = []
    for path in paths:
        try:
            rendered.append(path.relative_to(root).as_posix())
        except ValueError:
            rendered.append(path.as_posix())
    return rendered
