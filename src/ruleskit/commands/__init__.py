"""Subcommand modules for ruleskit.

Provides register_commands() which uses deferred imports to keep
``ruleskit --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command group and standalone commands on the root group."""
    from ruleskit.commands.catalog import catalog
    from ruleskit.commands.generate import generate

    cli.add_command(generate)
    cli.add_command(catalog)
