"""Pluggy hook specifications for ruleskit.

One setup-time hook lets plugins contribute stack profiles; one lifecycle
hook fires after a generation run completes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from ruleskit.stacks.base import StackProfile

hookspec = pluggy.HookspecMarker("ruleskit")
hookimpl = pluggy.HookimplMarker("ruleskit")


class RulesKitHookSpec:
    """Hook specifications for the ruleskit plugin system."""

    @hookspec
    def register_stacks(self) -> list[StackProfile | type[StackProfile]] | None:
        """Return stack profiles to add to (or replace in) the registry."""

    @hookspec
    def post_generate(
        self,
        stack: str,
        rules_dir: str,
        files_written: int,
        backup_path: str | None,
        stats: dict[str, Any],
    ) -> None:
        """Called after a generation run completes."""
