"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Provides lazy Kit initialization and centralized result
emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from ruleskit.config.logging import configure_logging
from ruleskit.output.formatters import OutputSettings, format_result
from ruleskit.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from ruleskit.config.settings import RulesKitSettings
    from ruleskit.infrastructure.kit import Kit
    from ruleskit.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The kit is created on first use so ``--help`` and ``--version`` never
    touch the template tree or load plugins.
    """

    def __init__(self, settings: RulesKitSettings) -> None:
        self.settings = settings
        self._kit: Kit | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json, quiet=settings.quiet)
        if settings.verbose:
            enable_telemetry()

    @property
    def kit(self) -> Kit:
        if self._kit is None:
            from ruleskit.infrastructure.kit import Kit

            self._kit = Kit(self.settings)
        return self._kit

    def use_templates(self, directory: str | None) -> None:
        """Point the kit at *directory* for this invocation."""
        if directory is None:
            return
        templates = self.settings.templates.model_copy(update={"directory": Path(directory)})
        self.settings = self.settings.model_copy(update={"templates": templates})
        self._kit = None

    @property
    def interactive(self) -> bool:
        """Whether prompts are allowed (TTY stdin, no --no-interact/--json)."""
        if self.settings.no_interact or self.settings.json_output:
            return False
        stdin = click.get_text_stream("stdin")
        return stdin.isatty()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout and returns. Warnings go to stderr so
          they don't pollute piped output.
        * Failure: writes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
