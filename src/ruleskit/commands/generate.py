"""Command: generate rule files for a project profile."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import click
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from ruleskit.commands._base import RulesKitCommand
from ruleskit.domain.models import BackupPolicy
from ruleskit.output.console import stderr_console
from ruleskit.services._helpers import parse_options

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ruleskit.commands._context import AppContext


@contextmanager
def _progress(app: AppContext) -> Iterator[Callable[[float], None] | None]:
    """Yield a progress callback drawing a bar on stderr, or None."""
    if app.settings.json_output or app.settings.quiet:
        yield None
        return
    with Progress(
        TextColumn("[rk.op]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=stderr_console(),
        transient=True,
    ) as progress:
        task = progress.add_task("Writing rules", total=100)
        yield lambda percent: progress.update(task, completed=percent)


def _choose_policy(app: AppContext, destination: str) -> BackupPolicy:
    choice = click.prompt(
        f"{destination} already exists. What should happen to it?",
        type=click.Choice([p.value for p in BackupPolicy]),
        default=app.settings.generation.on_existing.value,
        err=True,
    )
    return BackupPolicy(choice)


@click.command(
    cls=RulesKitCommand,
    examples="""\
  ruleskit generate laravel --architecture standard --version-number 10.2
  ruleskit generate nextjs --architecture hybrid --tool github
  ruleskit generate react --option state_management=redux --mirror-docs
  ruleskit generate angular --version-number 17 --option signals=true
  ruleskit generate laravel --on-existing overwrite --no-global
  ruleskit --json generate vue --project-path ./web --cursor-path .""",
)
@click.argument("stack")
@click.option("-a", "--architecture", default=None, help="Architecture variant (e.g. standard, hybrid).")
@click.option("--version-number", "version", default=None, help="Detected framework version (e.g. 10.2).")
@click.option("--version-range", default=None, help="Version overlay directory, overriding the mapping.")
@click.option("--project-path", default=".", show_default=True, help="Project root, used in globs and docs.")
@click.option("--cursor-path", default=None, help="Directory holding .cursor (default: project path).")
@click.option("--global/--no-global", "include_global", default=None, help="Include global rules.")
@click.option("-t", "--tool", "tools", multiple=True, help="MCP tool rules to add (repeatable).")
@click.option("-o", "--option", "options", multiple=True, metavar="KEY=VALUE", help="Stack option (repeatable).")
@click.option("--mirror-docs", is_flag=True, help="Also copy source documents into the docs directory.")
@click.option(
    "--on-existing",
    type=click.Choice([p.value for p in BackupPolicy]),
    default=None,
    help="What to do when the rules directory already exists.",
)
@click.option(
    "--templates-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Template kit directory (default: packaged templates).",
)
@click.pass_obj
def generate(
    app: AppContext,
    stack: str,
    architecture: str | None,
    version: str | None,
    version_range: str | None,
    project_path: str,
    cursor_path: str | None,
    include_global: bool | None,
    tools: tuple[str, ...],
    options: tuple[str, ...],
    mirror_docs: bool,
    on_existing: str | None,
    templates_dir: str | None,
) -> None:
    """Generate rules for STACK into <cursor-path>/.cursor/rules/rules-kit."""
    from ruleskit.services.generate import GenerateService

    try:
        parsed_options = parse_options(options)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--option") from exc

    app.use_templates(templates_dir)
    svc = GenerateService(app.kit)
    cursor = cursor_path or project_path

    policy = BackupPolicy(on_existing) if on_existing else None
    if policy is None and app.interactive:
        destination = svc.destination(cursor)
        if destination.exists():
            policy = _choose_policy(app, str(destination))

    with _progress(app) as on_progress:
        result = svc.generate(
            stack,
            architecture=architecture,
            version=version,
            version_range=version_range,
            project_path=project_path,
            cursor_path=cursor,
            include_global=include_global,
            tools=tools,
            options=parsed_options,
            mirror_docs=mirror_docs,
            policy=policy,
            on_progress=on_progress,
        )
    app.emit(result)
