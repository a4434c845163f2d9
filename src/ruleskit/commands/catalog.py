"""Command group: list what the template kit offers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ruleskit.commands._base import RulesKitGroup
from ruleskit.services.catalog import CatalogService

if TYPE_CHECKING:
    from ruleskit.commands._context import AppContext

_CATALOG_EXAMPLES = """\
  ruleskit catalog stacks
  ruleskit catalog tools
  ruleskit catalog architectures nextjs
  ruleskit catalog versions laravel
  ruleskit --json catalog stacks"""

_templates_option = click.option(
    "--templates-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Template kit directory (default: packaged templates).",
)


@click.group(cls=RulesKitGroup, examples=_CATALOG_EXAMPLES)
def catalog() -> None:
    """List stacks, tools, architectures and versions in the template kit."""


@catalog.command(examples="  ruleskit catalog stacks\n  ruleskit -q catalog stacks")
@_templates_option
@click.pass_obj
def stacks(app: AppContext, templates_dir: str | None) -> None:
    """List stacks with templates or configuration."""
    app.use_templates(templates_dir)
    app.emit(CatalogService(app.kit).stacks())


@catalog.command(examples="  ruleskit catalog tools")
@_templates_option
@click.pass_obj
def tools(app: AppContext, templates_dir: str | None) -> None:
    """List MCP tools with rule templates."""
    app.use_templates(templates_dir)
    app.emit(CatalogService(app.kit).tools())


@catalog.command(examples="  ruleskit catalog architectures laravel")
@click.argument("stack")
@_templates_option
@click.pass_obj
def architectures(app: AppContext, stack: str, templates_dir: str | None) -> None:
    """List architectures available for STACK."""
    app.use_templates(templates_dir)
    app.emit(CatalogService(app.kit).architectures(stack))


@catalog.command(examples="  ruleskit catalog versions laravel")
@click.argument("stack")
@_templates_option
@click.pass_obj
def versions(app: AppContext, stack: str, templates_dir: str | None) -> None:
    """List configured versions and overlay directories for STACK."""
    app.use_templates(templates_dir)
    app.emit(CatalogService(app.kit).versions(stack))
