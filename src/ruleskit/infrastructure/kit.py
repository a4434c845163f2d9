"""Kit — the single dependency injected into every service.

Holds resolved settings, the template root, the process-lifetime
:class:`TemplateCache`, the stack registry and the plugin manager.
"""

from __future__ import annotations

import logging
from importlib.resources import files
from pathlib import Path
from typing import TYPE_CHECKING

from ruleskit.infrastructure.cache import TemplateCache
from ruleskit.infrastructure.layers import STACKS_DIR, TOOLS_DIR, LayerResolver
from ruleskit.plugins.manager import PluginManager
from ruleskit.stacks.registry import StackRegistry

if TYPE_CHECKING:
    from ruleskit.config.settings import RulesKitSettings
    from ruleskit.domain.kit_config import KitConfig

logger = logging.getLogger(__name__)


def packaged_templates_dir() -> Path:
    """Template kit shipped inside the ``ruleskit`` package."""
    return Path(str(files("ruleskit") / "templates"))


class Kit:
    """A template kit plus everything needed to generate from it."""

    def __init__(
        self,
        settings: RulesKitSettings,
        *,
        cache: TemplateCache | None = None,
        plugins: PluginManager | None = None,
        load_plugins: bool = True,
    ) -> None:
        self.settings = settings
        configured = settings.templates.directory
        self.templates_dir: Path = configured if configured is not None else packaged_templates_dir()
        self.cache = cache or TemplateCache()
        self.stacks = StackRegistry.with_builtins()
        self.plugins = plugins or PluginManager()
        if load_plugins and not self.plugins.is_loaded:
            self.plugins.discover_and_load()
        self.warnings: list[str] = self.plugins.register_stacks(self.stacks)

    @property
    def config(self) -> KitConfig:
        return self.cache.kit_config(self.templates_dir)

    def resolver(self) -> LayerResolver:
        return LayerResolver(self.templates_dir, self.stacks)

    def stack_names(self) -> list[str]:
        """Stacks with a template directory or a kit-config entry."""
        root = self.templates_dir / STACKS_DIR
        on_disk = {p.name for p in root.iterdir() if p.is_dir()} if root.is_dir() else set()
        return sorted(on_disk | set(self.config.stacks))

    def tool_names(self) -> list[str]:
        root = self.templates_dir / TOOLS_DIR
        on_disk = {p.name for p in root.iterdir() if p.is_dir()} if root.is_dir() else set()
        return sorted(on_disk | set(self.config.mcp_tools))

    def refresh(self) -> None:
        """Forget cached config and listings for this kit."""
        self.cache.invalidate(self.templates_dir)
        logger.debug("Invalidated template cache for %s (%d entries left)", self.templates_dir, len(self.cache))
