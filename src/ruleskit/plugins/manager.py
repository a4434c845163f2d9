"""Plugin discovery and loading.

Discovery: entry points in the ``ruleskit.plugins`` group via pluggy's
setuptools loader, plus direct registration for in-process plugins.
Capabilities: extra stack profiles and the ``post_generate`` lifecycle hook.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

import pluggy

from ruleskit.plugins.hookspecs import RulesKitHookSpec

if TYPE_CHECKING:
    from ruleskit.stacks.registry import StackRegistry

PROJECT_NAME = "ruleskit"
ENTRY_POINT_GROUP = "ruleskit.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, registration, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RulesKitHookSpec)
        self._loaded: bool = False

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and return the names of all plugins."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Contributions
    # ------------------------------------------------------------------

    def register_stacks(self, registry: StackRegistry) -> list[str]:
        """Add plugin-provided stack profiles to *registry*.

        INVARIANT: plugin failures are warnings, never errors. Returns the
        warning messages so callers can surface them.
        """
        warnings: list[str] = []
        for plugin in self._pm.get_plugins():
            plugin_name = self._pm.get_name(plugin) or plugin.__class__.__name__
            hook = getattr(plugin, "register_stacks", None)
            if hook is None:
                continue
            try:
                profiles = hook()
            except Exception:
                logger.warning("Failed to collect stacks from plugin %s", plugin_name, exc_info=True)
                warnings.append(f"Plugin {plugin_name} failed to register stacks")
                continue
            for profile in profiles or []:
                try:
                    registry.register(profile)
                except TypeError as exc:
                    logger.warning("Skipping stack from plugin %s: %s", plugin_name, exc)
                    warnings.append(f"Plugin {plugin_name}: {exc}")
        return warnings

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Call *hook_name* on every plugin with *payload* as keyword args."""
        getattr(self._pm.hook, hook_name)(**payload)

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry points may register a class directly; hook dispatch against a
        class leaves ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True)
                continue
            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)
