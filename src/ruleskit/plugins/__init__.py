"""Extension layer — plugin system via pluggy.

INVARIANT: Plugin failures are warnings, never errors.
"""

from ruleskit.plugins.hookspecs import hookimpl
from ruleskit.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
