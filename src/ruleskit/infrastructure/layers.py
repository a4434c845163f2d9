"""LayerResolver — ordered source directories for a layer profile.

Template tree layout::

    <templates>/
      global/
      stacks/<stack>/base/
      stacks/<stack>/architectures/<architecture>/
      stacks/<stack>/<option dirs>/          (testing/, state-management/<x>/, ...)
      stacks/<stack>/<version overlay>/      (v10-11/, v10/, v10.2/)
      mcp-tools/<tool>/

INVARIANT: the returned order is the override precedence consumed by the
merger, least specific first. Directories that do not exist are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from ruleskit.domain.models import Layer, LayerKind
from ruleskit.infrastructure.filesystem import ensure_within

if TYPE_CHECKING:
    from ruleskit.domain.models import LayerProfile
    from ruleskit.stacks.registry import StackRegistry

logger = logging.getLogger(__name__)

GLOBAL_DIR = "global"
STACKS_DIR = "stacks"
BASE_DIR = "base"
ARCHITECTURES_DIR = "architectures"
TOOLS_DIR = "mcp-tools"


class LayerResolver:
    """Computes the ordered layer list for a profile."""

    def __init__(self, templates_dir: Path, registry: StackRegistry) -> None:
        self._root = templates_dir
        self._registry = registry

    def stack_dir(self, stack: str) -> Path:
        return ensure_within(self._root, self._root / STACKS_DIR / stack)

    def resolve(self, profile: LayerProfile) -> list[Layer]:
        """Return existing layers for *profile*, least specific first.

        Raises:
            ValueError: If a profile name would escape the template root.
        """
        stack = self._registry.get(profile.stack)
        stack_dir = self.stack_dir(profile.stack)
        out = PurePosixPath(profile.stack)
        layers: list[Layer] = []

        if profile.include_global:
            global_dir = self._root / GLOBAL_DIR
            if self._exists(global_dir):
                mirror = PurePosixPath(GLOBAL_DIR)
                layers.append(Layer(LayerKind.GLOBAL, global_dir, GLOBAL_DIR, "Global guidance", mirror, mirror))

        base_dir = stack_dir / BASE_DIR
        if self._exists(base_dir):
            layers.append(Layer(LayerKind.BASE, base_dir, BASE_DIR, "Base guidance", out, out))

        if profile.architecture:
            arch_dirs = [
                (name, ensure_within(self._root, stack_dir / ARCHITECTURES_DIR / name))
                for name in stack.architecture_dirs(profile.architecture)
            ]
            layers.extend(
                Layer(LayerKind.ARCHITECTURE, path, name, f"Architecture-specific guidance ({name})", out, mirror)
                for (name, path), mirror in _with_mirrors(self._existing(arch_dirs), out / "architecture")
            )

        for option in stack.option_layers(stack_dir, profile):
            if self._exists(ensure_within(self._root, option.path)):
                layers.append(
                    Layer(LayerKind.ARCHITECTURE, option.path, option.name, option.label, out, out / option.name)
                )

        version_dirs = [
            (name, ensure_within(self._root, stack_dir / name)) for name in stack.version_candidates(profile)
        ]
        layers.extend(
            Layer(LayerKind.VERSION, path, name, f"Version-specific guidance ({name})", out, mirror)
            for (name, path), mirror in _with_mirrors(self._existing(version_dirs), out / "version-specific")
        )

        for tool in dict.fromkeys(profile.tool_names):
            tool_dir = ensure_within(self._root, self._root / TOOLS_DIR / tool)
            if self._exists(tool_dir):
                layers.append(
                    Layer(LayerKind.TOOL, tool_dir, tool, f"Tool guidance ({tool})", PurePosixPath(TOOLS_DIR, tool))
                )

        logger.debug("Resolved %d layers for %s: %s", len(layers), profile.stack, [str(x.path) for x in layers])
        return layers

    def _existing(self, candidates: list[tuple[str, Path]]) -> list[tuple[str, Path]]:
        return [(name, path) for name, path in candidates if self._exists(path)]

    @staticmethod
    def _exists(path: Path) -> bool:
        if path.is_dir():
            return True
        logger.debug("Layer directory not found, skipping: %s", path)
        return False


def _with_mirrors(
    found: list[tuple[str, Path]], mirror_root: PurePosixPath
) -> list[tuple[tuple[str, Path], PurePosixPath]]:
    """Pair each directory with its mirror location.

    A single directory mirrors straight into *mirror_root*; several get one
    subdirectory each so their files cannot collide.
    """
    if len(found) == 1:
        return [(found[0], mirror_root)]
    return [(entry, mirror_root / entry[0]) for entry in found]
