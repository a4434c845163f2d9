"""StackProfile — per-stack capability interface.

Each supported stack is one subclass registered in the
:class:`~ruleskit.stacks.registry.StackRegistry`. The resolver asks the
profile which version overlay directories to try and which option layers
(testing rules, state management, ...) the stack contributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from pathlib import Path

    from ruleskit.domain.models import LayerProfile


@dataclass(frozen=True)
class OptionLayer:
    """An extra stack directory selected by a profile option."""

    path: Path
    name: str
    label: str


class StackProfile:
    """Default behaviour shared by every stack.

    Subclasses set :attr:`name` and override the hooks they need.
    """

    name: ClassVar[str] = "generic"
    display_name: ClassVar[str] = ""

    def title(self) -> str:
        return self.display_name or self.name[:1].upper() + self.name[1:]

    def version_candidates(self, profile: LayerProfile) -> list[str]:
        """Overlay directory names to try, least to most specific.

        ``version_range`` first, then ``v<major>`` and ``v<major>.<minor>``
        derived from the detected version. Duplicates are dropped.
        """
        candidates: list[str] = []
        if profile.version_range:
            candidates.append(profile.version_range)
        if profile.detected_version:
            parts = profile.detected_version.strip().lstrip("vV^~=").split(".")
            if parts and parts[0].isdigit():
                candidates.append(f"v{parts[0]}")
                if len(parts) > 1 and parts[1].isdigit():
                    candidates.append(f"v{parts[0]}.{parts[1]}")
        return list(dict.fromkeys(candidates))

    def architecture_dirs(self, architecture: str) -> list[str]:
        """Architecture directory names selected by *architecture*."""
        return [architecture]

    def option_layers(self, stack_dir: Path, profile: LayerProfile) -> list[OptionLayer]:
        """Extra directories enabled by ``profile.options``; none by default."""
        return []

    def format_version_name(self, version_range: str) -> str:
        """Fallback display name when the kit config has none."""
        return f"{self.title()} {version_range.lstrip('v').replace('-', ' to ')}"


class GenericStack(StackProfile):
    """Fallback for stacks with templates but no dedicated profile."""

    def __init__(self, name: str = "generic") -> None:
        self.name = name  # type: ignore[misc]
