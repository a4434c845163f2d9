"""Built-in stack profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ruleskit.stacks.base import OptionLayer, StackProfile

if TYPE_CHECKING:
    from pathlib import Path

    from ruleskit.domain.models import LayerProfile

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _enabled(profile: LayerProfile, option: str) -> bool:
    return profile.options.get(option, "").strip().lower() in _TRUTHY


class LaravelStack(StackProfile):
    name = "laravel"
    display_name = "Laravel"


class NextjsStack(StackProfile):
    """Next.js: the ``hybrid`` architecture combines both router layouts."""

    name = "nextjs"
    display_name = "Next.js"

    def architecture_dirs(self, architecture: str) -> list[str]:
        if architecture == "hybrid":
            return ["app", "pages"]
        return [architecture]


class ReactStack(StackProfile):
    """React: shared testing rules plus an optional state manager."""

    name = "react"
    display_name = "React"

    def option_layers(self, stack_dir: Path, profile: LayerProfile) -> list[OptionLayer]:
        layers = [OptionLayer(stack_dir / "testing", "testing", "Testing guidance")]
        manager = profile.options.get("state_management")
        if manager and manager != "none":
            layers.append(
                OptionLayer(
                    stack_dir / "state-management" / manager,
                    f"state-management/{manager}",
                    f"State management guidance ({manager})",
                )
            )
        return layers


class AngularStack(StackProfile):
    """Angular: testing rules, and signals rules when ``signals`` is enabled.

    Signals come from the version overlay when one exists; otherwise the
    shared ``signals/`` directory is used.
    """

    name = "angular"
    display_name = "Angular"

    def option_layers(self, stack_dir: Path, profile: LayerProfile) -> list[OptionLayer]:
        layers = [OptionLayer(stack_dir / "testing", "testing", "Testing guidance")]
        if _enabled(profile, "signals"):
            versioned = any((stack_dir / name).is_dir() for name in self.version_candidates(profile))
            if not versioned:
                layers.append(OptionLayer(stack_dir / "signals", "signals", "Signals guidance"))
        return layers


class VueStack(StackProfile):
    name = "vue"
    display_name = "Vue"


class NuxtStack(StackProfile):
    name = "nuxt"
    display_name = "Nuxt"


class AstroStack(StackProfile):
    name = "astro"
    display_name = "Astro"


class NestjsStack(StackProfile):
    name = "nestjs"
    display_name = "NestJS"


BUILTIN_STACKS: tuple[type[StackProfile], ...] = (
    LaravelStack,
    NextjsStack,
    ReactStack,
    AngularStack,
    VueStack,
    NuxtStack,
    AstroStack,
    NestjsStack,
)
