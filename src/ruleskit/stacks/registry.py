"""StackRegistry — explicit name -> StackProfile lookup.

Populated with the built-in profiles, then extended by plugins through the
``register_stacks`` hook. Stacks without a profile resolve to
:class:`~ruleskit.stacks.base.GenericStack` so any template directory under
``stacks/`` is usable.
"""

from __future__ import annotations

import inspect
import logging

from ruleskit.stacks.base import GenericStack, StackProfile
from ruleskit.stacks.builtins import BUILTIN_STACKS

logger = logging.getLogger(__name__)


class StackRegistry:
    """Name-keyed registry of stack profiles."""

    def __init__(self) -> None:
        self._profiles: dict[str, StackProfile] = {}

    @classmethod
    def with_builtins(cls) -> StackRegistry:
        registry = cls()
        for profile_cls in BUILTIN_STACKS:
            registry.register(profile_cls)
        return registry

    def register(self, profile: StackProfile | type[StackProfile]) -> StackProfile:
        """Register *profile* (class or instance), replacing any same-named entry.

        Raises:
            TypeError: If *profile* is not a StackProfile.
        """
        instance = profile() if inspect.isclass(profile) else profile
        if not isinstance(instance, StackProfile):
            msg = f"Expected a StackProfile, got {type(instance).__name__}"
            raise TypeError(msg)
        if instance.name in self._profiles:
            logger.debug("Replacing stack profile: %s", instance.name)
        self._profiles[instance.name] = instance
        return instance

    def get(self, name: str) -> StackProfile:
        profile = self._profiles.get(name)
        if profile is None:
            return GenericStack(name)
        return profile

    def names(self) -> list[str]:
        return list(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles
