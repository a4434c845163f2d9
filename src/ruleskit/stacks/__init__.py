"""Stack capability profiles and their registry."""

from ruleskit.stacks.base import GenericStack, OptionLayer, StackProfile
from ruleskit.stacks.registry import StackRegistry

__all__ = ["GenericStack", "OptionLayer", "StackProfile", "StackRegistry"]
