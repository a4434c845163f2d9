"""Template variable substitution for ``{name}`` placeholders.

Placeholders whose name is missing from the metadata mapping (or mapped to
``None``) are left untouched, so a template never silently loses a
reference. Substitution is a single pass: replacement text is not scanned
again, which keeps repeated application stable.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

# Path-like variables rendered as "./" when empty or ".".
PATH_VARIABLES: frozenset[str] = frozenset({"projectPath"})


def normalize_path_value(value: str) -> str:
    """Keep relative references valid: ``""`` and ``"."`` become ``"./"``."""
    if value in ("", "."):
        return "./"
    return value


def _render(name: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    if name in PATH_VARIABLES:
        return normalize_path_value(text)
    return text


def substitute(text: str, metadata: Mapping[str, Any]) -> str:
    """Replace every ``{name}`` in *text* with ``metadata[name]`` when present."""

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        value = metadata.get(name)
        if value is None:
            return match.group(0)
        return _render(name, value)

    return PLACEHOLDER.sub(replace, text)


def substitute_frontmatter(frontmatter: Mapping[str, Any], metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Apply :func:`substitute` to string values and string list items."""
    result: dict[str, Any] = {}
    for key, value in frontmatter.items():
        if isinstance(value, str):
            result[key] = substitute(value, metadata)
        elif isinstance(value, list):
            result[key] = [substitute(v, metadata) if isinstance(v, str) else v for v in value]
        else:
            result[key] = value
    return result


def unresolved_placeholders(text: str, metadata: Mapping[str, Any]) -> list[str]:
    """Names of placeholders in *text* that *metadata* cannot resolve."""
    seen: list[str] = []
    for match in PLACEHOLDER.finditer(text):
        name = match.group(1)
        if metadata.get(name) is None and name not in seen:
            seen.append(name)
    return seen
