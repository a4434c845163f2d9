"""Kit configuration models (``kit-config.json`` / ``kit-config.yaml``).

The file is a flat mapping: ``global`` and ``mcp_tools`` are reserved keys,
every other top-level key describes one stack::

    {
      "global": {"always": ["code-standards.md"]},
      "mcp_tools": {"github": {"name": "GitHub", "description": "..."}},
      "laravel": {
        "globs": ["<root>/app/**/*.php"],
        "pattern_rules": {"<root>/routes/**/*.php": ["routes/route-organization.md"]},
        "architectures": {"standard": {"name": "Standard MVC", "globs": [...]}},
        "version_ranges": {"10": {"range_name": "v10-11", "name": "Laravel 10-11"}}
      }
    }

Version range entries may also be a bare string (``"10": "v10-11"``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ruleskit.domain.models import LayerKind

ROOT_TOKEN = "<root>/"
GLOBAL_GLOBS = "**/*"
_RESERVED_KEYS = frozenset({"global", "mcp_tools"})


def _as_list(value: str | list[str]) -> list[str]:
    return [value] if isinstance(value, str) else list(value)


def project_prefix(project_path: str | None) -> str:
    """Prefix substituted for ``<root>/`` in configured globs."""
    if not project_path or project_path in (".", "./"):
        return ""
    return project_path.rstrip("/") + "/"


class GlobalRulesConfig(BaseModel):
    """``global`` section."""

    model_config = ConfigDict(frozen=True)

    always: list[str] = Field(default_factory=list)


class McpToolConfig(BaseModel):
    """One ``mcp_tools`` entry."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class VersionRangeConfig(BaseModel):
    """One ``version_ranges`` entry."""

    model_config = ConfigDict(frozen=True)

    range_name: str
    name: str | None = None


class ArchitectureConfig(BaseModel):
    """One ``architectures`` entry of a stack."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    globs: list[str] = Field(default_factory=list)
    pattern_rules: dict[str, str | list[str]] = Field(default_factory=dict)


class StackConfig(BaseModel):
    """Per-stack section."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str | None = None
    globs: list[str] = Field(default_factory=list)
    pattern_rules: dict[str, str | list[str]] = Field(default_factory=dict)
    architectures: dict[str, ArchitectureConfig] = Field(default_factory=dict)
    version_ranges: dict[str, VersionRangeConfig] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _expand_version_ranges(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        ranges = data.get("version_ranges")
        if isinstance(ranges, dict):
            data = {
                **data,
                "version_ranges": {
                    str(key): {"range_name": value} if isinstance(value, str) else value
                    for key, value in ranges.items()
                },
            }
        return data


class KitConfig(BaseModel):
    """Root kit configuration."""

    model_config = ConfigDict(frozen=True)

    global_rules: GlobalRulesConfig = Field(default_factory=GlobalRulesConfig)
    mcp_tools: dict[str, McpToolConfig] = Field(default_factory=dict)
    stacks: dict[str, StackConfig] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_stacks(cls, data: Any) -> Any:
        """Accept the flat on-disk layout (stacks as top-level keys)."""
        if not isinstance(data, dict) or "stacks" in data or "global_rules" in data:
            return data
        return {
            "global_rules": data.get("global") or {},
            "mcp_tools": data.get("mcp_tools") or {},
            "stacks": {
                key: value
                for key, value in data.items()
                if key not in _RESERVED_KEYS and isinstance(value, dict)
            },
        }

    # ------------------------------------------------------------------
    # Version lookups
    # ------------------------------------------------------------------

    def available_versions(self, stack: str) -> list[str]:
        """Version keys configured for *stack*, in file order."""
        config = self.stacks.get(stack)
        return list(config.version_ranges) if config else []

    def map_version_to_range(self, stack: str, version: str | None) -> str | None:
        """Map a detected version to its range directory name.

        Tries the exact key first (``"10.2"``), then the major version.
        """
        config = self.stacks.get(stack)
        if not version or config is None:
            return None
        ranges = config.version_ranges
        cleaned = version.strip().lstrip("vV^~=")
        for candidate in (version, cleaned, cleaned.split(".")[0]):
            if candidate in ranges:
                return ranges[candidate].range_name
        return None

    def formatted_version_name(self, stack: str, version_range: str | None) -> str | None:
        """Configured display name for *version_range*, or None."""
        if not version_range:
            return None
        config = self.stacks.get(stack)
        if config is not None:
            if version_range in config.version_ranges:
                entry = config.version_ranges[version_range]
                if entry.name:
                    return entry.name
            for entry in config.version_ranges.values():
                if entry.range_name == version_range and entry.name:
                    return entry.name
        return None

    def architecture_name(self, stack: str, architecture: str) -> str:
        config = self.stacks.get(stack)
        arch = config.architectures.get(architecture) if config else None
        if arch is not None and arch.name:
            return arch.name
        return " ".join(word.capitalize() for word in architecture.split("-"))

    # ------------------------------------------------------------------
    # Frontmatter defaults
    # ------------------------------------------------------------------

    def rule_defaults(
        self,
        file_name: str,
        kinds: set[LayerKind],
        *,
        stack: str | None = None,
        architecture: str | None = None,
        project_path: str | None = None,
    ) -> dict[str, Any]:
        """Configured frontmatter for a rule, applied beneath document values.

        *kinds* are the layer kinds that contributed documents to the output.
        Global rules get ``globs: "**/*"`` and ``alwaysApply`` from
        ``global.always``. Stack rules get the stack globs, overridden by a
        matching ``pattern_rules`` entry, then by architecture globs and
        pattern rules when an architecture layer contributed.
        """
        defaults: dict[str, Any] = {}
        if file_name in self.global_rules.always:
            defaults["alwaysApply"] = True

        if LayerKind.GLOBAL in kinds:
            defaults["globs"] = GLOBAL_GLOBS
            defaults.setdefault("alwaysApply", False)
            return defaults

        config = self.stacks.get(stack) if stack else None
        if config is None or LayerKind.TOOL in kinds:
            return defaults

        prefix = project_prefix(project_path)
        if config.globs:
            defaults["globs"] = ",".join(g.replace(ROOT_TOKEN, prefix) for g in config.globs)
        pattern = _match_pattern_rule(config.pattern_rules, file_name)
        if pattern is not None:
            defaults["globs"] = pattern.replace(ROOT_TOKEN, prefix)

        arch = config.architectures.get(architecture) if architecture else None
        if arch is not None and LayerKind.ARCHITECTURE in kinds:
            if arch.globs:
                defaults["globs"] = ",".join(g.replace(ROOT_TOKEN, prefix) for g in arch.globs)
            pattern = _match_pattern_rule(arch.pattern_rules, file_name)
            if pattern is not None:
                defaults["globs"] = pattern.replace(ROOT_TOKEN, prefix)
        return defaults


def _match_pattern_rule(pattern_rules: dict[str, str | list[str]], file_name: str) -> str | None:
    """Return the glob whose rule list names *file_name* (last match wins)."""
    matched: str | None = None
    for pattern, rules in pattern_rules.items():
        if any(rule.rsplit("/", 1)[-1] == file_name for rule in _as_list(rules)):
            matched = pattern
    return matched
