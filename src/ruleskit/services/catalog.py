"""CatalogService — what the template kit offers.

Lists stacks, MCP tools, architectures and version overlays by combining the
template tree on disk with the kit configuration.
"""

from __future__ import annotations

import re

from ruleskit.infrastructure.layers import ARCHITECTURES_DIR, BASE_DIR
from ruleskit.services.base import BaseService
from ruleskit.services.result import ServiceError, ServiceResult
from ruleskit.services.telemetry import traced

_VERSION_DIR = re.compile(r"^v\d")


class CatalogService(BaseService):
    """Read-only queries over the template kit."""

    @traced
    def stacks(self) -> ServiceResult:
        config = self._kit.config
        items = []
        for name in self._kit.stack_names():
            stack_dir = self._kit.resolver().stack_dir(name)
            items.append(
                {
                    "name": name,
                    "title": self._kit.stacks.get(name).title(),
                    "has_base": (stack_dir / BASE_DIR).is_dir(),
                    "profile": name in self._kit.stacks,
                    "versions": config.available_versions(name),
                    "architectures": self._architecture_keys(name),
                }
            )
        return ServiceResult(ok=True, op="catalog_stacks", data={"stacks": items, "count": len(items)})

    @traced
    def tools(self) -> ServiceResult:
        configured = self._kit.config.mcp_tools
        items = []
        for key in self._kit.tool_names():
            entry = configured.get(key)
            items.append(
                {
                    "key": key,
                    "name": entry.name if entry else key,
                    "description": entry.description if entry else "",
                }
            )
        return ServiceResult(ok=True, op="catalog_tools", data={"tools": items, "count": len(items)})

    @traced
    def architectures(self, stack: str) -> ServiceResult:
        op = "catalog_architectures"
        if (missing := self._unknown_stack(op, stack)) is not None:
            return missing
        config = self._kit.config
        items = [
            {"key": key, "name": config.architecture_name(stack, key)} for key in self._architecture_keys(stack)
        ]
        return ServiceResult(ok=True, op=op, data={"stack": stack, "architectures": items, "count": len(items)})

    @traced
    def versions(self, stack: str) -> ServiceResult:
        op = "catalog_versions"
        if (missing := self._unknown_stack(op, stack)) is not None:
            return missing
        config = self._kit.config
        profile = self._kit.stacks.get(stack)
        items = []
        for version in config.available_versions(stack):
            range_name = config.map_version_to_range(stack, version)
            items.append(
                {
                    "version": version,
                    "range": range_name,
                    "name": config.formatted_version_name(stack, range_name)
                    or (profile.format_version_name(range_name) if range_name else None),
                }
            )
        stack_dir = self._kit.resolver().stack_dir(stack)
        overlays = (
            sorted(p.name for p in stack_dir.iterdir() if p.is_dir() and _VERSION_DIR.match(p.name))
            if stack_dir.is_dir()
            else []
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"stack": stack, "versions": items, "overlays": overlays, "count": len(items)},
        )

    def _architecture_keys(self, stack: str) -> list[str]:
        arch_root = self._kit.resolver().stack_dir(stack) / ARCHITECTURES_DIR
        on_disk = {p.name for p in arch_root.iterdir() if p.is_dir()} if arch_root.is_dir() else set()
        config = self._kit.config.stacks.get(stack)
        return sorted(on_disk | set(config.architectures if config else ()))

    def _unknown_stack(self, op: str, stack: str) -> ServiceResult | None:
        if stack in self._kit.stack_names():
            return None
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="UNKNOWN_STACK",
                message=f"No templates or configuration for stack '{stack}'",
                detail={"stack": stack, "available": self._kit.stack_names()},
            ),
        )
