"""Core value types shared by the resolver, merger and generator.

All types are immutable once created. Documents, output units and backup
snapshots live for one generation run; only their files outlive it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LayerKind(StrEnum):
    """Precedence levels, from least to most specific."""

    GLOBAL = "global"
    BASE = "base"
    ARCHITECTURE = "architecture"
    VERSION = "version"
    TOOL = "tool"


class BackupPolicy(StrEnum):
    """What to do when the destination tree already exists."""

    BACKUP = "backup"
    OVERWRITE = "overwrite"
    ABORT = "abort"


@dataclass(frozen=True)
class Layer:
    """One source directory contributing documents at a precedence level.

    Attributes:
        kind: Precedence level.
        path: Absolute source directory (known to exist).
        name: Directory key, e.g. ``base``, ``v10-11`` or a tool name.
        label: Human label used in merged-body separators.
        output_subdir: Where published documents land under the rules dir.
        mirror_subdir: Where documentation mirrors land under the docs dir,
            or ``None`` when the layer is never mirrored.
    """

    kind: LayerKind
    path: Path
    name: str
    label: str
    output_subdir: PurePosixPath
    mirror_subdir: PurePosixPath | None = None


@dataclass(frozen=True)
class LayerProfile:
    """Selection of layers for one run."""

    stack: str
    architecture: str | None = None
    version_range: str | None = None
    detected_version: str | None = None
    include_global: bool = True
    tool_names: tuple[str, ...] = ()
    options: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Document:
    """A parsed source file.

    ``frontmatter_error`` is set when the file's metadata block was malformed
    and was recovered as empty frontmatter with the raw text as body.
    """

    source_path: Path
    layer: Layer
    frontmatter: dict[str, Any]
    body: str
    frontmatter_error: str | None = None

    @property
    def name(self) -> str:
        return self.source_path.name

    @property
    def kind(self) -> LayerKind:
        return self.layer.kind


@dataclass(frozen=True)
class OutputUnit:
    """One artifact to write. ``mirror`` units go under the docs directory."""

    target_relative_path: PurePosixPath
    merged_frontmatter: dict[str, Any]
    merged_body: str
    mirror: bool = False
    sources: tuple[Path, ...] = ()

    @property
    def key(self) -> tuple[bool, PurePosixPath]:
        return (self.mirror, self.target_relative_path)


@dataclass(frozen=True)
class BackupSnapshot:
    """A completed copy of the destination tree taken before a run."""

    original_path: Path
    backup_path: Path
    timestamp: datetime


class MetadataContext(BaseModel):
    """Read-only run context supplied by the CLI/detection collaborator.

    Field names are snake_case; template placeholders use the camelCase
    aliases (``{projectPath}``, ``{detectedVersion}``, ...).
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    stack: str
    architecture: str | None = None
    detected_version: str | None = None
    version_range: str | None = None
    formatted_version_name: str | None = None
    project_path: str = "."
    cursor_path: str = "."
    debug: bool = False
    extra: dict[str, str] = Field(default_factory=dict)

    def template_variables(self) -> dict[str, Any]:
        """Placeholder name -> value for every field that has a value.

        ``debug`` is a run flag, not template data, and is never exposed.
        ``extra`` entries are merged in without overriding named fields.
        """
        variables = self.model_dump(by_alias=True, exclude={"debug", "extra"}, exclude_none=True)
        return {**self.extra, **variables}
