"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ruleskit.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from ruleskit.domain.models import BackupPolicy


class GenerationConfig(BaseModel):
    """[generation] section."""

    model_config = {"frozen": True}

    batch_size: int = Field(default=10, ge=1)
    authoring_extension: str = ".md"
    published_extension: str = ".mdc"
    rules_subdir: str = ".cursor/rules/rules-kit"
    docs_subdir: str = "docs"
    on_existing: BackupPolicy = BackupPolicy.BACKUP
    include_global: bool = True

    @field_validator("authoring_extension", "published_extension")
    @classmethod
    def _dotted(cls, value: str) -> str:
        return value if value.startswith(".") else f".{value}"


class TemplatesConfig(BaseModel):
    """[templates] section."""

    model_config = {"frozen": True}

    directory: Path | None = None
