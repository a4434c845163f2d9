"""TemplateCache — process-lifetime cache of kit configuration and listings.

Owned by the :class:`~ruleskit.infrastructure.kit.Kit` and handed to
collaborators explicitly. Entries are only ever added or replaced, never
partially torn down; :meth:`TemplateCache.invalidate` drops whole entries.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ruleskit.domain.kit_config import KitConfig
from ruleskit.infrastructure.filesystem import list_documents

logger = logging.getLogger(__name__)

KIT_CONFIG_NAMES: tuple[str, ...] = ("kit-config.yaml", "kit-config.yml", "kit-config.json")


def find_kit_config(templates_dir: Path) -> Path | None:
    for name in KIT_CONFIG_NAMES:
        candidate = templates_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_kit_config(templates_dir: Path) -> KitConfig:
    """Load and validate the kit configuration under *templates_dir*.

    A missing file yields an empty config. An unparsable or invalid file is
    logged and also yields an empty config, so generation still runs with
    document-level frontmatter only.
    """
    path = find_kit_config(templates_dir)
    if path is None:
        logger.debug("No kit config under %s", templates_dir)
        return KitConfig()

    raw = path.read_text(encoding="utf-8")
    try:
        data: Any = json.loads(raw) if path.suffix == ".json" else YAML(typ="safe").load(raw)
        return KitConfig.model_validate(data or {})
    except (json.JSONDecodeError, YAMLError, ValidationError) as exc:
        logger.warning("Ignoring invalid kit config %s: %s", path, exc)
        return KitConfig()


class TemplateCache:
    """Thread-safe cache keyed by resolved template paths."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._configs: dict[Path, KitConfig] = {}
        self._listings: dict[tuple[Path, str], tuple[str, ...]] = {}

    def kit_config(self, templates_dir: Path) -> KitConfig:
        key = templates_dir.resolve()
        with self._lock:
            cached = self._configs.get(key)
        if cached is not None:
            return cached
        config = load_kit_config(templates_dir)
        with self._lock:
            self._configs[key] = config
        return config

    def listing(self, directory: Path, extension: str) -> tuple[str, ...]:
        key = (directory.resolve(), extension)
        with self._lock:
            cached = self._listings.get(key)
        if cached is not None:
            return cached
        names = list_documents(directory, extension)
        with self._lock:
            self._listings[key] = names
        return names

    def invalidate(self, templates_dir: Path | None = None) -> None:
        """Drop cached entries under *templates_dir*, or everything."""
        with self._lock:
            if templates_dir is None:
                self._configs.clear()
                self._listings.clear()
                return
            root = templates_dir.resolve()
            self._configs.pop(root, None)
            for key in [k for k in self._listings if k[0].is_relative_to(root)]:
                del self._listings[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._configs) + len(self._listings)
