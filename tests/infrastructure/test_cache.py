"""Tests for the kit-config loader and TemplateCache."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ruleskit.infrastructure.cache import TemplateCache, load_kit_config
from tests.conftest import write_tree


class TestLoadKitConfig:
    def test_json(self, templates_dir: Path) -> None:
        config = load_kit_config(templates_dir)
        assert "demo" in config.stacks

    def test_yaml(self, tmp_path: Path) -> None:
        write_tree(
            tmp_path,
            {
                "kit-config.yaml": (
                    "global:\n  always: [standards.md]\n"
                    "demo:\n  globs: ['<root>/src/**']\n  version_ranges:\n    10: v10\n"
                )
            },
        )
        config = load_kit_config(tmp_path)
        assert config.global_rules.always == ["standards.md"]
        assert config.map_version_to_range("demo", "10") == "v10"

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_kit_config(tmp_path).stacks == {}

    def test_invalid_json_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        write_tree(tmp_path, {"kit-config.json": "{not json"})
        with caplog.at_level(logging.WARNING, logger="ruleskit"):
            config = load_kit_config(tmp_path)
        assert config.stacks == {}
        assert "Ignoring invalid kit config" in caplog.text

    def test_invalid_shape_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        write_tree(tmp_path, {"kit-config.json": '{"demo": {"globs": 5}}'})
        with caplog.at_level(logging.WARNING, logger="ruleskit"):
            config = load_kit_config(tmp_path)
        assert config.stacks == {}
        assert "Ignoring invalid kit config" in caplog.text


class TestTemplateCache:
    def test_kit_config_cached(self, templates_dir: Path) -> None:
        cache = TemplateCache()
        first = cache.kit_config(templates_dir)
        (templates_dir / "kit-config.json").write_text("{}", encoding="utf-8")
        assert cache.kit_config(templates_dir) is first

    def test_invalidate_reloads(self, templates_dir: Path) -> None:
        cache = TemplateCache()
        cache.kit_config(templates_dir)
        (templates_dir / "kit-config.json").write_text("{}", encoding="utf-8")
        cache.invalidate(templates_dir)
        assert cache.kit_config(templates_dir).stacks == {}

    def test_listing_cached_until_invalidated(self, templates_dir: Path) -> None:
        cache = TemplateCache()
        base = templates_dir / "stacks" / "demo" / "base"
        assert cache.listing(base, ".md") == ("intro.md", "rules.md")
        (base / "zz.md").write_text("new", encoding="utf-8")
        assert cache.listing(base, ".md") == ("intro.md", "rules.md")
        cache.invalidate(templates_dir)
        assert cache.listing(base, ".md") == ("intro.md", "rules.md", "zz.md")

    def test_invalidate_scoped(self, tmp_path: Path, templates_dir: Path) -> None:
        other = write_tree(tmp_path / "other", {"kit-config.json": "{}"})
        cache = TemplateCache()
        cache.kit_config(templates_dir)
        cache.kit_config(other)
        cache.invalidate(other)
        assert len(cache) == 1

    def test_invalidate_all(self, templates_dir: Path) -> None:
        cache = TemplateCache()
        cache.kit_config(templates_dir)
        cache.listing(templates_dir / "global", ".md")
        cache.invalidate()
        assert len(cache) == 0
