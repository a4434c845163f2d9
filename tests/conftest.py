"""Shared pytest fixtures and test helpers for ruleskit tests."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from ruleskit.config.models import TemplatesConfig
from ruleskit.config.settings import RulesKitSettings
from ruleskit.infrastructure.kit import Kit
from ruleskit.services.telemetry import disable_telemetry

KIT_CONFIG = """\
{
  "global": {"always": ["standards.md"]},
  "mcp_tools": {"github": {"name": "GitHub", "description": "GitHub MCP server"}},
  "demo": {
    "globs": ["<root>/src/**/*.demo"],
    "architectures": {
      "standard": {"name": "Standard Layout", "globs": ["<root>/app/**/*.demo"]}
    },
    "version_ranges": {
      "10": {"range_name": "v10", "name": "Demo 10"},
      "11": "v11"
    }
  }
}
"""

# Minimal template kit used across test modules (relative path -> content).
DEMO_TREE: dict[str, str] = {
    "kit-config.json": KIT_CONFIG,
    "global/standards.md": "---\ndescription: Standards for {stack}\n---\nBe consistent.\n",
    "stacks/demo/base/rules.md": '---\nglobs: "*.x"\nalwaysApply: false\n---\nBase guidance for {stack}.\n',
    "stacks/demo/base/intro.md": "---\ndescription: Intro\n---\nProject at {projectPath}.\n",
    "stacks/demo/architectures/standard/layout.md": "---\ndescription: Layout\n---\nUse folders.\n",
    "stacks/demo/v10/rules.md": '---\nglobs: "*.y"\n---\nVersion guidance.\n',
    "mcp-tools/github/github.md": "---\ndescription: GitHub usage\n---\nOpen issues first.\n",
}


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create *files* (relative path -> content) under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Relative path -> bytes for every file under *root*."""
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep RULESKIT_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("RULESKIT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    """Verbose CLI runs enable telemetry in the test thread; switch it off after."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Template kit with the demo stack, one global rule and one tool."""
    return write_tree(tmp_path / "templates", DEMO_TREE)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def settings(project_dir: Path, templates_dir: Path) -> RulesKitSettings:
    return RulesKitSettings.from_cli(
        project_root=project_dir,
        templates=TemplatesConfig(directory=templates_dir),
    )


@pytest.fixture
def kit(settings: RulesKitSettings) -> Kit:
    """Kit over the demo templates, without entry-point plugin discovery."""
    return Kit(settings, load_plugins=False)


@pytest.fixture
def _isolated_project(project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run with CWD at the temp project so relative output stays in tmp."""
    monkeypatch.chdir(project_dir)
