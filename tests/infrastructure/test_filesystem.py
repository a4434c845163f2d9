"""Tests for template and output filesystem helpers."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from ruleskit.domain.models import Layer, LayerKind
from ruleskit.infrastructure.filesystem import (
    ensure_within,
    format_rules_path,
    list_documents,
    output_path,
    published_name,
    read_document,
    write_text,
)
from tests.conftest import write_tree


class TestListDocuments:
    def test_sorted_non_recursive(self, tmp_path: Path) -> None:
        write_tree(tmp_path, {"b.md": "", "a.md": "", "notes.txt": "", "nested/c.md": ""})
        assert list_documents(tmp_path, ".md") == ("a.md", "b.md")

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert list_documents(tmp_path / "absent", ".md") == ()


class TestReadDocument:
    def test_parses_frontmatter(self, tmp_path: Path) -> None:
        path = write_tree(tmp_path, {"r.md": "---\ndescription: d\n---\nBody\n"}) / "r.md"
        layer = Layer(LayerKind.BASE, tmp_path, "base", "Base guidance", PurePosixPath("demo"))
        doc = read_document(path, layer)
        assert doc.frontmatter == {"description": "d"}
        assert doc.body == "Body\n"
        assert doc.frontmatter_error is None
        assert doc.name == "r.md"
        assert doc.kind is LayerKind.BASE

    def test_records_recovery(self, tmp_path: Path) -> None:
        path = write_tree(tmp_path, {"r.md": "---\nbroken\n"}) / "r.md"
        layer = Layer(LayerKind.BASE, tmp_path, "base", "Base guidance", PurePosixPath("demo"))
        doc = read_document(path, layer)
        assert doc.frontmatter == {}
        assert doc.body == "---\nbroken\n"
        assert doc.frontmatter_error is not None

    def test_byte_order_mark_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "r.md"
        path.write_bytes("\ufeff---\ndescription: d\n---\nBody\n".encode())
        layer = Layer(LayerKind.BASE, tmp_path, "base", "Base guidance", PurePosixPath("demo"))
        doc = read_document(path, layer)
        assert doc.frontmatter == {"description": "d"}
        assert doc.body == "Body\n"


class TestOutputHelpers:
    def test_format_rules_path_default(self) -> None:
        assert format_rules_path(".", ".cursor/rules/rules-kit") == Path(".cursor/rules/rules-kit")

    def test_format_rules_path_custom(self, tmp_path: Path) -> None:
        assert format_rules_path(tmp_path, ".cursor/rules/x") == tmp_path / ".cursor" / "rules" / "x"

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("rules.md", "rules.mdc"), ("notes.markdown", "notes.markdown"), ("a.md.md", "a.md.mdc")],
    )
    def test_published_name(self, name: str, expected: str) -> None:
        assert published_name(name, ".md", ".mdc") == expected

    def test_output_path(self, tmp_path: Path) -> None:
        assert output_path(tmp_path, PurePosixPath("mcp-tools/github/x.mdc")) == tmp_path / "mcp-tools" / "github" / "x.mdc"

    def test_write_text_creates_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "c.mdc"
        write_text(target, "content")
        assert target.read_text(encoding="utf-8") == "content"


class TestEnsureWithin:
    def test_inside(self, tmp_path: Path) -> None:
        assert ensure_within(tmp_path, tmp_path / "stacks" / "demo") == tmp_path / "stacks" / "demo"

    def test_escape_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="escapes"):
            ensure_within(tmp_path / "templates", tmp_path / "templates" / ".." / "secrets")
