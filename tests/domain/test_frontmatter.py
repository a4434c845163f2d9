"""Tests for the rule frontmatter codec."""

from __future__ import annotations

from typing import Any

import pytest

from ruleskit.domain.frontmatter import extract, extract_document, order_frontmatter, render, serialize


class TestExtract:
    def test_basic_block(self) -> None:
        raw = '---\ndescription: Laravel rules\nglobs: "app/**/*.php"\nalwaysApply: false\n---\n# Title\n'
        fm, body = extract(raw)
        assert fm == {"description": "Laravel rules", "globs": "app/**/*.php", "alwaysApply": False}
        assert body == "# Title\n"

    def test_no_frontmatter(self) -> None:
        fm, body = extract("# Just a body\n")
        assert fm == {}
        assert body == "# Just a body\n"

    def test_blank_line_after_block_is_dropped(self) -> None:
        _, body = extract("---\ntitle: X\n---\n\nBody\n")
        assert body == "Body\n"

    def test_bare_glob_is_not_yaml(self) -> None:
        fm, _ = extract("---\nglobs: **/*.ts\n---\n")
        assert fm["globs"] == "**/*.ts"

    def test_bracketed_list(self) -> None:
        fm, _ = extract("---\nglobs: [src/**/*.ts, 'a, b', \"c\"]\n---\n")
        assert fm["globs"] == ["src/**/*.ts", "a, b", "c"]

    def test_block_list(self) -> None:
        fm, _ = extract("---\nglobs:\n  - src/**/*.ts\n  - 'tests/**'\n---\nbody")
        assert fm["globs"] == ["src/**/*.ts", "tests/**"]

    @pytest.mark.parametrize(("text", "expected"), [("true", True), ("False", False), ("TRUE", True)])
    def test_booleans(self, text: str, expected: bool) -> None:
        fm, _ = extract(f"---\nalwaysApply: {text}\n---\n")
        assert fm["alwaysApply"] is expected

    def test_quoted_boolean_stays_string(self) -> None:
        fm, _ = extract('---\ntitle: "true"\n---\n')
        assert fm["title"] == "true"

    def test_comments_and_blank_lines_ignored(self) -> None:
        fm, _ = extract("---\n# a comment\n\ndescription: x\n---\n")
        assert fm == {"description": "x"}

    def test_unknown_keys_preserved(self) -> None:
        fm, _ = extract("---\nowner: platform-team\npriority: 3\n---\n")
        assert fm == {"owner": "platform-team", "priority": "3"}

    def test_crlf_normalized(self) -> None:
        fm, body = extract("---\r\ndescription: x\r\n---\r\nline one\r\n")
        assert fm == {"description": "x"}
        assert body == "line one\n"

    def test_byte_order_mark_ignored(self) -> None:
        fm, body = extract("\ufeff---\ndescription: D\nalwaysApply: true\n---\nBody\n")
        assert fm == {"description": "D", "alwaysApply": True}
        assert body == "Body\n"

    def test_byte_order_mark_dropped_without_frontmatter(self) -> None:
        assert extract("\ufeff# Title\n") == ({}, "# Title\n")


class TestRecovery:
    def test_missing_closing_marker(self) -> None:
        raw = "---\ndescription: never closed\n# Body\n"
        parsed = extract_document(raw)
        assert parsed.frontmatter == {}
        assert parsed.body == raw
        assert parsed.error is not None
        assert "closing" in parsed.error

    def test_line_without_colon(self) -> None:
        raw = "---\ndescription: ok\nthis is not a pair\n---\nBody\n"
        parsed = extract_document(raw)
        assert parsed.frontmatter == {}
        assert parsed.body == raw
        assert "line 3" in (parsed.error or "")

    def test_list_item_without_key(self) -> None:
        parsed = extract_document("---\n- orphan\n---\n")
        assert parsed.frontmatter == {}
        assert parsed.error is not None

    def test_unterminated_list(self) -> None:
        parsed = extract_document("---\nglobs: [a, b\n---\n")
        assert parsed.error is not None

    def test_extract_never_raises(self) -> None:
        for raw in ("---", "---\n", "---\n---", ":\n", "---\n: x\n---\n"):
            fm, body = extract(raw)
            assert isinstance(fm, dict)
            assert isinstance(body, str)


class TestSerialize:
    def test_key_order(self) -> None:
        fm = {"zeta": "z", "title": "T", "alwaysApply": True, "alpha": "a", "globs": "*.x", "description": "d"}
        text = serialize(fm)
        keys = [line.split(":")[0] for line in text.splitlines()[1:-1]]
        assert keys == ["description", "globs", "alwaysApply", "title", "alpha", "zeta"]

    def test_deterministic(self) -> None:
        a = serialize({"globs": ["b", "a"], "description": "x"})
        b = serialize({"description": "x", "globs": ["b", "a"]})
        assert a == b

    def test_none_omitted(self) -> None:
        assert "title" not in serialize({"description": "x", "title": None})

    def test_booleans_unquoted(self) -> None:
        assert "alwaysApply: true\n" in serialize({"alwaysApply": True})

    def test_ambiguous_strings_quoted(self) -> None:
        text = serialize({"title": "false", "description": "[not a list]", "note": " padded "})
        assert 'title: "false"' in text
        assert 'description: "[not a list]"' in text
        assert 'note: " padded "' in text

    def test_render_without_frontmatter(self) -> None:
        assert render({}, "Body\n") == "Body\n"

    def test_render_with_frontmatter(self) -> None:
        assert render({"description": "d"}, "Body\n") == "---\ndescription: d\n---\n\nBody\n"

    def test_order_drops_none(self) -> None:
        assert order_frontmatter({"b": None, "a": 1}) == {"a": 1}


ROUND_TRIP_CASES: list[dict[str, Any]] = [
    {},
    {"description": "Laravel best practices", "globs": "app/**/*.php", "alwaysApply": False},
    {"globs": ["src/**/*.ts", "a, b", "it's", 'say "hi"', "x]y"], "alwaysApply": True},
    {"title": "true", "description": "#hash", "owner": "  spaced", "empty": ""},
    {"description": "line\nbreak\ttab \\ slash", "globs": []},
    {"description": "{stack} rules for {projectPath}", "notes": "'quoted'"},
]


class TestRoundTrip:
    @pytest.mark.parametrize("fm", ROUND_TRIP_CASES)
    def test_extract_serialize(self, fm: dict[str, Any]) -> None:
        parsed, _ = extract(serialize(fm) if fm else "")
        assert parsed == fm

    def test_render_round_trip_keeps_body(self) -> None:
        fm = {"description": "d", "globs": ["*.x"]}
        parsed_fm, body = extract(render(fm, "# Heading\n\ntext\n"))
        assert parsed_fm == fm
        assert body == "# Heading\n\ntext\n"
