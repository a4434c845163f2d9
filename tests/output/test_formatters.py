"""Tests for format_result output modes."""

from __future__ import annotations

import json

from ruleskit.output.formatters import OutputSettings, format_result
from ruleskit.services.result import ServiceError, ServiceResult

GENERATED = ServiceResult(
    ok=True,
    op="generate",
    data={
        "stack": "laravel",
        "rules_dir": ".cursor/rules/rules-kit",
        "files": ["laravel/best-practices.mdc", "global/code-standards.mdc"],
    },
    warnings=["Recovered malformed frontmatter: x.md"],
)


class TestFormatResult:
    def test_json_mode(self) -> None:
        parsed = json.loads(format_result(GENERATED, settings=OutputSettings(json_output=True)))
        assert parsed["ok"] is True
        assert parsed["data"]["files"] == GENERATED.data["files"]
        assert parsed["warnings"] == GENERATED.warnings

    def test_quiet_mode(self) -> None:
        text = format_result(GENERATED, settings=OutputSettings(quiet=True))
        assert text.splitlines() == ["laravel/best-practices.mdc", "global/code-standards.mdc"]

    def test_default_mode(self) -> None:
        text = format_result(GENERATED)
        assert text.startswith("OK  generate")
        assert "rules_dir: .cursor/rules/rules-kit" in text

    def test_json_takes_precedence_over_quiet(self) -> None:
        text = format_result(GENERATED, settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(text)["op"] == "generate"

    def test_quiet_error(self) -> None:
        result = ServiceResult(ok=False, op="generate", error=ServiceError(code="ABORTED", message="exists"))
        assert format_result(result, settings=OutputSettings(quiet=True)) == "ERROR: generate — exists"
