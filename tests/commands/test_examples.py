"""Tests for the --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from ruleskit.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--examples"], ["ruleskit catalog stacks", "--version-number 10"]),
    (["generate", "--examples"], ["--architecture hybrid", "--option state_management=redux", "--on-existing"]),
    (["catalog", "--examples"], ["ruleskit catalog tools", "ruleskit catalog versions laravel"]),
    (["catalog", "stacks", "--examples"], ["ruleskit -q catalog stacks"]),
    (["catalog", "tools", "--examples"], ["ruleskit catalog tools"]),
    (["catalog", "architectures", "--examples"], ["ruleskit catalog architectures laravel"]),
    (["catalog", "versions", "--examples"], ["ruleskit catalog versions laravel"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    args, _ = item
    return "_".join(a for a in args if a != "--examples") or "root"


@pytest.mark.parametrize(
    ("args", "expected_keywords"),
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(cli_runner: CliRunner, args: list[str], expected_keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "Examples for" in result.output
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


@pytest.mark.parametrize("args", [["generate", "--help"], ["catalog", "--help"], ["catalog", "versions", "--help"]])
def test_examples_listed_in_help(cli_runner: CliRunner, args: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "--examples" in result.output
