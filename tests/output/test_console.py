"""Tests for the console factory and layer styles."""

from __future__ import annotations

from ruleskit.output.console import create_console, get_output, style_for_layer


def test_console_renders_to_buffer() -> None:
    console = create_console(no_color=True)
    console.print("[rk.ok]OK[/rk.ok] done")
    assert get_output(console) == "OK done\n"


def test_theme_styles_resolve() -> None:
    console = create_console()
    for kind in ("global", "base", "architecture", "version", "tool"):
        assert console.get_style(style_for_layer(kind))


def test_unknown_layer_unstyled() -> None:
    assert style_for_layer("plugin") == ""
