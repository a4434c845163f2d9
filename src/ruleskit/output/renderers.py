"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a StringIO-backed Console; :func:`render_result`
dispatches on ``result.op`` and unknown ops fall through to a generic
key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from ruleskit.output.console import create_console, get_output, style_for_layer

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from ruleskit.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Plain text (no ANSI) when Rich detects no terminal, which is the case
    inside Click's CliRunner and piped output.
    """
    console = create_console()
    if result.ok:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: written files or item names."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.op == "generate":
        return "\n".join(result.data.get("files", []))
    for key in ("stacks", "tools", "architectures", "versions"):
        items = result.data.get(key)
        if isinstance(items, list):
            return "\n".join(str(_item_key(item)) for item in items)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _item_key(item: Any) -> Any:
    if isinstance(item, dict):
        for key in ("version", "key", "name"):
            if key in item:
                return item[key]
    return item


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="rk.ok"), Text(f"  {result.op}", style="rk.op"), sep="")


def _field(console: Console, key: str, value: Any) -> None:
    style = "rk.path" if key.endswith(("_dir", "_path")) else ""
    console.print(Text(f"  {key}: ", style="rk.key"), Text(str(value), style=style), sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including the telemetry span tree (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _render_telemetry_tree(console, value, indent=4)
        else:
            console.print(f"    {key}: {value}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)
    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text("ERROR", style="rk.error"), Text(f"  {result.op}", style="rk.op"), Text(" — "), msg, sep="")
    if err and err.detail:
        for key in ("path", "stack"):
            if key in err.detail:
                _field(console, key, err.detail[key])
        if verbose:
            console.print(Text("  detail:", style="dim"))
            for key, value in err.detail.items():
                console.print(f"    {key}: {value}")
    written = result.data.get("files") if result.data else None
    if written:
        _field(console, "files_written_before_failure", len(written))


# ── Generate ──────────────────────────────────────────────────────────


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "stack", d.get("stack"))
    for key in ("architecture", "formatted_version_name"):
        if d.get(key):
            _field(console, key, d[key])
    _field(console, "rules_dir", d.get("rules_dir"))
    _field(console, "files", len(d.get("files", [])))
    if d.get("docs_dir"):
        _field(console, "docs_dir", d["docs_dir"])
        _field(console, "docs", len(d.get("docs", [])))
    if d.get("backup_path"):
        _field(console, "backup_path", d["backup_path"])

    if verbose:
        console.print()
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Kind")
        table.add_column("Layer")
        table.add_column("Path", style="rk.path")
        for layer in d.get("layers", []):
            kind = layer.get("kind", "")
            table.add_row(Text(kind, style=style_for_layer(kind)), layer.get("name", ""), layer.get("path", ""))
        console.print(table)
        for rel in d.get("files", []):
            console.print(f"    {rel}")
        _render_meta(console, result)


# ── Catalog ───────────────────────────────────────────────────────────


def _catalog_table(items: list[dict[str, Any]], columns: list[str]) -> Table:
    table = Table(show_header=True, pad_edge=False, expand=False)
    for column in columns:
        table.add_column(column.replace("_", " ").title())
    for item in items:
        table.add_row(*(_cell(item.get(column)) for column in columns))
    return table


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def _catalog_renderer(key: str, columns: list[str]) -> Callable[..., None]:
    def render(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
        _status_line(console, result)
        if "stack" in result.data:
            _field(console, "stack", result.data["stack"])
        items = result.data.get(key, [])
        if items:
            console.print(_catalog_table(items, columns))
        else:
            console.print(Text(f"  no {key}", style="dim"))
        if result.data.get("overlays"):
            _field(console, "overlays", ", ".join(result.data["overlays"]))
        if verbose:
            _render_meta(console, result)

    return render


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "generate": _render_generate,
    "catalog_stacks": _catalog_renderer("stacks", ["name", "title", "versions", "architectures", "has_base"]),
    "catalog_tools": _catalog_renderer("tools", ["key", "name", "description"]),
    "catalog_architectures": _catalog_renderer("architectures", ["key", "name"]),
    "catalog_versions": _catalog_renderer("versions", ["version", "range", "name"]),
}
