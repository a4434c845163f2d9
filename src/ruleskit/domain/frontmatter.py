"""Frontmatter codec for rule fragments.

Rule fragments carry a flat ``key: value`` block between two ``---`` marker
lines. The block is parsed line by line instead of as YAML: Cursor globs
such as ``**/*.ts`` are not valid YAML scalars, yet they are the most common
value in a rule file. Supported value forms:

- bracketed lists: ``globs: [src/**/*.ts, 'a, b', "c"]``
- block lists: ``globs:`` followed by ``- item`` lines
- booleans: ``true`` / ``false`` (case-insensitive)
- single- or double-quoted strings, and bare strings

INVARIANT: parsing never raises. A malformed block (missing closing marker,
a line that is not ``key: value``) yields ``({}, original_text)`` so the
document can still be generated without metadata.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

FRONTMATTER_DELIMITER = "---"

# Recognized keys render first, in this order; the rest follow alphabetically.
RECOGNIZED_KEY_ORDER: list[str] = ["description", "globs", "alwaysApply", "title"]

_KEY_LINE = re.compile(r"^([A-Za-z_][\w.-]*)\s*:(.*)$")
_LIST_ITEM = re.compile(r"^\s*-(?:\s+(.*))?$")
_ESCAPE = re.compile(r"\\(.)")
_ESCAPE_CHARS = {"n": "\n", "t": "\t"}
_BOOL_WORDS = {"true": True, "false": False}


class FrontmatterError(ValueError):
    """Raised internally for an unparsable block; never escapes :func:`extract`."""


@dataclass(frozen=True)
class ParsedDocument:
    """Result of :func:`extract_document`.

    ``error`` is set when a metadata block was present but unusable; in that
    case ``frontmatter`` is empty and ``body`` is the untouched input.
    """

    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    error: str | None = None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def extract_document(raw: str) -> ParsedDocument:
    """Split *raw* into frontmatter and body, recording any recovery."""
    raw = raw.removeprefix("\ufeff")
    normalized = raw.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return ParsedDocument({}, raw)

    end_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONTMATTER_DELIMITER:
            end_idx = i
            break

    if end_idx is None:
        return ParsedDocument({}, raw, error="missing closing '---' marker")

    try:
        fm = _parse_block(lines[1:end_idx])
    except FrontmatterError as exc:
        return ParsedDocument({}, raw, error=str(exc))

    body = "\n".join(lines[end_idx + 1 :])
    if body.startswith("\n"):
        body = body[1:]
    return ParsedDocument(fm, body)


def extract(raw: str) -> tuple[dict[str, Any], str]:
    """Return ``(frontmatter, body)`` for *raw*; ``({}, raw)`` when malformed."""
    parsed = extract_document(raw)
    return parsed.frontmatter, parsed.body


def _parse_block(lines: list[str]) -> dict[str, Any]:
    fm: dict[str, Any] = {}
    pending: str | None = None  # key with an empty value, may own "- item" lines

    for lineno, line in enumerate(lines, start=2):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        item = _LIST_ITEM.match(line)
        if item is not None:
            if pending is None:
                msg = f"line {lineno}: list item without a key"
                raise FrontmatterError(msg)
            current = fm[pending]
            if not isinstance(current, list):
                current = []
                fm[pending] = current
            current.append(_unquote((item.group(1) or "").strip()))
            continue

        match = _KEY_LINE.match(line.rstrip())
        if match is None:
            msg = f"line {lineno}: expected 'key: value', got {stripped!r}"
            raise FrontmatterError(msg)

        key, value = match.group(1), match.group(2).strip()
        fm[key] = _parse_value(value)
        pending = key if value == "" else None

    return fm


def _parse_value(value: str) -> Any:
    if value == "":
        return ""
    if value.startswith("["):
        if not value.endswith("]"):
            msg = f"unterminated list: {value!r}"
            raise FrontmatterError(msg)
        return _split_list(value[1:-1])
    lowered = value.lower()
    if lowered in _BOOL_WORDS:
        return _BOOL_WORDS[lowered]
    return _unquote(value)


def _split_list(inner: str) -> list[str]:
    """Split the inside of ``[...]`` on commas outside quotes."""
    items: list[str] = []
    buf: list[str] = []
    quote: str | None = None
    i = 0
    while i < len(inner):
        ch = inner[i]
        if quote is not None:
            buf.append(ch)
            if quote == '"' and ch == "\\" and i + 1 < len(inner):
                buf.append(inner[i + 1])
                i += 2
                continue
            if ch == quote:
                if quote == "'" and inner[i + 1 : i + 2] == "'":
                    buf.append("'")
                    i += 2
                    continue
                quote = None
        elif ch in "\"'" and not "".join(buf).strip():
            quote = ch
            buf.append(ch)
        elif ch == ",":
            items.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
        i += 1

    if quote is not None:
        msg = f"unterminated quote in list: [{inner}]"
        raise FrontmatterError(msg)

    tail = "".join(buf).strip()
    if tail or items:
        items.append(tail)
    return [_unquote(item) for item in items]


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] == '"':
        return _ESCAPE.sub(lambda m: _ESCAPE_CHARS.get(m.group(1), m.group(1)), token[1:-1])
    if len(token) >= 2 and token[0] == token[-1] == "'":
        return token[1:-1].replace("''", "'")
    return token


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def order_frontmatter(fm: dict[str, Any]) -> dict[str, Any]:
    """Return *fm* with recognized keys first and ``None`` values dropped."""
    ordered: dict[str, Any] = {}
    for key in RECOGNIZED_KEY_ORDER:
        if key in fm and fm[key] is not None:
            ordered[key] = fm[key]

    for key in sorted(fm.keys()):
        if key not in ordered and fm[key] is not None:
            ordered[key] = fm[key]

    return ordered


def serialize(frontmatter: dict[str, Any]) -> str:
    """Render *frontmatter* as a delimited block, including both markers.

    Output is deterministic for equal inputs, and
    ``extract(serialize(f))[0] == f`` for any *f* produced by this module.
    """
    lines = [f"{key}: {_format_value(value)}" for key, value in order_frontmatter(frontmatter).items()]
    return "\n".join([FRONTMATTER_DELIMITER, *lines, FRONTMATTER_DELIMITER]) + "\n"


def render(frontmatter: dict[str, Any], body: str) -> str:
    """Render a full document. Empty frontmatter produces the bare body."""
    if not order_frontmatter(frontmatter):
        return body
    return f"{serialize(frontmatter)}\n{body}"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_format_item(item) for item in value) + "]"
    if isinstance(value, str):
        return value if _is_plain(value) else _quote(value)
    return str(value)


def _format_item(item: Any) -> str:
    if isinstance(item, bool):
        return "true" if item else "false"
    text = str(item)
    if _is_plain(text) and not any(ch in text for ch in ",]"):
        return text
    return _quote(text)


def _is_plain(text: str) -> bool:
    """Whether *text* survives a round trip without quotes."""
    if not text or text != text.strip():
        return False
    if text.lower() in _BOOL_WORDS:
        return False
    if text[0] in "[\"'#":
        return False
    return "\n" not in text and "\t" not in text


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\t", "\\t")
    return f'"{escaped}"'
