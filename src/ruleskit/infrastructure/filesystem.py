"""Filesystem operations for template layers and generated output.

Pure parsing/rendering lives in :mod:`ruleskit.domain.frontmatter`
(dependency direction: infrastructure -> domain). This module handles the
actual file I/O, directory listing and output path resolution.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from ruleskit.domain.frontmatter import extract_document
from ruleskit.domain.models import Document

if TYPE_CHECKING:
    from ruleskit.domain.models import Layer

# ---------------------------------------------------------------------------
# Template side
# ---------------------------------------------------------------------------


def list_documents(directory: Path, extension: str) -> tuple[str, ...]:
    """File names in *directory* ending with *extension* (non-recursive, sorted).

    A missing directory yields an empty tuple.
    """
    if not directory.is_dir():
        return ()
    return tuple(sorted(p.name for p in directory.iterdir() if p.is_file() and p.name.endswith(extension)))


def read_document(path: Path, layer: Layer) -> Document:
    """Read and parse one source file into a :class:`Document`."""
    raw = path.read_text(encoding="utf-8-sig")
    parsed = extract_document(raw)
    return Document(
        source_path=path,
        layer=layer,
        frontmatter=parsed.frontmatter,
        body=parsed.body,
        frontmatter_error=parsed.error,
    )


def ensure_within(root: Path, path: Path) -> Path:
    """Return *path*, refusing anything that escapes *root*.

    Raises:
        ValueError: If *path* resolves outside *root*.
    """
    if not path.resolve().is_relative_to(root.resolve()):
        msg = f"Path escapes template root: {path}"
        raise ValueError(msg)
    return path


# ---------------------------------------------------------------------------
# Output side
# ---------------------------------------------------------------------------


def format_rules_path(cursor_path: str | Path, rules_subdir: str) -> Path:
    """Rules directory for a ``.cursor`` location (``"."`` means cwd)."""
    base = Path(cursor_path) if str(cursor_path) not in ("", ".") else Path()
    return base / rules_subdir


def published_name(name: str, authoring_extension: str, published_extension: str) -> str:
    """Rewrite the authoring extension (``.md``) to the published one (``.mdc``)."""
    if name.endswith(authoring_extension):
        return name[: -len(authoring_extension)] + published_extension
    return name


def output_path(root: Path, relative: PurePosixPath) -> Path:
    return root.joinpath(*relative.parts)


def write_text(path: Path, content: str) -> None:
    """Write *content* to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
