"""Merge same-named documents contributed by several layers.

Documents arrive ordered from least to most specific (the order returned by
the layer resolver). Merging is an ordered reduction:

- frontmatter: key-by-key, the last document defining a key wins; keys a
  later document omits keep the earlier value;
- body: segments concatenated in order, each later segment introduced by a
  separator naming the layer it came from.

A document whose frontmatter was recovered as empty still contributes its
raw body; it never aborts the merge of its group.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from ruleskit.domain.models import Document

log = structlog.get_logger(__name__)

SEGMENT_RULE = "---"


@dataclass(frozen=True)
class MergedDocument:
    """Frontmatter and body produced for one output name."""

    frontmatter: dict[str, Any]
    body: str
    sources: tuple[Path, ...]


@dataclass(frozen=True)
class _Accumulator:
    frontmatter: dict[str, Any]
    segments: tuple[str, ...]
    sources: tuple[Path, ...]


def merge_frontmatter(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """Merge frontmatter maps in precedence order (last definer wins).

    ``None`` values count as "not defined" and never mask an earlier value.
    """
    return reduce(_override, layers, {})


def _override(merged: Mapping[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(merged)
    for key, value in layer.items():
        if value is not None:
            result[key] = value
    return result


def segment_separator(document: Document) -> str:
    """Separator placed before *document*'s body in a merged output."""
    return f"\n\n{SEGMENT_RULE}\n\n## {document.layer.label}\n\n"


def _step(acc: _Accumulator, document: Document) -> _Accumulator:
    if document.frontmatter_error is not None:
        log.warning(
            "merge.frontmatter_recovered",
            layer=document.layer.name,
            kind=str(document.kind),
            file=document.name,
            error=document.frontmatter_error,
        )
    body = document.body.strip("\n")
    segment = f"{segment_separator(document)}{body}" if acc.segments else body
    return _Accumulator(
        frontmatter=_override(acc.frontmatter, document.frontmatter),
        segments=(*acc.segments, segment),
        sources=(*acc.sources, document.source_path),
    )


def merge(documents: Sequence[Document]) -> MergedDocument:
    """Combine *documents* (one output name, precedence order) into one unit."""
    if not documents:
        msg = "merge() needs at least one document"
        raise ValueError(msg)

    if len(documents) == 1:
        only = documents[0]
        return MergedDocument(dict(only.frontmatter), only.body, (only.source_path,))

    log.debug(
        "merge.group",
        file=documents[0].name,
        layers=[doc.layer.name for doc in documents],
    )
    acc = reduce(_step, documents, _Accumulator({}, (), ()))
    body = "".join(acc.segments)
    if documents[-1].body.endswith("\n"):
        body += "\n"
    return MergedDocument(acc.frontmatter, body, acc.sources)
