"""BatchGenerator — resolve, merge, substitute and write rule documents.

Pipeline per run::

    resolve layers -> enumerate documents -> read (batched)
      -> group by output path -> merge -> kit defaults -> substitute
      -> backup/clear destination -> write (batched, with progress)

Reads and writes inside a batch run concurrently on worker threads; batches
run one after another and yield to the event loop between them. Output is
not transactional: when a batch fails, the batches before it stay on disk.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any, TypeVar

from ruleskit.domain.frontmatter import render
from ruleskit.domain.merge import merge, merge_frontmatter
from ruleskit.domain.models import BackupPolicy, Document, OutputUnit
from ruleskit.domain.variables import substitute, substitute_frontmatter, unresolved_placeholders
from ruleskit.infrastructure.backup import BackupManager
from ruleskit.infrastructure.filesystem import (
    format_rules_path,
    output_path,
    published_name,
    read_document,
    write_text,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ruleskit.config.models import GenerationConfig
    from ruleskit.domain.kit_config import KitConfig
    from ruleskit.domain.models import BackupSnapshot, Layer, LayerProfile, MetadataContext
    from ruleskit.infrastructure.cache import TemplateCache
    from ruleskit.infrastructure.kit import Kit
    from ruleskit.infrastructure.layers import LayerResolver

logger = logging.getLogger(__name__)

_T = TypeVar("_T")
_U = TypeVar("_U")


class GenerationState(StrEnum):
    NOT_STARTED = "not_started"
    LAYERS_RESOLVED = "layers_resolved"
    MERGING = "merging"
    WRITING = "writing"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerationError(Exception):
    """An I/O failure while reading a source or writing an output."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


@dataclass
class GenerationReport:
    """What one run did, filled in as the run progresses."""

    rules_dir: Path
    docs_dir: Path | None = None
    state: GenerationState = GenerationState.NOT_STARTED
    layers: list[Layer] = field(default_factory=list)
    documents_read: int = 0
    units: int = 0
    files_written: list[Path] = field(default_factory=list)
    recovered: list[Path] = field(default_factory=list)
    unresolved: dict[str, list[str]] = field(default_factory=dict)
    backup: BackupSnapshot | None = None
    backup_error: str | None = None
    aborted: bool = False
    error: GenerationError | None = None

    @property
    def ok(self) -> bool:
        return self.state is GenerationState.COMPLETED

    def stats(self) -> dict[str, Any]:
        return {
            "layers": len(self.layers),
            "documents_read": self.documents_read,
            "units": self.units,
            "files_written": len(self.files_written),
            "recovered": len(self.recovered),
        }


class BatchGenerator:
    """Runs the generation pipeline for one template kit.

    Collaborators are passed in explicitly; :meth:`from_kit` wires them
    from a :class:`~ruleskit.infrastructure.kit.Kit`.
    """

    def __init__(
        self,
        resolver: LayerResolver,
        cache: TemplateCache,
        kit_config: KitConfig,
        config: GenerationConfig,
        *,
        backup: BackupManager | None = None,
    ) -> None:
        self._resolver = resolver
        self._cache = cache
        self._kit_config = kit_config
        self._config = config
        self._backup = backup or BackupManager()

    @classmethod
    def from_kit(cls, kit: Kit, *, backup: BackupManager | None = None) -> BatchGenerator:
        return cls(kit.resolver(), kit.cache, kit.config, kit.settings.generation, backup=backup)

    def rules_dir(self, context: MetadataContext) -> Path:
        return format_rules_path(context.cursor_path, self._config.rules_subdir)

    def docs_dir(self, context: MetadataContext) -> Path:
        return Path(context.project_path or ".") / self._config.docs_subdir

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(
        self,
        context: MetadataContext,
        profile: LayerProfile,
        *,
        policy: BackupPolicy | None = None,
        mirror_docs: bool = False,
        on_progress: Callable[[float], None] | None = None,
    ) -> GenerationReport:
        """Generate every output for *profile* under *context*.

        I/O failures do not raise: they end the run in ``FAILED`` with
        :attr:`GenerationReport.error` set.

        Raises:
            ValueError: If a profile name would escape the template root.
        """
        policy = policy or self._config.on_existing
        report = GenerationReport(
            rules_dir=self.rules_dir(context),
            docs_dir=self.docs_dir(context) if mirror_docs else None,
        )

        report.layers = self._resolver.resolve(profile)
        report.state = GenerationState.LAYERS_RESOLVED

        if policy is BackupPolicy.ABORT and report.rules_dir.exists():
            logger.info("Destination %s exists; nothing generated", report.rules_dir)
            report.aborted = True
            return report

        try:
            report.state = GenerationState.MERGING
            documents = await self._read_all(report.layers)
            report.documents_read = len(documents)
            report.recovered = [d.source_path for d in documents if d.frontmatter_error is not None]
            for path in report.recovered:
                logger.debug("Recovered malformed frontmatter in %s", path)
            units = self._build_units(documents, context, profile, mirror_docs=mirror_docs, report=report)
            report.units = len(units)

            if not await self._prepare_destination(report, policy):
                report.aborted = True
                return report
            report.state = GenerationState.WRITING
            await self._write_all(units, report, on_progress)
        except GenerationError as exc:
            logger.warning("Generation failed: %s", exc)
            report.state = GenerationState.FAILED
            report.error = exc
            return report

        report.state = GenerationState.COMPLETED
        logger.info("Generated %d files into %s", len(report.files_written), report.rules_dir)
        return report

    # ------------------------------------------------------------------
    # Batching
    # ------------------------------------------------------------------

    async def _batched(
        self,
        items: Sequence[_T],
        work: Callable[[_T], _U],
        after_batch: Callable[[list[_U]], None] | None = None,
    ) -> list[_U]:
        """Apply *work* to *items* in concurrent, sequential batches.

        Every item of a failing batch is attempted; the first failure is
        raised after the batch's successes have been handed to *after_batch*.
        """
        results: list[_U] = []
        size = self._config.batch_size
        for start in range(0, len(items), size):
            outcomes = await asyncio.gather(
                *(asyncio.to_thread(work, item) for item in items[start : start + size]),
                return_exceptions=True,
            )
            done = [o for o in outcomes if not isinstance(o, BaseException)]
            results.extend(done)  # type: ignore[arg-type]
            if after_batch is not None:
                after_batch(done)  # type: ignore[arg-type]
            failure = next((o for o in outcomes if isinstance(o, BaseException)), None)
            if failure is not None:
                raise failure
            await asyncio.sleep(0)
        return results

    async def _read_all(self, layers: list[Layer]) -> list[Document]:
        ext = self._config.authoring_extension
        jobs = [(layer, layer.path / name) for layer in layers for name in self._cache.listing(layer.path, ext)]
        logger.debug("Reading %d documents from %d layers", len(jobs), len(layers))
        return await self._batched(jobs, _read_job)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def _build_units(
        self,
        documents: list[Document],
        context: MetadataContext,
        profile: LayerProfile,
        *,
        mirror_docs: bool,
        report: GenerationReport,
    ) -> list[OutputUnit]:
        variables = context.template_variables()
        groups: dict[PurePosixPath, list[Document]] = {}
        for doc in documents:
            groups.setdefault(doc.layer.output_subdir / doc.name, []).append(doc)

        units: dict[tuple[bool, PurePosixPath], OutputUnit] = {}
        for target, group in groups.items():
            merged = merge(group)
            defaults = self._kit_config.rule_defaults(
                target.name,
                {doc.kind for doc in group},
                stack=profile.stack,
                architecture=profile.architecture,
                project_path=context.project_path,
            )
            body = substitute(merged.body, variables)
            published = target.with_name(
                published_name(target.name, self._config.authoring_extension, self._config.published_extension)
            )
            self._note_unresolved(report, published, body, variables)
            unit = OutputUnit(
                target_relative_path=published,
                merged_frontmatter=substitute_frontmatter(merge_frontmatter(defaults, merged.frontmatter), variables),
                merged_body=body,
                sources=merged.sources,
            )
            units[unit.key] = unit

        if mirror_docs:
            for doc in documents:
                if doc.layer.mirror_subdir is None:
                    continue
                unit = OutputUnit(
                    target_relative_path=doc.layer.mirror_subdir / doc.name,
                    merged_frontmatter=substitute_frontmatter(doc.frontmatter, variables),
                    merged_body=substitute(doc.body, variables),
                    mirror=True,
                    sources=(doc.source_path,),
                )
                if unit.key in units:
                    logger.debug("Mirror %s replaced by %s", unit.target_relative_path, doc.source_path)
                units[unit.key] = unit

        return list(units.values())

    @staticmethod
    def _note_unresolved(
        report: GenerationReport, target: PurePosixPath, body: str, variables: dict[str, Any]
    ) -> None:
        names = unresolved_placeholders(body, variables)
        if names:
            report.unresolved[target.as_posix()] = names
            logger.debug("Unresolved placeholders in %s: %s", target, names)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    async def _prepare_destination(self, report: GenerationReport, policy: BackupPolicy) -> bool:
        """Apply *policy* to the rules directory; False when the run must stop."""
        try:
            outcome = await asyncio.to_thread(self._backup.prepare, report.rules_dir, policy)
        except OSError as exc:
            raise GenerationError(report.rules_dir, str(exc)) from exc
        report.backup = outcome.snapshot
        report.backup_error = outcome.error
        return not outcome.aborted

    async def _write_all(
        self,
        units: list[OutputUnit],
        report: GenerationReport,
        on_progress: Callable[[float], None] | None,
    ) -> None:
        total = len(units)
        written = 0
        _notify(on_progress, 0.0)

        def write(unit: OutputUnit) -> Path:
            root = report.docs_dir if unit.mirror and report.docs_dir is not None else report.rules_dir
            path = output_path(root, unit.target_relative_path)
            try:
                write_text(path, render(unit.merged_frontmatter, unit.merged_body))
            except OSError as exc:
                raise GenerationError(path, str(exc)) from exc
            return path

        def after_batch(paths: list[Path]) -> None:
            nonlocal written
            report.files_written.extend(paths)
            written += len(paths)
            if paths:
                _notify(on_progress, 100.0 if written == total else written * 100.0 / total)

        await self._batched(units, write, after_batch)
        if total == 0:
            _notify(on_progress, 100.0)


def _read_job(job: tuple[Layer, Path]) -> Document:
    layer, path = job
    try:
        return read_document(path, layer)
    except (OSError, UnicodeDecodeError) as exc:
        raise GenerationError(path, str(exc)) from exc


def _notify(callback: Callable[[float], None] | None, percent: float) -> None:
    if callback is not None:
        callback(percent)

