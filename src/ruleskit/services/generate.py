"""GenerateService — build a run context and drive the BatchGenerator.

Turns CLI-level inputs (stack, detected version, tool names, options) into a
:class:`MetadataContext` and :class:`LayerProfile`, runs the generator to
completion and folds its :class:`GenerationReport` into a ServiceResult.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from ruleskit.domain.models import LayerProfile, MetadataContext
from ruleskit.services._helpers import relpaths
from ruleskit.services.base import BaseService
from ruleskit.services.generator import BatchGenerator
from ruleskit.services.result import ServiceError, ServiceResult
from ruleskit.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from ruleskit.domain.models import BackupPolicy
    from ruleskit.infrastructure.backup import BackupManager
    from ruleskit.services.generator import GenerationReport


class GenerateService(BaseService):
    """Generate rule files for one project profile."""

    def destination(self, cursor_path: str = ".") -> Path:
        """Rules directory a run with *cursor_path* would write to."""
        return BatchGenerator.from_kit(self._kit).rules_dir(MetadataContext(stack="", cursor_path=cursor_path))

    def build_context(
        self,
        stack: str,
        *,
        architecture: str | None = None,
        version: str | None = None,
        version_range: str | None = None,
        project_path: str = ".",
        cursor_path: str = ".",
    ) -> MetadataContext:
        """Resolve the version range and display name for a run."""
        config = self._kit.config
        resolved_range = version_range or config.map_version_to_range(stack, version)
        formatted = config.formatted_version_name(stack, resolved_range)
        if formatted is None and resolved_range:
            formatted = self._kit.stacks.get(stack).format_version_name(resolved_range)
        return MetadataContext(
            stack=stack,
            architecture=architecture,
            detected_version=version,
            version_range=resolved_range,
            formatted_version_name=formatted,
            project_path=project_path,
            cursor_path=cursor_path,
            debug=self._kit.settings.verbose,
        )

    @traced
    def generate(
        self,
        stack: str,
        *,
        architecture: str | None = None,
        version: str | None = None,
        version_range: str | None = None,
        project_path: str = ".",
        cursor_path: str = ".",
        include_global: bool | None = None,
        tools: tuple[str, ...] = (),
        options: dict[str, str] | None = None,
        mirror_docs: bool = False,
        policy: BackupPolicy | None = None,
        on_progress: Callable[[float], None] | None = None,
        backup: BackupManager | None = None,
    ) -> ServiceResult:
        """Generate rules for *stack* and report what was written."""
        op = "generate"
        warnings: list[str] = list(self._kit.warnings)
        context = self.build_context(
            stack,
            architecture=architecture,
            version=version,
            version_range=version_range,
            project_path=project_path,
            cursor_path=cursor_path,
        )
        profile = LayerProfile(
            stack=stack,
            architecture=architecture,
            version_range=context.version_range,
            detected_version=version,
            include_global=(
                self._kit.settings.generation.include_global if include_global is None else include_global
            ),
            tool_names=tuple(tools),
            options=dict(options or {}),
        )
        generator = BatchGenerator.from_kit(self._kit, backup=backup)

        with trace_span("generator.run") as span:
            try:
                report = asyncio.run(
                    generator.run(
                        context,
                        profile,
                        policy=policy,
                        mirror_docs=mirror_docs,
                        on_progress=on_progress,
                    )
                )
            except ValueError as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(code="INVALID_PROFILE", message=str(exc), detail={"stack": stack}),
                    warnings=warnings,
                )
            if span:
                span.annotate("state", str(report.state))
                span.annotate("files_written", len(report.files_written))

        warnings.extend(_report_warnings(report))
        data = _report_data(report, context)

        if report.aborted:
            return ServiceResult(
                ok=False,
                op=op,
                data=data,
                warnings=warnings,
                error=ServiceError(
                    code="ABORTED",
                    message=f"Destination exists: {report.rules_dir}",
                    detail={"path": str(report.rules_dir)},
                ),
            )

        if report.error is not None:
            return ServiceResult(
                ok=False,
                op=op,
                data=data,
                warnings=warnings,
                error=ServiceError(
                    code="GENERATION_FAILED",
                    message=report.error.message,
                    detail={"path": str(report.error.path), "state": str(report.state)},
                ),
            )

        if not report.layers:
            warnings.append(f"No template layers found for stack '{stack}'")

        self._dispatch_event(
            "post_generate",
            {
                "stack": stack,
                "rules_dir": str(report.rules_dir),
                "files_written": len(report.files_written),
                "backup_path": str(report.backup.backup_path) if report.backup else None,
                "stats": report.stats(),
            },
            warnings,
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)


def _report_warnings(report: GenerationReport) -> list[str]:
    warnings = [f"Recovered malformed frontmatter: {path}" for path in report.recovered]
    if report.backup_error:
        warnings.append(f"Backup failed, writing in place: {report.backup_error}")
    return warnings


def _report_data(report: GenerationReport, context: MetadataContext) -> dict[str, Any]:
    files = relpaths([p for p in report.files_written if p.is_relative_to(report.rules_dir)], report.rules_dir)
    docs = (
        relpaths([p for p in report.files_written if p.is_relative_to(report.docs_dir)], report.docs_dir)
        if report.docs_dir is not None
        else []
    )
    return {
        "stack": context.stack,
        "architecture": context.architecture,
        "version_range": context.version_range,
        "formatted_version_name": context.formatted_version_name,
        "state": str(report.state),
        "rules_dir": str(report.rules_dir),
        "docs_dir": str(report.docs_dir) if report.docs_dir is not None else None,
        "layers": [{"kind": str(layer.kind), "name": layer.name, "path": str(layer.path)} for layer in report.layers],
        "files": files,
        "docs": docs,
        "backup_path": str(report.backup.backup_path) if report.backup else None,
        "backup_error": report.backup_error,
        "recovered": [str(p) for p in report.recovered],
        "unresolved": report.unresolved,
        "stats": report.stats(),
    }
