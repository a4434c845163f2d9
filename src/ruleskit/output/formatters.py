"""Format a ServiceResult for the requested output mode.

JSON mode serializes the result model as-is; quiet mode prints only the
essentials; the default mode uses the rich renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ruleskit.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from ruleskit.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Render *result* as JSON, quiet text or rich text."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
