"""Pick the output mode for a ServiceResult.

``--json`` wins over ``--quiet``, which wins over the Rich default.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from promptseal.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from promptseal.services.result import ServiceResult


class OutputSettings(BaseModel):
    """The output-related subset of the global CLI flags."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format *result* for display according to *settings*."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2, exclude_none=True)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
