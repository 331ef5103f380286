"""Composite template resolution.

Pipeline: READ+STRIP+PASS 1 (each file, in order) → PASS 2 (cross-inject) → SELECT final → CHECK → EXECUTE

A composite prompt is declared as a mapping of *keys* to template names.
Keys double as placeholder names: a template may embed ``{{ other_key }}``
to receive ``other_key``'s pass-1 text.  The declared final key's pass-2
text is the prompt that runs.

Fatal throughout, and the resolver needs no cipher key.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from promptseal.domain.placeholders import compose_templates
from promptseal.errors import ExecutionError, TemplateReadError, ValidationError
from promptseal.pipeline.context import PipelineContext
from promptseal.pipeline.policies import fatal_step

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CompositeSpec:
    """Declaration of one composite prompt.

    Attributes:
        name: Identifier used in logs and results.
        templates: Ordered ``key -> template name`` mapping.
        final_key: Key whose resolved text is executed.
        defaults: Parameter defaults applied before caller parameters.
    """

    name: str
    templates: Mapping[str, str]
    final_key: str = "result"
    defaults: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.final_key not in self.templates:
            msg = f"Composite {self.name!r} has no template for final key {self.final_key!r}"
            raise ValueError(msg)
        object.__setattr__(self, "templates", MappingProxyType(dict(self.templates)))
        object.__setattr__(self, "defaults", MappingProxyType(dict(self.defaults)))


REQUIREMENT_SCORE = CompositeSpec(
    name="requirement_score",
    templates={
        "evaluatedpromptidea": "idea",
        "evaluatedideascore": "ideascore",
        "result": "requirementscore",
    },
    defaults={"maxscore": 10, "language": "english"},
)


class CompositeResolver:
    """Resolve a :class:`CompositeSpec` into one prompt and run it."""

    def __init__(self, context: PipelineContext) -> None:
        self._ctx = context

    def resolve_all(self, spec: CompositeSpec, params: Mapping[str, object]) -> dict[str, str]:
        """Return the pass-2 map for every key of *spec*.

        Raises:
            TemplateReadError: A template file cannot be read; the message
                names the file.
        """
        merged = {**spec.defaults, **params}
        first_pass: dict[str, str] = {}
        for key, template_name in spec.templates.items():
            with fatal_step(
                f"read:{key}",
                TemplateReadError,
                f"Unable to read or process prompt file '{template_name}'",
            ):
                first_pass[key], _template = self._ctx.render(template_name, merged)
        return compose_templates(first_pass)

    def resolve(self, spec: CompositeSpec, params: Mapping[str, object]) -> str:
        """Return the final key's resolved text.

        Raises:
            TemplateReadError: See :meth:`resolve_all`.
            ValidationError: The final text is empty or whitespace-only,
                which means the template chain is broken.
        """
        final_text = self.resolve_all(spec, params)[spec.final_key]
        if not final_text.strip():
            msg = f"The final {spec.final_key!r} prompt of {spec.name!r} is empty after processing"
            raise ValidationError(msg)
        return final_text

    def run(self, spec: CompositeSpec, params: Mapping[str, object]) -> str:
        """Resolve *spec* and execute the final prompt.

        Raises:
            TemplateReadError, ValidationError: See :meth:`resolve`.
            ModelUnavailableError: No model configured.
            ExecutionError: The backend call failed.
        """
        final_text = self.resolve(spec, params)
        with fatal_step("execute", ExecutionError, f"Failed to execute composite {spec.name}"):
            model = self._ctx.require_model()
            result = self._ctx.complete(final_text, model)
        log.info(
            "composite.completed",
            composite=spec.name,
            model=model,
            prompt_chars=len(final_text),
            result_chars=len(result),
        )
        return result
