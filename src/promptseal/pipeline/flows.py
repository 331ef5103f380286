"""Single-template flows.

Each flow forwards its inputs to one template, executes it, and shapes the
completion text (plain text, a comma-separated list, or one item per line).
Flows are data: adding one means adding a :class:`FlowDefinition` to
:data:`FLOWS`.

Parameter precedence (lowest to highest): flow defaults, the template's
``input.default`` frontmatter, caller parameters.  Generation config is the
template's ``config`` frontmatter overlaid by the flow's own config.
"""

from __future__ import annotations

import random
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from promptseal.domain.placeholders import substitute_scalars
from promptseal.errors import ExecutionError, ValidationError
from promptseal.infrastructure.completion import GenerationConfig
from promptseal.pipeline.context import PipelineContext
from promptseal.pipeline.policies import fatal_step

log = structlog.get_logger(__name__)

_BULLET_RE = re.compile(r"^[*\-+]\s*")

_CREATIVE = GenerationConfig(temperature=0.8, top_p=0.95)


class FlowOutput(StrEnum):
    TEXT = "text"
    COMMA_LIST = "comma_list"
    LINE_LIST = "line_list"


@dataclass(frozen=True)
class FlowDefinition:
    """One single-template flow.

    Attributes:
        name: Flow identifier.
        template: Template name in the store.
        required: Inputs the caller must supply.
        defaults: Input defaults.
        choices: Allowed values for constrained inputs.
        config: Generation config overriding the template's frontmatter.
        output: How the completion text is shaped.
        fallback: Items returned when a list flow gets an empty completion.
    """

    name: str
    template: str
    required: tuple[str, ...] = ()
    defaults: Mapping[str, object] = field(default_factory=dict)
    choices: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    config: GenerationConfig | None = None
    output: FlowOutput = FlowOutput.TEXT
    fallback: tuple[str, ...] = ()


def _defs(*definitions: FlowDefinition) -> dict[str, FlowDefinition]:
    return {d.name: d for d in definitions}


FLOWS: dict[str, FlowDefinition] = _defs(
    FlowDefinition(
        "generate_idea",
        "idea",
        required=("category", "language"),
        config=_CREATIVE,
    ),
    FlowDefinition(
        "categories",
        "categories",
        required=("language",),
        defaults={"count": 20},
        config=_CREATIVE,
        output=FlowOutput.COMMA_LIST,
        fallback=("Innovation", "Efficiency", "Growth", "Feasibility", "Impact"),
    ),
    FlowDefinition(
        "subjects",
        "subjects",
        defaults={"language": "english"},
        config=_CREATIVE,
        output=FlowOutput.COMMA_LIST,
    ),
    FlowDefinition(
        "tasks",
        "devel",
        required=("idea",),
        defaults={"language": "english"},
        output=FlowOutput.LINE_LIST,
    ),
    FlowDefinition(
        "discard_tasks",
        "discardtasks",
        required=("idea", "tasks", "tasksdiscard"),
        defaults={"language": "english"},
        output=FlowOutput.LINE_LIST,
    ),
    FlowDefinition(
        "operation",
        "operationidea",
        required=("idea1", "idea2", "operation"),
        defaults={"language": "english"},
        choices={"operation": ("Combine", "Integrate")},
    ),
    FlowDefinition("score_idea", "ideascore", required=("idea",)),
    FlowDefinition("verify_idea", "verify", required=("idea",)),
    FlowDefinition(
        "help_task",
        "help",
        required=("idea", "task"),
        defaults={"language": "english"},
    ),
    FlowDefinition(
        "zoom_task",
        "zoomtask",
        required=("idea", "task"),
        defaults={"language": "english"},
    ),
)


class FlowOutcome(BaseModel):
    """Result of one flow run.  ``items`` is empty for text flows."""

    model_config = {"frozen": True}

    flow: str
    text: str
    items: list[str] = Field(default_factory=list)


def split_items(text: str, output: FlowOutput) -> list[str]:
    """Shape completion *text* into list items for list flows."""
    if output is FlowOutput.COMMA_LIST:
        parts = (part.strip() for part in text.split(","))
        return [part for part in parts if part]
    if output is FlowOutput.LINE_LIST:
        lines = (_BULLET_RE.sub("", line.strip()) for line in text.split("\n"))
        return [line for line in lines if line]
    return []


class FlowRunner:
    """Run flows from :data:`FLOWS` (or a caller-supplied registry)."""

    def __init__(
        self,
        context: PipelineContext,
        flows: Mapping[str, FlowDefinition] | None = None,
    ) -> None:
        self._ctx = context
        self._flows = dict(FLOWS if flows is None else flows)

    @property
    def flows(self) -> dict[str, FlowDefinition]:
        return dict(self._flows)

    def get(self, name: str) -> FlowDefinition:
        try:
            return self._flows[name]
        except KeyError:
            msg = f"Unknown flow {name!r}; available: {', '.join(sorted(self._flows))}"
            raise ValidationError(msg) from None

    def _check_inputs(self, flow: FlowDefinition, params: Mapping[str, object]) -> None:
        missing = [key for key in flow.required if params.get(key) in (None, "")]
        if missing:
            msg = f"Flow {flow.name!r} is missing required input(s): {', '.join(missing)}"
            raise ValidationError(msg)
        for key, allowed in flow.choices.items():
            if key in params and params[key] not in allowed:
                msg = f"Flow {flow.name!r}: {key} must be one of {', '.join(allowed)}"
                raise ValidationError(msg)

    def run(self, name: str, params: Mapping[str, object] | None = None) -> FlowOutcome:
        """Run flow *name* with *params*.

        Raises:
            ValidationError: Unknown flow, missing or invalid input, or
                invalid template config.
            TemplateReadError: The flow's template cannot be read.
            ModelUnavailableError: No model configured.
            ExecutionError: The backend call failed.
        """
        flow = self.get(name)
        params = dict(params or {})
        self._check_inputs(flow, {**flow.defaults, **params})

        template = self._ctx.store.read(flow.template)
        merged = {**flow.defaults, **template.metadata.input_defaults, **params}

        try:
            config = GenerationConfig.model_validate(template.metadata.config)
        except PydanticValidationError as exc:
            msg = f"Template {flow.template!r} declares an invalid generation config"
            raise ValidationError(msg) from exc
        if flow.config is not None:
            config = config.merged(flow.config)

        with fatal_step(f"flow:{flow.name}", ExecutionError, f"Flow {flow.name} failed"):
            model = self._ctx.require_model()
            prompt_text = substitute_scalars(template.body, merged)
            text = self._ctx.complete(prompt_text, model, config)

        items = split_items(text, flow.output)
        if flow.output is not FlowOutput.TEXT and not items:
            log.warning("flow.empty_completion", flow=flow.name)
            items = list(flow.fallback)

        log.info("flow.completed", flow=flow.name, model=model, items=len(items))
        return FlowOutcome(flow=flow.name, text=text, items=items)

    def random_idea(self, language: str, *, rng: random.Random | None = None) -> FlowOutcome:
        """Generate an idea for a randomly chosen generated category.

        Raises:
            ValidationError: The category flow produced no categories.
        """
        categories = self.run("categories", {"count": 25, "language": language}).items
        if not categories:
            msg = "No categories were generated to choose from"
            raise ValidationError(msg)
        category = (rng or random.Random()).choice(categories)
        outcome = self.run("generate_idea", {"category": category, "language": language})
        return outcome.model_copy(update={"flow": "random_idea", "items": [category]})
