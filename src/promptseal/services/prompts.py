"""PromptService — the operations behind every CLI command.

Each method runs one orchestrator from the runtime and packs the outcome
into a :class:`ServiceResult`.  Raised ``PromptSealError``s become
``ok=False`` results; the soft-empty execution outcome stays ``ok=True``
with ``data["empty"]`` set and a warning attached.
"""

from __future__ import annotations

import json
import random
from collections.abc import Mapping
from typing import Any

from promptseal.domain.placeholders import find_placeholders
from promptseal.errors import PromptSealError
from promptseal.infrastructure import crypto
from promptseal.pipeline.composite import REQUIREMENT_SCORE
from promptseal.services.base import BaseService
from promptseal.services.result import ServiceResult
from promptseal.services.telemetry import trace_span, traced

SOFT_EMPTY_WARNING = "Sealed prompt could not be opened; the result is empty"


class PromptService(BaseService):
    """Seal, open, compose and run prompts."""

    @traced
    def seal_prompt(self, generator: str, prompt_name: str) -> ServiceResult:
        """Refine private template *prompt_name* and seal it for the client."""
        op = "seal_prompt"
        try:
            with trace_span("deliver") as span:
                payload = self._runtime.delivery.deliver(generator, prompt_name)
                if span:
                    span.annotate("prompt", prompt_name)
        except PromptSealError as exc:
            return self._failure(op, exc, prompt=prompt_name)

        return ServiceResult(
            ok=True,
            op=op,
            data={"prompt": prompt_name, "payload": payload.to_transport()},
        )

    @traced
    def exec_prompt(
        self,
        payload: Mapping[str, Any] | str,
        variables: Mapping[str, object] | None = None,
    ) -> ServiceResult:
        """Open a sealed prompt, fill in *variables*, and run it.

        *payload* may be the transport mapping or its JSON text.  Text that
        is not JSON is handed on as-is and ends up as a malformed payload.
        """
        op = "exec_prompt"
        if isinstance(payload, str):
            payload = _load_payload_text(payload)

        try:
            with trace_span("execute") as span:
                outcome = self._runtime.execution.run(payload, variables)  # type: ignore[arg-type]
                if span:
                    span.annotate("result_chars", len(outcome.text))
        except PromptSealError as exc:
            return self._failure(op, exc)

        if not outcome.opened:
            return ServiceResult(
                ok=True,
                op=op,
                data={"text": "", "empty": True, "reason": outcome.soft_reason},
                warnings=[SOFT_EMPTY_WARNING],
            )
        return ServiceResult(ok=True, op=op, data={"text": outcome.text, "empty": False})

    @traced
    def requirement_score(
        self,
        category: str,
        *,
        maxscore: int | None = None,
        language: str | None = None,
    ) -> ServiceResult:
        """Compose the requirement-score prompt and run it."""
        op = "requirement_score"
        params = _score_params(category, maxscore, language)
        try:
            with trace_span("composite") as span:
                text = self._runtime.composite.run(REQUIREMENT_SCORE, params)
                if span:
                    span.annotate("composite", REQUIREMENT_SCORE.name)
        except PromptSealError as exc:
            return self._failure(op, exc, composite=REQUIREMENT_SCORE.name)
        return ServiceResult(ok=True, op=op, data={"category": category, "text": text})

    @traced
    def resolve_composite(
        self,
        category: str,
        *,
        maxscore: int | None = None,
        language: str | None = None,
    ) -> ServiceResult:
        """Build the requirement-score prompt without calling the model."""
        op = "resolve_composite"
        params = _score_params(category, maxscore, language)
        try:
            prompt = self._runtime.composite.resolve(REQUIREMENT_SCORE, params)
        except PromptSealError as exc:
            return self._failure(op, exc, composite=REQUIREMENT_SCORE.name)

        unresolved = find_placeholders(prompt)
        warnings = [f"Unresolved placeholder: {name}" for name in unresolved]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "composite": REQUIREMENT_SCORE.name,
                "prompt": prompt,
                "unresolved": unresolved,
            },
            warnings=warnings,
        )

    @traced
    def run_flow(self, name: str, params: Mapping[str, object] | None = None) -> ServiceResult:
        op = "run_flow"
        try:
            with trace_span(f"flow:{name}"):
                outcome = self._runtime.flows.run(name, params)
        except PromptSealError as exc:
            return self._failure(op, exc, flow=name)
        return ServiceResult(ok=True, op=op, data=outcome.model_dump())

    @traced
    def list_flows(self) -> ServiceResult:
        """Describe every registered flow and whether its template is present."""
        store = self._runtime.store
        items = [
            {
                "name": flow.name,
                "template": flow.template,
                "required": list(flow.required),
                "output": str(flow.output),
                "available": store.exists(flow.template),
            }
            for flow in self._runtime.flows.flows.values()
        ]
        warnings = [
            f"Template '{item['template']}' for flow '{item['name']}' is missing"
            for item in items
            if not item["available"]
        ]
        return ServiceResult(
            ok=True,
            op="list_flows",
            data={"items": items, "count": len(items)},
            warnings=warnings,
        )

    @traced
    def random_idea(self, language: str, *, rng: random.Random | None = None) -> ServiceResult:
        """Pick a generated category at random and generate an idea for it."""
        op = "random_idea"
        try:
            outcome = self._runtime.flows.random_idea(language, rng=rng)
        except PromptSealError as exc:
            return self._failure(op, exc, language=language)
        return ServiceResult(
            ok=True,
            op=op,
            data={**outcome.model_dump(), "category": outcome.items[0]},
        )

    @staticmethod
    def generate_key() -> ServiceResult:
        """Create a fresh base64 key for ``[crypto] key``.  Needs no runtime."""
        return ServiceResult(ok=True, op="generate_key", data={"key": crypto.generate_key()})


def _score_params(category: str, maxscore: int | None, language: str | None) -> dict[str, object]:
    # Omitted values fall back to the composite's own defaults.
    params: dict[str, object] = {"category": category}
    if maxscore is not None:
        params["maxscore"] = maxscore
    if language is not None:
        params["language"] = language
    return params


def _load_payload_text(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
