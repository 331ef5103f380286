"""Secure prompt delivery.

Pipeline: VALIDATE → READ → STRIP → REFINE (meta prompt) → SEAL

A private template ``_idea`` is never sent to a client in the clear.  Its
body is first refined by the ``meta_idea`` template at temperature 0, then
the refined prompt is sealed with AES-GCM.  The client stores the payload
and later hands it back to :mod:`promptseal.pipeline.execution`.

Every step is fatal: a silently degraded sealed prompt is a defect.
"""

from __future__ import annotations

import re

import structlog

from promptseal.domain.payload import EncryptedPayload
from promptseal.errors import (
    ConfigurationError,
    ExecutionError,
    PromptSealError,
    TemplateReadError,
    ValidationError,
)
from promptseal.infrastructure.completion import GenerationConfig
from promptseal.pipeline.context import PipelineContext
from promptseal.pipeline.policies import fatal_step

log = structlog.get_logger(__name__)

_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]*")

# Fixed sampling for the meta-template refinement call.
REFINE_CONFIG = GenerationConfig(temperature=0.0, top_p=0.95)


class SecurePromptDelivery:
    """Produce an encrypted, AI-refined prompt for client transport."""

    def __init__(self, context: PipelineContext) -> None:
        self._ctx = context
        self._options = context.config.delivery

    def validate(self, generator: object, prompt_name: object) -> str:
        """Check inputs and return the base template name.

        Raises:
            ValidationError: *generator* is not a string within the length
                bound, or *prompt_name* lacks the private marker or names an
                unsafe template.
        """
        if not isinstance(generator, str):
            msg = "generator must be a string"
            raise ValidationError(msg)
        if len(generator) > self._options.max_generator_length:
            msg = f"generator exceeds {self._options.max_generator_length} characters"
            raise ValidationError(msg)

        marker = self._options.marker
        if not isinstance(prompt_name, str) or not prompt_name.startswith(marker):
            msg = f"prompt name must start with {marker!r}"
            raise ValidationError(msg)

        base_name = prompt_name[len(marker) :]
        if not _NAME_RE.fullmatch(base_name):
            msg = f"Invalid prompt name: {prompt_name!r}"
            raise ValidationError(msg)
        return base_name

    def deliver(self, generator: str, prompt_name: str) -> EncryptedPayload:
        """Refine and seal private template *prompt_name*.

        Raises:
            ValidationError: Before any I/O, see :meth:`validate`.
            TemplateReadError: The base or meta template cannot be read.
            ConfigurationError: Model or key unset (``InvalidKeyError`` for a
                malformed key).
            ExecutionError: The refinement call failed.
        """
        base_name = self.validate(generator, prompt_name)

        with fatal_step("read", TemplateReadError, f"Unable to read prompt {base_name}"):
            base = self._ctx.store.read(base_name)
            params = {"generator": generator, "prompt": base.body}

        # Resolve everything configurable before spending a completion.
        with fatal_step("configure", ConfigurationError, "Invalid pipeline configuration"):
            model = self._ctx.require_model()
            codec = self._ctx.require_codec()

        meta_name = f"{self._options.meta_prefix}{prompt_name}"
        with fatal_step("refine", ExecutionError, f"Error executing prompt {prompt_name}"):
            meta_text, _meta = self._ctx.render(meta_name, params)
            refined = self._ctx.complete(meta_text, model, REFINE_CONFIG)

        with fatal_step("seal", PromptSealError, "Encryption failed"):
            payload = codec.encrypt(refined)
        log.info(
            "delivery.sealed",
            prompt=prompt_name,
            meta_template=meta_name,
            model=model,
            refined_chars=len(refined),
        )
        return payload
