"""Secure prompt execution.

Pipeline: KEY → CODEC → SHAPE → DECRYPT → NON-EMPTY (soft) → INJECT → MODEL → EXECUTE (fatal)

The first five steps guard against routine client-side conditions (stale,
foreign, or tampered payloads, or a deployment without a key) and end the
call with :data:`~promptseal.pipeline.policies.SOFT_EMPTY`.  The last two
guard against operator and backend failures and raise.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel

from promptseal.domain.payload import EncryptedPayload
from promptseal.domain.placeholders import substitute_scalars
from promptseal.errors import (
    AuthenticationError,
    ConfigurationError,
    ExecutionError,
    PayloadFormatError,
)
from promptseal.infrastructure.crypto import AeadCodec, decode_key
from promptseal.pipeline.context import PipelineContext
from promptseal.pipeline.policies import SoftFailure, fatal_step, soft_empty

log = structlog.get_logger(__name__)


class ExecutionOutcome(BaseModel):
    """Completion text plus how the call ended.

    ``soft_reason`` is set only when the sealed prompt could not be opened;
    an empty ``text`` with no reason is a genuinely empty completion.
    """

    model_config = {"frozen": True}

    text: str
    soft_reason: str | None = None

    @property
    def opened(self) -> bool:
        return self.soft_reason is None


class SecurePromptExecution:
    """Open a sealed prompt, finalize it with runtime variables, run it."""

    def __init__(self, context: PipelineContext) -> None:
        self._ctx = context

    def execute(
        self,
        payload: EncryptedPayload | Mapping[str, Any],
        variables: Mapping[str, object] | None = None,
    ) -> str:
        """Return the completion for the sealed prompt, or ``""``.

        Raises:
            ModelUnavailableError: No model configured.
            ExecutionError: The backend call failed.
        """
        return self.run(payload, variables).text

    def run(
        self,
        payload: EncryptedPayload | Mapping[str, Any],
        variables: Mapping[str, object] | None = None,
    ) -> ExecutionOutcome:
        """Like :meth:`execute`, but report whether the prompt was opened.

        Raises:
            ModelUnavailableError: No model configured.
            ExecutionError: The backend call failed.
        """
        try:
            template = self.open(payload)
        except SoftFailure as failure:
            text = soft_empty(failure, event="execution.soft_empty")
            return ExecutionOutcome(text=text, soft_reason=failure.reason)

        final_text = substitute_scalars(template, variables or {})

        with fatal_step("execute", ExecutionError, "Failed to execute decrypted prompt"):
            model = self._ctx.require_model()
            result = self._ctx.complete(final_text, model)
        log.info(
            "execution.completed",
            model=model,
            variables=sorted(variables or {}),
            result_chars=len(result),
        )
        return ExecutionOutcome(text=result)

    def open(self, payload: EncryptedPayload | Mapping[str, Any]) -> str:
        """Decrypt *payload* into a non-blank prompt template.

        Raises:
            SoftFailure: For every condition the soft policy covers.
        """
        cipher_key = self._ctx.config.cipher_key
        if not cipher_key:
            raise SoftFailure("key_missing")

        try:
            codec = AeadCodec(decode_key(cipher_key))
        except ConfigurationError as exc:
            raise SoftFailure("key_invalid", error=str(exc)) from exc

        try:
            sealed = EncryptedPayload.from_transport(payload)
        except PayloadFormatError as exc:
            raise SoftFailure("payload_malformed", error=str(exc)) from exc

        try:
            plaintext = codec.decrypt(sealed)
        except (AuthenticationError, PayloadFormatError) as exc:
            raise SoftFailure("decrypt_failed", code=exc.code) from exc

        if not plaintext.strip():
            raise SoftFailure("prompt_empty")
        return plaintext
