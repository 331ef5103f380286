"""Completion executor — the boundary to the text-generation backend.

The backend is a black box behind :class:`CompletionBackend`.  The one
shipped adapter talks to an Ollama server over HTTP; tests substitute a
recording fake.  No retries happen here; callers decide.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from pydantic import AliasChoices, BaseModel, Field

from promptseal.errors import ExecutionError, ModelUnavailableError, PromptSealError

logger = logging.getLogger(__name__)

OLLAMA_PREFIX = "ollama/"
_FOREIGN_PROVIDERS = frozenset({"googleai", "vertexai", "openai"})


class GenerationConfig(BaseModel):
    """Sampling parameters for one completion call.

    ``temperature`` and ``top_p`` are interpreted; any other field is
    backend-specific and passed through untouched.
    """

    model_config = {"frozen": True, "extra": "allow"}

    temperature: float | None = Field(default=None, ge=0.0, le=1.0)
    top_p: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("top_p", "topP"),
    )

    def merged(self, overrides: GenerationConfig) -> GenerationConfig:
        """Return a config where non-None fields of *overrides* win."""
        data = self.model_dump(exclude_none=True)
        data.update(overrides.model_dump(exclude_none=True))
        return GenerationConfig.model_validate(data)

    def to_options(self) -> dict[str, Any]:
        """Flatten to backend option names, omitting unset values."""
        return self.model_dump(exclude_none=True)


class Completion(BaseModel):
    """Backend response."""

    model_config = {"frozen": True}

    text: str
    model: str | None = None


class CompletionBackend(Protocol):
    def generate(self, model_id: str, prompt_text: str, config: GenerationConfig) -> Completion: ...

    def close(self) -> None: ...


class OllamaBackend:
    """Completion backend for an Ollama server (``POST /api/generate``).

    Model identifiers may carry the ``ollama/`` provider prefix used in
    configuration files (``ollama/gemma3:4b``); it is removed before the
    request.  Identifiers naming a hosted provider (``googleai/...``) are
    rejected.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 120.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    @staticmethod
    def model_name(model_id: str) -> str:
        if model_id.startswith(OLLAMA_PREFIX):
            return model_id[len(OLLAMA_PREFIX) :]
        provider, sep, _rest = model_id.partition("/")
        if sep and provider in _FOREIGN_PROVIDERS:
            msg = f"Unsupported model provider {provider!r} for the Ollama backend"
            raise ValueError(msg)
        return model_id

    def generate(self, model_id: str, prompt_text: str, config: GenerationConfig) -> Completion:
        model = self.model_name(model_id)
        request: dict[str, Any] = {"model": model, "prompt": prompt_text, "stream": False}
        options = config.to_options()
        if options:
            request["options"] = options

        response = self._client.post("/api/generate", json=request)
        response.raise_for_status()
        body = response.json()
        text = body.get("response") if isinstance(body, dict) else None
        if not isinstance(text, str):
            msg = "Ollama response carries no text"
            raise ValueError(msg)
        return Completion(text=text, model=model)

    def close(self) -> None:
        self._client.close()


class CompletionExecutor:
    """Run one prompt against the configured backend."""

    def __init__(self, backend: CompletionBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> CompletionBackend:
        return self._backend

    def execute(
        self,
        prompt_text: str,
        model_id: str | None,
        config: GenerationConfig | None = None,
    ) -> str:
        """Execute *prompt_text* and return the completion text.

        Raises:
            ModelUnavailableError: *model_id* is empty.
            ExecutionError: The backend call failed; the original error is
                chained as ``__cause__``.
        """
        if not model_id:
            msg = "No model configured for prompt execution"
            raise ModelUnavailableError(msg)

        config = config or GenerationConfig()
        logger.debug(
            "Executing completion model=%s prompt_chars=%d options=%s",
            model_id,
            len(prompt_text),
            config.to_options(),
        )
        try:
            completion = self._backend.generate(model_id, prompt_text, config)
        except PromptSealError:
            raise
        except Exception as exc:
            msg = f"Completion backend call failed for model {model_id}: {exc}"
            raise ExecutionError(msg) from exc
        return completion.text

    def close(self) -> None:
        self._backend.close()
