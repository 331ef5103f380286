"""Explicit configuration handed to every orchestrator.

``PipelineConfig`` is a plain value built once from settings (or directly
in tests).  ``PipelineContext`` bundles it with the template store and the
completion executor so orchestrators share one constructor signature.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from promptseal.domain.placeholders import substitute_scalars
from promptseal.domain.templates import PromptTemplate
from promptseal.errors import ConfigurationError, ModelUnavailableError
from promptseal.infrastructure.completion import CompletionExecutor, GenerationConfig
from promptseal.infrastructure.crypto import AeadCodec, decode_key
from promptseal.infrastructure.store import TemplateStore


@dataclass(frozen=True)
class DeliveryOptions:
    """Knobs for the secure delivery path."""

    marker: str = "_"
    meta_prefix: str = "meta"
    max_generator_length: int = 256


@dataclass(frozen=True)
class PipelineConfig:
    """Process-wide values the orchestrators need.

    Attributes:
        cipher_key: Base64 text of the 32-byte key, or None when unset.
        model: Model identifier, or None when unset.
        delivery: Options for the secure delivery path.
    """

    cipher_key: str | None = field(default=None, repr=False)
    model: str | None = None
    delivery: DeliveryOptions = field(default_factory=DeliveryOptions)


@dataclass(frozen=True)
class PipelineContext:
    config: PipelineConfig
    store: TemplateStore
    executor: CompletionExecutor

    def require_model(self) -> str:
        """Return the configured model identifier.

        Raises:
            ModelUnavailableError: No model configured.
        """
        if not self.config.model:
            msg = "No model configured; set [model] name or PROMPTSEAL_MODEL__NAME"
            raise ModelUnavailableError(msg)
        return self.config.model

    def require_codec(self) -> AeadCodec:
        """Build the codec from the configured key.

        Raises:
            ConfigurationError: No key configured.
            InvalidKeyError: The key is not base64 or not 32 bytes.
        """
        if not self.config.cipher_key:
            msg = "No cipher key configured; set [crypto] key or PROMPTSEAL_CRYPTO__KEY"
            raise ConfigurationError(msg)
        return AeadCodec(decode_key(self.config.cipher_key))

    def render(self, name: str, params: Mapping[str, object]) -> tuple[str, PromptTemplate]:
        """Read template *name*, strip its frontmatter, substitute *params*.

        Returns the rendered text together with the template so callers can
        consult its metadata.
        """
        template = self.store.read(name)
        return substitute_scalars(template.body, params), template

    def complete(
        self,
        prompt_text: str,
        model: str,
        config: GenerationConfig | None = None,
    ) -> str:
        return self.executor.execute(prompt_text, model, config)
