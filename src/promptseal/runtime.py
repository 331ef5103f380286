"""PromptRuntime — the single dependency injected into every service.

Built once from :class:`PromptSealSettings`.  Owns the template store and
the completion backend, and wires the four orchestrators to one shared
:class:`PipelineContext`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from promptseal.infrastructure.completion import CompletionExecutor, OllamaBackend
from promptseal.infrastructure.store import TemplateStore
from promptseal.pipeline.composite import CompositeResolver
from promptseal.pipeline.context import PipelineContext
from promptseal.pipeline.delivery import SecurePromptDelivery
from promptseal.pipeline.execution import SecurePromptExecution
from promptseal.pipeline.flows import FlowRunner

if TYPE_CHECKING:
    from promptseal.config.settings import PromptSealSettings
    from promptseal.infrastructure.completion import CompletionBackend


class PromptRuntime:
    """Store, executor and orchestrators for one settings snapshot.

    Pass *backend* to replace the HTTP backend (tests use an in-memory
    fake).  The runtime closes whatever backend it holds.
    """

    def __init__(
        self,
        settings: PromptSealSettings,
        *,
        backend: CompletionBackend | None = None,
    ) -> None:
        self._settings = settings
        if backend is None:
            backend = OllamaBackend(
                settings.backend.base_url,
                timeout=settings.backend.timeout,
            )
        self._executor = CompletionExecutor(backend)
        self._store = TemplateStore(
            settings.templates_root,
            extension=settings.templates.extension,
        )
        self._context = PipelineContext(
            config=settings.pipeline_config(),
            store=self._store,
            executor=self._executor,
        )
        self.delivery = SecurePromptDelivery(self._context)
        self.execution = SecurePromptExecution(self._context)
        self.composite = CompositeResolver(self._context)
        self.flows = FlowRunner(self._context)

    @property
    def settings(self) -> PromptSealSettings:
        return self._settings

    @property
    def store(self) -> TemplateStore:
        return self._store

    @property
    def context(self) -> PipelineContext:
        return self._context

    def close(self) -> None:
        self._executor.close()
