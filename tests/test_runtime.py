"""Tests for PromptRuntime wiring."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from promptseal.config.settings import PromptSealSettings
from promptseal.infrastructure.completion import OllamaBackend
from promptseal.pipeline.composite import CompositeResolver
from promptseal.pipeline.delivery import SecurePromptDelivery
from promptseal.pipeline.execution import SecurePromptExecution
from promptseal.pipeline.flows import FlowRunner
from promptseal.runtime import PromptRuntime


class TestPromptRuntime:
    def test_orchestrators_share_context(self, runtime: PromptRuntime) -> None:
        assert isinstance(runtime.delivery, SecurePromptDelivery)
        assert isinstance(runtime.execution, SecurePromptExecution)
        assert isinstance(runtime.composite, CompositeResolver)
        assert isinstance(runtime.flows, FlowRunner)
        assert runtime.context.store is runtime.store

    def test_store_uses_templates_root(self, runtime: PromptRuntime, templates_dir: Path) -> None:
        assert runtime.settings.templates_root == templates_dir
        assert runtime.store.exists("idea")

    def test_pipeline_config(self, runtime: PromptRuntime, cipher_key: str) -> None:
        config = runtime.context.config
        assert config.cipher_key == cipher_key
        assert config.model == "ollama/test-model"

    def test_builds_ollama_backend(self, tmp_path: Path) -> None:
        settings = PromptSealSettings.from_cli(
            root=tmp_path, backend={"base_url": "http://ollama.test:11434"}
        )
        rt = PromptRuntime(settings)
        try:
            assert isinstance(rt.context.executor.backend, OllamaBackend)
        finally:
            rt.close()

    def test_close_closes_backend(self, tmp_path: Path, fake_backend: Any) -> None:
        rt = PromptRuntime(PromptSealSettings.from_cli(root=tmp_path), backend=fake_backend)
        rt.close()
        assert fake_backend.closed
