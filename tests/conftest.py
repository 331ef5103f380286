"""Shared pytest fixtures for promptseal tests."""

from __future__ import annotations

import base64
import logging
import os
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from promptseal.config.settings import PromptSealSettings
from promptseal.infrastructure.completion import Completion, CompletionExecutor, GenerationConfig
from promptseal.infrastructure.store import TemplateStore
from promptseal.pipeline.context import PipelineConfig, PipelineContext
from promptseal.runtime import PromptRuntime
from promptseal.services.telemetry import _current_span, disable_telemetry

TEST_MODEL = "ollama/test-model"

# A small template set mirroring the shipped prompt layout.
TEMPLATES: dict[str, str] = {
    "idea": (
        "---\n"
        "model: ollama/gemma3:4b\n"
        "config:\n"
        "  temperature: 0.7\n"
        "input:\n"
        "  default:\n"
        "    language: english\n"
        "---\n"
        "Write one product idea about {{category}} in {{language}}."
    ),
    "meta_idea": "Rewrite this prompt for {{ generator }}:\n{{ prompt }}",
    "ideascore": "Score the idea from 0 to {{maxscore}} in {{language}}:\n{{idea}}",
    "requirementscore": (
        "---\n"
        "model: ollama/gemma3:4b\n"
        "---\n"
        "Category: {{category}}\n"
        "Idea prompt:\n{{evaluatedpromptidea}}\n"
        "Scoring prompt:\n{{evaluatedideascore}}\n"
        "Answer with a number up to {{maxscore}}."
    ),
    "categories": "List {{count}} idea categories in {{language}}, comma separated.",
    "subjects": "List subjects in {{language}}, comma separated.",
    "devel": "List the tasks to build {{idea}} in {{language}}, one per line.",
    "discardtasks": "Idea: {{idea}}\nTasks: {{tasks}}\nDrop: {{tasksdiscard}}\nLanguage: {{language}}",
    "operationidea": "{{operation}} {{idea1}} with {{idea2}} in {{language}}.",
    "verify": "Is this a real idea? {{idea}}",
    "help": "Help with task {{task}} of {{idea}} in {{language}}.",
    "zoomtask": "Break down task {{task}} of {{idea}} in {{language}}.",
}


@dataclass
class BackendCall:
    model_id: str
    prompt_text: str
    config: GenerationConfig


@dataclass
class FakeBackend:
    """In-memory completion backend that records every call.

    Replies with *reply*, or with ``responder(prompt_text)`` when set.
    Raises *error* instead when set.
    """

    reply: str = "fake completion"
    responder: Callable[[str], str] | None = None
    error: Exception | None = None
    calls: list[BackendCall] = field(default_factory=list)
    closed: bool = False

    def generate(self, model_id: str, prompt_text: str, config: GenerationConfig) -> Completion:
        self.calls.append(BackendCall(model_id, prompt_text, config))
        if self.error is not None:
            raise self.error
        text = self.responder(prompt_text) if self.responder else self.reply
        return Completion(text=text, model=model_id)

    def close(self) -> None:
        self.closed = True


def write_templates(root: Path, templates: dict[str, str]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for name, text in templates.items():
        (root / f"{name}.prompt").write_text(text, encoding="utf-8", newline="")
    return root


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Drop PROMPTSEAL_* env vars and restore logging/telemetry state afterwards."""
    for name in list(os.environ):
        if name.startswith("PROMPTSEAL_"):
            monkeypatch.delenv(name)

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    pkg = logging.getLogger("promptseal")
    pkg_level = pkg.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    pkg.setLevel(pkg_level)
    structlog.reset_defaults()
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def cipher_key() -> str:
    """Base64 text of a fixed 32-byte key."""
    return base64.b64encode(bytes(range(32))).decode("ascii")


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Template directory populated with :data:`TEMPLATES`."""
    return write_templates(tmp_path / "prompts", TEMPLATES)


@pytest.fixture
def make_context(
    templates_dir: Path,
    fake_backend: FakeBackend,
    cipher_key: str,
) -> Callable[..., PipelineContext]:
    """Factory for a PipelineContext; keyword arguments override PipelineConfig fields."""

    def _make(**overrides: object) -> PipelineContext:
        values: dict[str, object] = {"cipher_key": cipher_key, "model": TEST_MODEL, **overrides}
        return PipelineContext(
            config=PipelineConfig(**values),  # type: ignore[arg-type]
            store=TemplateStore(templates_dir),
            executor=CompletionExecutor(fake_backend),
        )

    return _make


@pytest.fixture
def context(make_context: Callable[..., PipelineContext]) -> PipelineContext:
    return make_context()


@pytest.fixture
def runtime(
    tmp_path: Path,
    templates_dir: Path,
    fake_backend: FakeBackend,
    cipher_key: str,
) -> Generator[PromptRuntime]:
    """Runtime over :func:`templates_dir` with the fake backend."""
    settings = PromptSealSettings.from_cli(
        root=tmp_path,
        crypto={"key": cipher_key},
        model={"name": TEST_MODEL},
    )
    rt = PromptRuntime(settings, backend=fake_backend)
    try:
        yield rt
    finally:
        rt.close()


@pytest.fixture
def project(
    tmp_path: Path,
    templates_dir: Path,
    cipher_key: str,
    monkeypatch: pytest.MonkeyPatch,
) -> Path:
    """A project directory with promptseal.toml and templates, used as CWD."""
    (tmp_path / "promptseal.toml").write_text(
        f'[crypto]\nkey = "{cipher_key}"\n\n[model]\nname = "{TEST_MODEL}"\n',
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path
