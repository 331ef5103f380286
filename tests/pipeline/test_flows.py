"""Tests for single-template flows."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any

import pytest

from promptseal.errors import ExecutionError, ModelUnavailableError, TemplateReadError, ValidationError
from promptseal.pipeline.context import PipelineContext
from promptseal.pipeline.flows import FLOWS, FlowDefinition, FlowOutput, FlowRunner, split_items


class TestSplitItems:
    def test_comma_list(self) -> None:
        assert split_items("Health, Finance, , Travel ", FlowOutput.COMMA_LIST) == [
            "Health",
            "Finance",
            "Travel",
        ]

    def test_line_list_strips_bullets(self) -> None:
        text = "- one\n* two\n\n+ three\n4. four\r\n"
        assert split_items(text, FlowOutput.LINE_LIST) == ["one", "two", "three", "4. four"]

    def test_text_has_no_items(self) -> None:
        assert split_items("a, b", FlowOutput.TEXT) == []


class TestRegistry:
    def test_every_flow_names_a_shipped_template(self, templates_dir: Path) -> None:
        for flow in FLOWS.values():
            assert (templates_dir / f"{flow.template}.prompt").is_file(), flow.name

    def test_unknown_flow(self, context: PipelineContext) -> None:
        with pytest.raises(ValidationError, match="Unknown flow"):
            FlowRunner(context).run("nope", {})


class TestRun:
    def test_generate_idea(self, context: PipelineContext, fake_backend: Any) -> None:
        fake_backend.reply = "A budgeting app for students"
        outcome = FlowRunner(context).run("generate_idea", {"category": "fintech", "language": "english"})

        assert outcome.flow == "generate_idea"
        assert outcome.text == "A budgeting app for students"
        assert outcome.items == []
        call = fake_backend.calls[0]
        assert call.prompt_text == "Write one product idea about fintech in english."
        # Flow config overrides the template's temperature of 0.7.
        assert call.config.temperature == 0.8
        assert call.config.top_p == 0.95

    def test_categories_list_with_default_count(self, context: PipelineContext, fake_backend: Any) -> None:
        fake_backend.reply = "Health, Finance, Travel"
        outcome = FlowRunner(context).run("categories", {"language": "english"})
        assert outcome.items == ["Health", "Finance", "Travel"]
        assert fake_backend.calls[0].prompt_text == (
            "List 20 idea categories in english, comma separated."
        )

    def test_categories_fallback_on_empty_completion(
        self,
        context: PipelineContext,
        fake_backend: Any,
    ) -> None:
        fake_backend.reply = " , "
        outcome = FlowRunner(context).run("categories", {"language": "english"})
        assert outcome.items == list(FLOWS["categories"].fallback)

    def test_tasks_line_list(self, context: PipelineContext, fake_backend: Any) -> None:
        fake_backend.reply = "- design schema\n- build api\n"
        outcome = FlowRunner(context).run("tasks", {"idea": "meal planner"})
        assert outcome.items == ["design schema", "build api"]
        assert "in english" in fake_backend.calls[0].prompt_text

    def test_template_config_used_when_flow_has_none(
        self,
        context: PipelineContext,
        templates_dir: Path,
        fake_backend: Any,
    ) -> None:
        (templates_dir / "verify.prompt").write_text(
            "---\nconfig:\n  temperature: 0.3\n  topP: 0.5\n---\nReal? {{idea}}",
            encoding="utf-8",
        )
        FlowRunner(context).run("verify_idea", {"idea": "x"})
        assert fake_backend.calls[0].config.temperature == 0.3
        assert fake_backend.calls[0].config.top_p == 0.5

    def test_invalid_template_config(self, context: PipelineContext, templates_dir: Path) -> None:
        (templates_dir / "verify.prompt").write_text(
            "---\nconfig:\n  temperature: 5\n---\n{{idea}}",
            encoding="utf-8",
        )
        with pytest.raises(ValidationError, match="generation config"):
            FlowRunner(context).run("verify_idea", {"idea": "x"})

    def test_parameter_precedence(self, context: PipelineContext, templates_dir: Path, fake_backend: Any) -> None:
        (templates_dir / "tone.prompt").write_text(
            "---\ninput:\n  default:\n    tone: template\n---\n{{tone}} {{mood}}",
            encoding="utf-8",
        )
        flows = {"tone": FlowDefinition("tone", "tone", defaults={"tone": "flow", "mood": "flow"})}
        runner = FlowRunner(context, flows)

        runner.run("tone", {})
        runner.run("tone", {"tone": "caller"})
        assert [call.prompt_text for call in fake_backend.calls] == ["template flow", "caller flow"]


class TestValidation:
    def test_missing_required_input(self, context: PipelineContext, fake_backend: Any) -> None:
        with pytest.raises(ValidationError, match="category"):
            FlowRunner(context).run("generate_idea", {"language": "english"})
        assert fake_backend.calls == []

    def test_blank_required_input(self, context: PipelineContext) -> None:
        with pytest.raises(ValidationError):
            FlowRunner(context).run("verify_idea", {"idea": ""})

    def test_choice_checked(self, context: PipelineContext) -> None:
        params = {"idea1": "a", "idea2": "b", "operation": "Merge"}
        with pytest.raises(ValidationError, match="Combine"):
            FlowRunner(context).run("operation", params)

    def test_choice_accepted(self, context: PipelineContext, fake_backend: Any) -> None:
        params = {"idea1": "a", "idea2": "b", "operation": "Integrate"}
        FlowRunner(context).run("operation", params)
        assert fake_backend.calls[0].prompt_text == "Integrate a with b in english."


class TestFailures:
    def test_missing_template(self, context: PipelineContext, templates_dir: Path) -> None:
        (templates_dir / "zoomtask.prompt").unlink()
        with pytest.raises(TemplateReadError):
            FlowRunner(context).run("zoom_task", {"idea": "a", "task": "b"})

    def test_model_unset(self, make_context: Any) -> None:
        with pytest.raises(ModelUnavailableError):
            FlowRunner(make_context(model=None)).run("verify_idea", {"idea": "a"})

    def test_backend_failure(self, context: PipelineContext, fake_backend: Any) -> None:
        fake_backend.error = RuntimeError("boom")
        with pytest.raises(ExecutionError):
            FlowRunner(context).run("score_idea", {"idea": "a"})


class TestRandomIdea:
    def test_picks_category_and_generates(self, context: PipelineContext, fake_backend: Any) -> None:
        def respond(prompt_text: str) -> str:
            if prompt_text.startswith("List 25"):
                return "Health, Finance, Travel"
            return "a random idea"

        fake_backend.responder = respond
        outcome = FlowRunner(context).random_idea("spanish", rng=random.Random(3))

        assert outcome.flow == "random_idea"
        assert outcome.text == "a random idea"
        [category] = outcome.items
        assert category in {"Health", "Finance", "Travel"}
        assert fake_backend.calls[0].prompt_text == "List 25 idea categories in spanish, comma separated."
        assert fake_backend.calls[1].prompt_text == f"Write one product idea about {category} in spanish."

    def test_no_categories(self, context: PipelineContext, fake_backend: Any) -> None:
        flows = {**FLOWS, "categories": FlowDefinition("categories", "categories", output=FlowOutput.COMMA_LIST)}
        fake_backend.reply = ""
        with pytest.raises(ValidationError, match="No categories"):
            FlowRunner(context, flows).random_idea("english")
        assert len(fake_backend.calls) == 1
