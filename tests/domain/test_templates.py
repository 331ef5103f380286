"""Tests for PromptTemplate."""

from __future__ import annotations

from promptseal.domain.templates import PromptTemplate


class TestPromptTemplate:
    def test_body_strips_frontmatter(self) -> None:
        template = PromptTemplate(name="idea", raw_text="---\nmodel: m\n---\nWrite {{x}}")
        assert template.body == "Write {{x}}"
        assert template.raw_text.startswith("---")

    def test_metadata(self) -> None:
        raw = "---\nmodel: m\nconfig:\n  topP: 0.9\ninput:\n  default:\n    count: 5\n---\nBody"
        template = PromptTemplate(name="t", raw_text=raw)
        assert template.metadata.model == "m"
        assert template.metadata.config == {"topP": 0.9}
        assert template.metadata.input_defaults == {"count": 5}

    def test_no_frontmatter(self) -> None:
        template = PromptTemplate(name="t", raw_text="Body")
        assert template.body == "Body"
        assert template.metadata.model is None
        assert template.metadata.config == {}

    def test_invalid_metadata_shape_is_ignored(self) -> None:
        template = PromptTemplate(name="t", raw_text="---\nconfig: not-a-mapping\n---\nBody")
        assert template.metadata.config == {}
        assert template.body == "Body"
