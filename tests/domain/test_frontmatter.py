"""Tests for frontmatter stripping and parsing."""

from __future__ import annotations

import pytest

from promptseal.domain.frontmatter import PromptMetadata, parse_frontmatter, strip_frontmatter


class TestStripFrontmatter:
    def test_removes_leading_block(self) -> None:
        assert strip_frontmatter("---\nmodel: x\n---\nHello") == "Hello"

    def test_crlf_block(self) -> None:
        assert strip_frontmatter("---\r\nmodel: x\r\n---\r\nHello\r\nWorld") == "Hello\r\nWorld"

    def test_no_block_unchanged(self) -> None:
        assert strip_frontmatter("Hello {{name}}") == "Hello {{name}}"

    def test_empty_text(self) -> None:
        assert strip_frontmatter("") == ""

    def test_block_not_at_start_unchanged(self) -> None:
        text = "Hello\n---\nmodel: x\n---\n"
        assert strip_frontmatter(text) == text

    def test_leading_whitespace_is_not_a_block(self) -> None:
        text = "\n---\nmodel: x\n---\nHello"
        assert strip_frontmatter(text) == text

    def test_unclosed_block_unchanged(self) -> None:
        text = "---\nmodel: x\nHello"
        assert strip_frontmatter(text) == text

    def test_empty_block(self) -> None:
        assert strip_frontmatter("---\n---\nBody") == "Body"

    def test_empty_block_keeps_body_with_later_rule(self) -> None:
        assert strip_frontmatter("---\n---\nBody\n---\nTail") == "Body\n---\nTail"

    def test_empty_block_crlf(self) -> None:
        assert strip_frontmatter("---\r\n---\r\nBody\r\n---\r\nTail") == "Body\r\n---\r\nTail"

    def test_block_only(self) -> None:
        assert strip_frontmatter("---\nmodel: x\n---") == ""

    def test_only_first_block_removed(self) -> None:
        text = "---\na: 1\n---\nBody\n---\nb: 2\n---\nTail"
        assert strip_frontmatter(text) == "Body\n---\nb: 2\n---\nTail"

    def test_horizontal_rule_in_body_kept(self) -> None:
        assert strip_frontmatter("---\na: 1\n---\nOne\n---\nTwo") == "One\n---\nTwo"

    @pytest.mark.parametrize("text", ["----\na: 1\n---\nBody", "--- x\na: 1\n---\nBody"])
    def test_opening_line_must_be_bare(self, text: str) -> None:
        assert strip_frontmatter(text) == text


class TestParseFrontmatter:
    def test_loads_yaml_mapping(self) -> None:
        meta, body = parse_frontmatter("---\nmodel: m\nconfig:\n  temperature: 0.8\n---\nBody")
        assert meta == {"model": "m", "config": {"temperature": 0.8}}
        assert body == "Body"

    def test_crlf_yaml(self) -> None:
        meta, body = parse_frontmatter("---\r\nmodel: m\r\n---\r\nBody")
        assert meta == {"model": "m"}
        assert body == "Body"

    def test_malformed_yaml_yields_empty_metadata(self) -> None:
        meta, body = parse_frontmatter("---\nmodel: [unclosed\n---\nBody")
        assert meta == {}
        assert body == "Body"

    def test_non_mapping_yaml_yields_empty_metadata(self) -> None:
        meta, body = parse_frontmatter("---\n- a\n- b\n---\nBody")
        assert meta == {}
        assert body == "Body"

    def test_body_matches_strip(self) -> None:
        text = "---\nmodel: m\n---\nBody {{x}}"
        assert parse_frontmatter(text)[1] == strip_frontmatter(text)

    def test_no_block(self) -> None:
        assert parse_frontmatter("Body") == ({}, "Body")

    def test_empty_block(self) -> None:
        assert parse_frontmatter("---\n---\nBody\n---\nTail") == ({}, "Body\n---\nTail")


class TestPromptMetadata:
    def test_input_defaults(self) -> None:
        meta = PromptMetadata.model_validate({"input": {"default": {"language": "english"}}})
        assert meta.input_defaults == {"language": "english"}

    def test_input_defaults_missing(self) -> None:
        assert PromptMetadata().input_defaults == {}

    def test_input_defaults_not_mapping(self) -> None:
        meta = PromptMetadata.model_validate({"input": {"default": "english"}})
        assert meta.input_defaults == {}

    def test_unknown_keys_kept(self) -> None:
        meta = PromptMetadata.model_validate({"output": {"format": "text"}})
        assert meta.model_extra == {"output": {"format": "text"}}
