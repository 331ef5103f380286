"""Frontmatter handling for prompt templates.

Templates may open with a metadata block::

    ---
    model: ollama/gemma3:4b
    config:
      temperature: 0.8
    ---
    Idea: {{idea}}

``strip_frontmatter`` is the hot path: it runs once per template read and
only cuts the block off.  ``parse_frontmatter`` additionally loads the block
as YAML for callers that honour template-level defaults.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, Field
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

logger = logging.getLogger(__name__)

# One leading block: bare "---" line, optional body, closing "---" line.
# The empty block is tried first so a later "---" cannot swallow the body.
_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?:---|(?P<meta>.*?)\r?\n---)[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)


def _new_yaml() -> YAML:
    """Create a fresh safe YAML loader (ruamel's YAML object is stateful)."""
    return YAML(typ="safe", pure=True)


def strip_frontmatter(raw_text: str) -> str:
    """Return *raw_text* without its leading frontmatter block.

    Only a block starting at the very first character is removed.  Both
    ``\\n`` and ``\\r\\n`` line endings are accepted.  Text without a
    complete block is returned unchanged.

    Examples:
        >>> strip_frontmatter("---\\nmodel: x\\n---\\nHello")
        'Hello'
        >>> strip_frontmatter("Hello\\n---\\nmodel: x\\n---\\n")
        'Hello\\n---\\nmodel: x\\n---\\n'
    """
    match = _FRONTMATTER_RE.match(raw_text)
    if match is None:
        return raw_text
    return raw_text[match.end() :]


def parse_frontmatter(raw_text: str) -> tuple[dict[str, Any], str]:
    """Split *raw_text* into ``(metadata, body)``.

    The body is always the same string :func:`strip_frontmatter` returns.
    YAML that fails to load, or that is not a mapping, yields ``{}`` so a
    cosmetic metadata problem never blocks the template itself.
    """
    match = _FRONTMATTER_RE.match(raw_text)
    if match is None:
        return {}, raw_text

    body = raw_text[match.end() :]
    block = match.group("meta") or ""
    if not block.strip():
        return {}, body

    try:
        loaded = _new_yaml().load(block.replace("\r\n", "\n"))
    except YAMLError:
        logger.warning("Ignoring unparseable template frontmatter", exc_info=True)
        return {}, body

    if not isinstance(loaded, dict):
        return {}, body
    return loaded, body


class PromptMetadata(BaseModel):
    """Dotprompt-style metadata carried in a template's frontmatter.

    Attributes:
        model: Model identifier the template was written for (informational).
        config: Generation defaults (``temperature``, ``topP``, ...).
        input: Input declaration; only ``input.default`` is interpreted.
    """

    model_config = {"frozen": True, "extra": "allow"}

    model: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    input: dict[str, Any] = Field(default_factory=dict)

    @property
    def input_defaults(self) -> dict[str, Any]:
        """Default input values declared under ``input.default``."""
        defaults = self.input.get("default")
        if isinstance(defaults, dict):
            return dict(defaults)
        return {}
