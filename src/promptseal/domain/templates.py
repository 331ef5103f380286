"""PromptTemplate — one template as read from the store."""

from __future__ import annotations

import logging
from functools import cached_property

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from promptseal.domain.frontmatter import PromptMetadata, parse_frontmatter, strip_frontmatter

logger = logging.getLogger(__name__)


class PromptTemplate(BaseModel):
    """Raw template text addressed by name.

    Instances are ephemeral: read, used, discarded.  ``body`` and
    ``metadata`` are derived lazily from ``raw_text``.
    """

    model_config = {"frozen": True, "ignored_types": (cached_property,)}

    name: str
    raw_text: str

    @cached_property
    def body(self) -> str:
        """Template text with any leading frontmatter removed."""
        return strip_frontmatter(self.raw_text)

    @cached_property
    def metadata(self) -> PromptMetadata:
        """Parsed frontmatter; empty metadata when the template has none."""
        fm, _body = parse_frontmatter(self.raw_text)
        try:
            return PromptMetadata.model_validate(fm)
        except PydanticValidationError:
            logger.warning("Ignoring invalid metadata in template %s", self.name, exc_info=True)
            return PromptMetadata()
