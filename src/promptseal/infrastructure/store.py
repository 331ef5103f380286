"""Filesystem template store.

Templates are plain files under one root directory, addressed by name
without extension (``idea`` → ``<root>/idea.prompt``).  Every ``read`` goes
to disk; nothing is cached, so edits are visible to the next invocation.
"""

from __future__ import annotations

import logging
from pathlib import Path

from promptseal.domain.templates import PromptTemplate
from promptseal.errors import TemplateReadError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".prompt"


class TemplateStore:
    """Read-only access to the template directory."""

    def __init__(self, root: Path, *, extension: str = DEFAULT_EXTENSION) -> None:
        self.root = root
        self.extension = extension

    def path_for(self, name: str) -> Path:
        """Resolve the file path for template *name*.

        Raises:
            ValidationError: The name is empty or resolves outside the root.
        """
        if not name or name.strip() != name:
            msg = f"Invalid template name: {name!r}"
            raise ValidationError(msg)

        path = self.root / f"{name}{self.extension}"
        # Guard against path traversal via crafted names
        if not path.resolve().is_relative_to(self.root.resolve()):
            msg = f"Template name escapes template root: {name!r}"
            raise ValidationError(msg)
        return path

    def read(self, name: str) -> PromptTemplate:
        """Read template *name* from disk.

        Raises:
            ValidationError: See :meth:`path_for`.
            TemplateReadError: The file is missing, unreadable, or not UTF-8.
        """
        path = self.path_for(name)
        try:
            raw_text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Unable to read template file {path.name} ({path}): {exc}"
            raise TemplateReadError(msg) from exc

        logger.debug("Read template %s (%d chars)", path.name, len(raw_text))
        return PromptTemplate(name=name, raw_text=raw_text)

    def exists(self, name: str) -> bool:
        try:
            return self.path_for(name).is_file()
        except ValidationError:
            return False
