"""Placeholder substitution engine.

Two passes build a composite prompt:

1. :func:`substitute_scalars` replaces ``{{ name }}`` placeholders with
   caller-supplied scalar values.
2. :func:`compose_templates` injects whole templates into each other, keyed
   by template name, in exactly one non-recursive round.

INVARIANT: substituted text is never re-scanned.  A value that itself
contains ``{{ other }}`` keeps that placeholder literally.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

# Names exclude whitespace and braces, so Handlebars helpers that take
# arguments ("{{#each items}}") never match.
PLACEHOLDER_RE = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")


def _render_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def substitute_scalars(text: str, context: Mapping[str, object]) -> str:
    """Replace every placeholder named in *context* with its string form.

    Placeholders with no matching key, or whose value is ``None``, are left
    untouched; that is a deliberate no-op, not an error.

    Examples:
        >>> substitute_scalars("Idea: {{idea}}", {"idea": "solar kite"})
        'Idea: solar kite'
        >>> substitute_scalars("Idea: {{ idea }}", {})
        'Idea: {{ idea }}'
    """
    values = {str(key): _render_value(value) for key, value in context.items() if value is not None}
    if not values:
        return text

    def _replace(match: re.Match[str]) -> str:
        return values.get(match.group(1), match.group(0))

    return PLACEHOLDER_RE.sub(_replace, text)


def compose_templates(resolved: Mapping[str, str]) -> dict[str, str]:
    """Cross-inject templates into each other in a single round.

    Every entry's placeholders that name another entry (or the entry
    itself) are replaced with that entry's *input* text, i.e. its pass-1
    form.  Mutual references each receive the other's pre-injection text;
    there is no fixed-point iteration and therefore no cycle detection.
    """
    return {key: substitute_scalars(text, resolved) for key, text in resolved.items()}


def find_placeholders(text: str) -> list[str]:
    """Distinct placeholder names in *text*, in order of first appearance."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_RE.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)
