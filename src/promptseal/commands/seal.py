"""Command: refine a private template and seal it for transport."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from promptseal.commands._base import SealCommand

if TYPE_CHECKING:
    from promptseal.commands._context import AppContext


@click.command(
    cls=SealCommand,
    examples="""\
  promptseal seal "a todo app for teams" _idea
  promptseal --json seal "a recipe planner" _idea
  promptseal -q seal "a recipe planner" _idea > sealed.json""",
)
@click.argument("generator")
@click.argument("prompt_name")
@click.pass_obj
def seal(app: AppContext, generator: str, prompt_name: str) -> None:
    """Refine private template PROMPT_NAME for GENERATOR and print the sealed payload.

    PROMPT_NAME must start with the private marker (``_`` by default).
    """
    from promptseal.services.prompts import PromptService

    app.emit(PromptService(app.runtime).seal_prompt(generator, prompt_name))
