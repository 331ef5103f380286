"""Command: open a sealed prompt and run it."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import click

from promptseal.commands._base import SealCommand, parse_assignments

if TYPE_CHECKING:
    from promptseal.commands._context import AppContext


@click.command(
    "exec",
    cls=SealCommand,
    examples="""\
  promptseal exec sealed.json --var language=english
  promptseal -q seal "a recipe planner" _idea | promptseal exec - --var category=food
  promptseal --json exec sealed.json""",
)
@click.argument("payload_file", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--var",
    "variables",
    multiple=True,
    metavar="KEY=VALUE",
    help="Runtime value for a {{ placeholder }} (repeatable).",
)
@click.pass_obj
def exec_cmd(app: AppContext, payload_file: TextIO, variables: tuple[str, ...]) -> None:
    """Decrypt the payload in PAYLOAD_FILE (default: stdin), fill it in, and run it.

    A payload that cannot be opened yields an empty result and a warning,
    not an error.
    """
    from promptseal.services.prompts import PromptService

    values = parse_assignments(variables, option="--var")
    app.emit(PromptService(app.runtime).exec_prompt(payload_file.read(), values))
