"""Command group: single-template flows."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from promptseal.commands._base import SealGroup, parse_assignments

if TYPE_CHECKING:
    from promptseal.commands._context import AppContext


@click.group(
    cls=SealGroup,
    examples="""\
  promptseal flow list
  promptseal flow run categories -p language=english
  promptseal flow run operation -p idea1="..." -p idea2="..." -p operation=Combine
  promptseal flow random --language spanish""",
)
def flow() -> None:
    """List and run single-template flows."""


@flow.command(
    "list",
    examples="""\
  promptseal flow list
  promptseal -q flow list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """Show every flow, its template and its required inputs."""
    from promptseal.services.prompts import PromptService

    app.emit(PromptService(app.runtime).list_flows())


@flow.command(
    examples="""\
  promptseal flow run generate_idea -p category=health -p language=english
  promptseal flow run tasks -p idea="a meal planner"
  promptseal --json flow run subjects""",
)
@click.argument("name")
@click.option(
    "-p",
    "--param",
    "params",
    multiple=True,
    metavar="KEY=VALUE",
    help="Flow input (repeatable).",
)
@click.pass_obj
def run(app: AppContext, name: str, params: tuple[str, ...]) -> None:
    """Run flow NAME."""
    from promptseal.services.prompts import PromptService

    values = parse_assignments(params, option="--param")
    app.emit(PromptService(app.runtime).run_flow(name, values))


@flow.command(
    "random",
    examples="""\
  promptseal flow random
  promptseal flow random --language french""",
)
@click.option("--language", default="english", show_default=True, help="Idea language.")
@click.pass_obj
def random_cmd(app: AppContext, language: str) -> None:
    """Generate an idea for a randomly picked generated category."""
    from promptseal.services.prompts import PromptService

    app.emit(PromptService(app.runtime).random_idea(language))
