"""Command: the composite requirement-score prompt."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from promptseal.commands._base import SealCommand

if TYPE_CHECKING:
    from promptseal.commands._context import AppContext


@click.command(
    cls=SealCommand,
    examples="""\
  promptseal score fintech
  promptseal score fintech --maxscore 5 --language spanish
  promptseal score fintech --dry-run""",
)
@click.argument("category")
@click.option(
    "--maxscore",
    type=click.IntRange(min=1),
    default=None,
    help="Top of the scale (default 10).",
)
@click.option("--language", default=None, help="Answer language (default english).")
@click.option("--dry-run", is_flag=True, help="Print the composed prompt without running it.")
@click.pass_obj
def score(
    app: AppContext,
    category: str,
    maxscore: int | None,
    language: str | None,
    dry_run: bool,
) -> None:
    """Score how well generated ideas for CATEGORY meet their requirements.

    Composes the idea, idea-score and requirement-score templates into one
    prompt and runs it.
    """
    from promptseal.services.prompts import PromptService

    svc = PromptService(app.runtime)
    if dry_run:
        app.emit(svc.resolve_composite(category, maxscore=maxscore, language=language))
    else:
        app.emit(svc.requirement_score(category, maxscore=maxscore, language=language))
