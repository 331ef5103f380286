"""Command: generate a cipher key."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from promptseal.commands._base import SealCommand

if TYPE_CHECKING:
    from promptseal.commands._context import AppContext


@click.command(
    cls=SealCommand,
    examples="""\
  promptseal keygen
  export PROMPTSEAL_CRYPTO__KEY=$(promptseal -q keygen)""",
)
@click.pass_obj
def keygen(app: AppContext) -> None:
    """Print a new random 32-byte key, base64-encoded."""
    from promptseal.services.prompts import PromptService

    app.emit(PromptService.generate_key())
