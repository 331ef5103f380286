"""Subcommand modules for promptseal.

``register_commands()`` imports lazily so ``promptseal --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach the ``flow`` group and the standalone commands to *cli*."""
    from promptseal.commands.flow import flow

    cli.add_command(flow)

    from promptseal.commands.exec_cmd import exec_cmd
    from promptseal.commands.keygen import keygen
    from promptseal.commands.score import score
    from promptseal.commands.seal import seal

    cli.add_command(seal)
    cli.add_command(exec_cmd)
    cli.add_command(score)
    cli.add_command(keygen)
