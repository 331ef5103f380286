"""Rich Console factory and theme for promptseal output.

Consoles render into a StringIO buffer so ``format_result() -> str`` stays
a pure function.  Rich drops color codes on its own when stdout is not a
terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

PROMPTSEAL_THEME = Theme(
    {
        "ps.ok": "bold green",
        "ps.error": "bold red",
        "ps.warning": "bold yellow",
        "ps.op": "bold cyan",
        "ps.key": "dim",
        "ps.name": "bold blue",
        "ps.hex": "dim",
        "ps.missing": "red",
        "ps.present": "green",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=PROMPTSEAL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
