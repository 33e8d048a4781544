"""Rich Console factory and theme for coterie output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

COTERIE_THEME = Theme(
    {
        "coterie.ok": "bold green",
        "coterie.error": "bold red",
        "coterie.warning": "bold yellow",
        "coterie.op": "bold cyan",
        "coterie.key": "dim",
        "coterie.id": "bold blue",
        "coterie.name": "bold",
        "coterie.class.company": "blue",
        "coterie.class.person": "green",
        "coterie.class.project": "yellow",
        "coterie.score": "magenta",
    }
)

_CLASS_STYLES: dict[str, str] = {
    "company": "coterie.class.company",
    "person": "coterie.class.person",
    "project": "coterie.class.project",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=COTERIE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_class(object_class: str) -> str:
    """Return the Rich style name for an object class."""
    return _CLASS_STYLES.get(object_class, "")
