"""Command: print the seeded taxonomy."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from coterie.commands._base import CoterieCommand
from coterie.services.graph import GraphService

if TYPE_CHECKING:
    from coterie.commands._context import AppContext


@click.command(
    cls=CoterieCommand,
    examples="""\
  coterie taxonomy
  coterie --json taxonomy""",
)
@click.pass_obj
def taxonomy(app: AppContext) -> None:
    """List object classes, object types and relationship types."""
    app.emit(GraphService(app.store).taxonomy())
