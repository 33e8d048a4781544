"""Command: deterministic auto-layout of the canvas."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from coterie.commands._base import CoterieCommand

if TYPE_CHECKING:
    from coterie.commands._context import AppContext


@click.command(
    cls=CoterieCommand,
    examples="""\
  coterie layout
  coterie layout --force
  coterie -v layout --dry-run""",
)
@click.option("--force", is_flag=True, help="Re-place objects that already have a position.")
@click.option("--dry-run", is_flag=True, help="Report planned positions without saving them.")
@click.pass_obj
def layout(app: AppContext, force: bool, dry_run: bool) -> None:
    """Place unpositioned objects on the canvas."""
    from coterie.services.layout import LayoutService

    service = LayoutService(app.store, app.settings.layout)
    app.emit(service.auto_layout(force=force, dry_run=dry_run))
