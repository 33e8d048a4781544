"""Command group: import contacts and known industry landscapes."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from coterie.commands._base import CoterieGroup

if TYPE_CHECKING:
    from coterie.commands._context import AppContext
    from coterie.services.importer import ContactImportService

_IMPORT_EXAMPLES = """\
  coterie import contacts contacts.json
  coterie import contacts contacts.json --threshold 0.85
  coterie import landscape landscape.json
  coterie --json import landscape landscape.json"""

_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.group("import", cls=CoterieGroup, examples=_IMPORT_EXAMPLES)
@click.pass_obj
def import_group(app: AppContext) -> None:
    """Bring external contacts and companies into the graph."""


def _service(app: AppContext, threshold: float | None) -> ContactImportService:
    from coterie.services.importer import ContactImportService

    return ContactImportService(
        app.store,
        layout_config=app.settings.layout,
        threshold=threshold if threshold is not None else app.settings.matching.import_threshold,
    )


@import_group.command()
@click.argument("path", type=_FILE)
@click.option(
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Company match threshold (default from [matching] import_threshold).",
)
@click.pass_obj
def contacts(app: AppContext, path: Path, threshold: float | None) -> None:
    """Import address-book contacts from a JSON file."""
    from coterie.infrastructure.errors import StoreError
    from coterie.services._helpers import error_result
    from coterie.services.importer import load_contacts

    try:
        entries = load_contacts(path)
    except StoreError as exc:
        app.emit(error_result("import_contacts", exc))
        return
    app.emit(_service(app, threshold).import_contacts(entries))


@import_group.command()
@click.argument("path", type=_FILE)
@click.pass_obj
def landscape(app: AppContext, path: Path) -> None:
    """Import a curated company landscape from a JSON file."""
    from coterie.infrastructure.errors import StoreError
    from coterie.services._helpers import error_result
    from coterie.services.importer import load_landscape

    try:
        companies = load_landscape(path)
    except StoreError as exc:
        app.emit(error_result("import_landscape", exc))
        return
    app.emit(_service(app, None).import_landscape(companies))
