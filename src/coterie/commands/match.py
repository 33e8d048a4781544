"""Command: fuzzy-match a name against existing objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from coterie.commands._base import CoterieCommand
from coterie.domain.taxonomy import ObjectClassId

if TYPE_CHECKING:
    from coterie.commands._context import AppContext


@click.command(
    cls=CoterieCommand,
    examples="""\
  coterie match "Acme Studios, Inc."
  coterie match "Jane Doe" --class person --threshold 0.9
  coterie --json match "The Acme Company\"""",
)
@click.argument("name")
@click.option(
    "--class",
    "object_class",
    type=click.Choice([c.value for c in ObjectClassId], case_sensitive=False),
    default=ObjectClassId.COMPANY.value,
    show_default=True,
    help="Object class to search.",
)
@click.option(
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Similarity threshold (default from [matching] threshold).",
)
@click.option("--limit", default=10, type=click.IntRange(min=1), help="Max candidates.")
@click.pass_obj
def match(
    app: AppContext,
    name: str,
    object_class: str,
    threshold: float | None,
    limit: int,
) -> None:
    """Find the existing object that best matches NAME."""
    from coterie.services.matching import MatchService

    if threshold is None:
        threshold = app.settings.matching.threshold
    app.emit(
        MatchService(app.store).match(
            name, object_class=object_class.lower(), threshold=threshold, limit=limit
        )
    )
