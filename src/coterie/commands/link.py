"""Command group: relationships between objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from coterie.commands._base import CoterieGroup, parse_assignments
from coterie.domain.models import Direction
from coterie.services.graph import GraphService

if TYPE_CHECKING:
    from coterie.commands._context import AppContext

_LINK_EXAMPLES = """\
  coterie link add "Jane Doe" employed_by "Acme Studios" --set role=President
  coterie link add "Acme Studios" produces "Night Train"
  coterie link list --object "Acme Studios" --direction incoming
  coterie link list --type employed_by
  coterie link delete 6b2f9c1d-..."""


@click.group(cls=CoterieGroup, examples=_LINK_EXAMPLES)
@click.pass_obj
def link(app: AppContext) -> None:
    """Create, list and delete relationships."""


@link.command()
@click.argument("source")
@click.argument("rel_type")
@click.argument("target")
@click.option("--set", "pairs", multiple=True, help="Attribute KEY=VALUE (repeatable).")
@click.pass_obj
def add(app: AppContext, source: str, rel_type: str, target: str, pairs: tuple[str, ...]) -> None:
    """Create a SOURCE -REL_TYPE-> TARGET relationship."""
    app.emit(
        GraphService(app.store).create_relationship(
            source, target, rel_type, data=parse_assignments(pairs)
        )
    )


@link.command("list")
@click.option("--object", "ref", default=None, help="Only relationships touching this object.")
@click.option("--type", "rel_type", default=None, help="Filter by relationship type.")
@click.option(
    "--direction",
    type=click.Choice([d.value for d in Direction]),
    default=None,
    help="With --object: only outgoing or incoming edges.",
)
@click.pass_obj
def list_cmd(
    app: AppContext,
    ref: str | None,
    rel_type: str | None,
    direction: str | None,
) -> None:
    """List relationships."""
    app.emit(
        GraphService(app.store).list_relationships(
            ref=ref,
            rel_type=rel_type,
            direction=Direction(direction) if direction else None,
        )
    )


@link.command()
@click.argument("relationship_id")
@click.pass_obj
def delete(app: AppContext, relationship_id: str) -> None:
    """Delete a relationship by id."""
    app.emit(GraphService(app.store).delete_relationship(relationship_id))
