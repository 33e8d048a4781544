"""Command group: objects (companies, people, projects) and their types."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from coterie.commands._base import CoterieGroup, parse_assignments
from coterie.domain.taxonomy import ObjectClassId
from coterie.services.graph import GraphService

if TYPE_CHECKING:
    from coterie.commands._context import AppContext

_CLASS_CHOICE = click.Choice([c.value for c in ObjectClassId], case_sensitive=False)

_OBJECT_EXAMPLES = """\
  coterie object add company "Acme Studios" --type studio
  coterie object add person "Jane Doe" --type executive --set title=VP
  coterie object list --class company
  coterie object show "Acme Studios" --depth 2
  coterie object rename "Acme Studios" "Acme Pictures"
  coterie object move "Jane Doe" 420 1450
  coterie object set "Jane Doe" --set email=jane@example.com --unset phone
  coterie object assign-type "Acme Studios" streamer --primary
  coterie object remove-type "Acme Studios" studio
  coterie object delete "Jane Doe\""""


@click.group("object", cls=CoterieGroup, examples=_OBJECT_EXAMPLES)
@click.pass_obj
def object_group(app: AppContext) -> None:
    """Create, inspect and edit graph objects."""


@object_group.command(
    examples="""\
  coterie object add company "Acme Studios" --type studio
  coterie object add project "Night Train" --type feature --set year=2026
  coterie --json object add person "Jane Doe\""""
)
@click.argument("object_class", type=_CLASS_CHOICE)
@click.argument("name")
@click.option("--type", "types", multiple=True, help="Object type (repeatable, first is primary).")
@click.option("--set", "pairs", multiple=True, help="Attribute KEY=VALUE (repeatable).")
@click.pass_obj
def add(
    app: AppContext,
    object_class: str,
    name: str,
    types: tuple[str, ...],
    pairs: tuple[str, ...],
) -> None:
    """Create an object."""
    data = parse_assignments(pairs)
    app.emit(
        GraphService(app.store).create_object(
            object_class.lower(), name, types=types, data=data
        )
    )


@object_group.command(
    "list",
    examples="""\
  coterie object list
  coterie object list --class person
  coterie object list --type studio
  coterie -q object list --name acme""",
)
@click.option("--class", "object_class", type=_CLASS_CHOICE, default=None, help="Filter by class.")
@click.option("--type", "type_id", default=None, help="Filter by assigned type.")
@click.option("--name", "name_contains", default=None, help="Case-insensitive name substring.")
@click.pass_obj
def list_cmd(
    app: AppContext,
    object_class: str | None,
    type_id: str | None,
    name_contains: str | None,
) -> None:
    """List objects."""
    app.emit(
        GraphService(app.store).list_objects(
            object_class=object_class.lower() if object_class else None,
            type_id=type_id,
            name_contains=name_contains,
        )
    )


@object_group.command(
    examples="""\
  coterie object show "Acme Studios"
  coterie -v object show 3f1c0a7e-... --depth 2"""
)
@click.argument("ref")
@click.option("--depth", default=1, type=click.IntRange(1, 5), help="Neighbourhood radius.")
@click.pass_obj
def show(app: AppContext, ref: str, depth: int) -> None:
    """Show an object with its relationships."""
    app.emit(GraphService(app.store).show_object(ref, depth=depth))


@object_group.command()
@click.argument("ref")
@click.argument("name")
@click.pass_obj
def rename(app: AppContext, ref: str, name: str) -> None:
    """Rename an object."""
    app.emit(GraphService(app.store).rename_object(ref, name))


@object_group.command()
@click.argument("ref")
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.pass_obj
def move(app: AppContext, ref: str, x: float, y: float) -> None:
    """Set an object's canvas position."""
    app.emit(GraphService(app.store).move_object(ref, x, y))


@object_group.command(
    "set",
    examples="""\
  coterie object set "Jane Doe" --set title=President
  coterie object set "Acme Studios" --set 'specialty=["horror","thriller"]'
  coterie object set "Jane Doe" --unset phone""",
)
@click.argument("ref")
@click.option("--set", "pairs", multiple=True, help="Attribute KEY=VALUE (repeatable).")
@click.option("--unset", multiple=True, help="Attribute key to remove (repeatable).")
@click.pass_obj
def set_cmd(app: AppContext, ref: str, pairs: tuple[str, ...], unset: tuple[str, ...]) -> None:
    """Merge attributes into an object's data."""
    if not pairs and not unset:
        click.echo("No changes specified. Use --help for options.", err=True)
        raise SystemExit(1)
    app.emit(GraphService(app.store).update_data(ref, parse_assignments(pairs), unset=unset))


@object_group.command()
@click.argument("ref")
@click.pass_obj
def delete(app: AppContext, ref: str) -> None:
    """Delete an object with its type assignments and relationships."""
    app.emit(GraphService(app.store).delete_object(ref))


@object_group.command("assign-type")
@click.argument("ref")
@click.argument("type_id")
@click.option("--primary", is_flag=True, help="Make this the primary type.")
@click.pass_obj
def assign_type(app: AppContext, ref: str, type_id: str, primary: bool) -> None:
    """Assign a type to an object."""
    app.emit(GraphService(app.store).assign_type(ref, type_id, primary=primary))


@object_group.command("remove-type")
@click.argument("ref")
@click.argument("type_id")
@click.pass_obj
def remove_type(app: AppContext, ref: str, type_id: str) -> None:
    """Remove a type from an object."""
    app.emit(GraphService(app.store).remove_type(ref, type_id))
