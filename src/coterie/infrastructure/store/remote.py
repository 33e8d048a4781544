"""RemoteBackend — mirrors the graph to PostgREST resources.

One HTTP request per backend call. Writes send the full row and decode the
canonical row the server returns, so server-derived fields (defaults,
triggers, normalized timestamps) flow back into the store's snapshot.
Cascades and the relationship uniqueness constraint are enforced by the
server schema; a duplicate triple comes back as HTTP 409 and surfaces as
``Conflict``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from coterie.infrastructure.concurrency import fan_out
from coterie.infrastructure.rows import (
    assignment_from_row,
    class_from_row,
    iso,
    object_from_row,
    object_to_row,
    relationship_from_row,
    relationship_to_row,
    relationship_type_from_row,
    type_from_row,
)
from coterie.infrastructure.store.base import StoreBackend
from coterie.infrastructure.store.snapshot import GraphSnapshot

if TYPE_CHECKING:
    from coterie.domain.models import GraphObject, GraphRelationship, ObjectTypeAssignment
    from coterie.infrastructure.remote.client import RestClient

logger = logging.getLogger(__name__)

# Read in this order; results are reassembled by index.
_RESOURCES: tuple[tuple[str, str | None], ...] = (
    ("object_classes", None),
    ("object_types", None),
    ("relationship_types", None),
    ("objects", "name.asc,id.asc"),
    ("object_type_assignments", None),
    ("relationships", "created_at.asc,id.asc"),
)


class RemoteBackend(StoreBackend):
    """PostgREST-backed persistence."""

    name = "remote"

    def __init__(self, client: RestClient, *, max_concurrency: int = 4) -> None:
        self._client = client
        self._max_concurrency = max_concurrency

    def load(self) -> GraphSnapshot:
        def read(table: tuple[str, str | None]) -> list[dict[str, Any]]:
            resource, order = table
            return self._client.select(resource, order=order)

        classes, types, rel_types, object_rows, assignment_rows, rel_rows = fan_out(
            _RESOURCES, read, max_workers=self._max_concurrency
        )
        logger.debug(
            "Loaded remote graph: %d objects, %d relationships", len(object_rows), len(rel_rows)
        )
        return GraphSnapshot.loaded(
            object_classes=[class_from_row(r) for r in classes],
            object_types=[type_from_row(r) for r in types],
            relationship_types=[relationship_type_from_row(r) for r in rel_types],
            objects=[object_from_row(r) for r in object_rows],
            assignments=[assignment_from_row(r) for r in assignment_rows],
            relationships=[relationship_from_row(r) for r in rel_rows],
        )

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def insert_object(self, obj: GraphObject) -> GraphObject:
        rows = self._client.insert("objects", object_to_row(obj, as_text=False))
        return object_from_row(rows[0]) if rows else obj

    def update_object(self, obj: GraphObject) -> GraphObject | None:
        rows = self._client.update(
            "objects",
            {
                "name": obj.name,
                "data": obj.data,
                "map_x": obj.position.x if obj.position else None,
                "map_y": obj.position.y if obj.position else None,
                "updated_at": iso(obj.updated_at),
            },
            filters={"id": obj.id},
        )
        return object_from_row(rows[0]) if rows else None

    def delete_object(self, object_id: str) -> None:
        self._client.delete("objects", filters={"id": object_id})

    # ------------------------------------------------------------------
    # Type assignments
    # ------------------------------------------------------------------

    def upsert_assignment(self, assignment: ObjectTypeAssignment) -> ObjectTypeAssignment:
        rows = self._client.upsert(
            "object_type_assignments",
            assignment.model_dump(),
            on_conflict="object_id,type_id",
        )
        return assignment_from_row(rows[0]) if rows else assignment

    def demote_primary(self, object_id: str) -> None:
        self._client.update(
            "object_type_assignments",
            {"is_primary": False},
            filters={"object_id": object_id, "is_primary": True},
        )

    def delete_assignment(self, object_id: str, type_id: str) -> None:
        self._client.delete(
            "object_type_assignments",
            filters={"object_id": object_id, "type_id": type_id},
        )

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def insert_relationship(self, rel: GraphRelationship) -> GraphRelationship:
        rows = self._client.insert("relationships", relationship_to_row(rel, as_text=False))
        return relationship_from_row(rows[0]) if rows else rel

    def delete_relationship(self, relationship_id: str) -> None:
        self._client.delete("relationships", filters={"id": relationship_id})

    def close(self) -> None:
        self._client.close()
