"""MemoryBackend — dict-backed backend for tests and dry runs.

Same semantics as the persistent backends: cascade on object delete,
duplicate relationship triples raise ``Conflict``, missing targets of
update/delete are no-ops. Writes can be made to fail on demand through
``fail_on`` so tests can exercise error paths without a real driver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from coterie.domain.taxonomy import OBJECT_CLASSES, OBJECT_TYPES, RELATIONSHIP_TYPES
from coterie.infrastructure.errors import Conflict, StorageFailure
from coterie.infrastructure.store.base import StoreBackend
from coterie.infrastructure.store.snapshot import GraphSnapshot

if TYPE_CHECKING:
    from coterie.domain.models import GraphObject, GraphRelationship, ObjectTypeAssignment


class MemoryBackend(StoreBackend):
    """Holds rows in insertion-ordered dicts."""

    name = "memory"

    def __init__(self, *, seed: bool = True) -> None:
        self.objects: dict[str, GraphObject] = {}
        self.assignments: dict[tuple[str, str], ObjectTypeAssignment] = {}
        self.relationships: dict[str, GraphRelationship] = {}
        self.seeded = seed
        self.fail_on: set[str] = set()

    @classmethod
    def from_snapshot(cls, snapshot: GraphSnapshot) -> MemoryBackend:
        """Copy a snapshot's rows into a fresh backend (used for dry runs)."""
        backend = cls(seed=snapshot.has_taxonomy)
        backend.objects = {o.id: o for o in snapshot.objects}
        backend.assignments = {(a.object_id, a.type_id): a for a in snapshot.assignments}
        backend.relationships = {r.id: r for r in snapshot.relationships}
        return backend

    def _check(self, op: str) -> None:
        if op in self.fail_on:
            raise StorageFailure(f"{op} failed", body="injected failure")

    def load(self) -> GraphSnapshot:
        self._check("load")
        return GraphSnapshot.loaded(
            object_classes=list(OBJECT_CLASSES) if self.seeded else [],
            object_types=list(OBJECT_TYPES) if self.seeded else [],
            relationship_types=list(RELATIONSHIP_TYPES) if self.seeded else [],
            objects=list(self.objects.values()),
            assignments=list(self.assignments.values()),
            relationships=list(self.relationships.values()),
        )

    def insert_object(self, obj: GraphObject) -> GraphObject:
        self._check("insert_object")
        self.objects[obj.id] = obj
        return obj

    def update_object(self, obj: GraphObject) -> GraphObject | None:
        self._check("update_object")
        if obj.id not in self.objects:
            return None
        self.objects[obj.id] = obj
        return obj

    def delete_object(self, object_id: str) -> None:
        self._check("delete_object")
        self.objects.pop(object_id, None)
        self.assignments = {k: a for k, a in self.assignments.items() if k[0] != object_id}
        self.relationships = {
            k: r
            for k, r in self.relationships.items()
            if object_id not in (r.source_id, r.target_id)
        }

    def upsert_assignment(self, assignment: ObjectTypeAssignment) -> ObjectTypeAssignment:
        self._check("upsert_assignment")
        self.assignments[(assignment.object_id, assignment.type_id)] = assignment
        return assignment

    def demote_primary(self, object_id: str) -> None:
        self._check("demote_primary")
        for key, a in self.assignments.items():
            if a.object_id == object_id and a.is_primary:
                self.assignments[key] = a.model_copy(update={"is_primary": False})

    def delete_assignment(self, object_id: str, type_id: str) -> None:
        self._check("delete_assignment")
        self.assignments.pop((object_id, type_id), None)

    def insert_relationship(self, rel: GraphRelationship) -> GraphRelationship:
        self._check("insert_relationship")
        for existing in self.relationships.values():
            if existing.triple == rel.triple:
                raise Conflict(
                    f"Relationship {rel.source_id} -{rel.type}-> {rel.target_id} already exists",
                    detail={"existing_id": existing.id},
                )
        self.relationships[rel.id] = rel
        return rel

    def delete_relationship(self, relationship_id: str) -> None:
        self._check("delete_relationship")
        self.relationships.pop(relationship_id, None)
