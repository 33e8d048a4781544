"""GraphSnapshot — the store's denormalized in-memory mirror.

Holds every taxonomy row and graph entity in plain lists so that queries
are synchronous, I/O-free, and iterate in a stable order: objects always by
name (ties by id), everything else in load or creation order. The
``put_*`` / ``drop_*`` methods are called by
:class:`~coterie.infrastructure.store.store.GraphStore` only after the
backing write succeeded.
"""

from __future__ import annotations

from bisect import insort
from dataclasses import dataclass, field

from coterie.domain.models import (
    Direction,
    GraphObject,
    GraphRelationship,
    ObjectClass,
    ObjectType,
    ObjectTypeAssignment,
    RelatedObject,
    RelationshipType,
)


def _by_name(obj: GraphObject) -> tuple[str, str]:
    return (obj.name, obj.id)


@dataclass
class GraphSnapshot:
    """Full graph state plus pure query helpers."""

    object_classes: list[ObjectClass] = field(default_factory=list)
    object_types: list[ObjectType] = field(default_factory=list)
    relationship_types: list[RelationshipType] = field(default_factory=list)
    objects: list[GraphObject] = field(default_factory=list)
    assignments: list[ObjectTypeAssignment] = field(default_factory=list)
    relationships: list[GraphRelationship] = field(default_factory=list)

    @classmethod
    def loaded(
        cls,
        *,
        object_classes: list[ObjectClass],
        object_types: list[ObjectType],
        relationship_types: list[RelationshipType],
        objects: list[GraphObject],
        assignments: list[ObjectTypeAssignment],
        relationships: list[GraphRelationship],
    ) -> GraphSnapshot:
        """Build a snapshot from freshly loaded rows, objects sorted by name."""
        return cls(
            object_classes=list(object_classes),
            object_types=list(object_types),
            relationship_types=list(relationship_types),
            objects=sorted(objects, key=_by_name),
            assignments=list(assignments),
            relationships=list(relationships),
        )

    def copy(self) -> GraphSnapshot:
        """Shallow copy; entities are frozen so sharing them is safe."""
        return GraphSnapshot(
            object_classes=list(self.object_classes),
            object_types=list(self.object_types),
            relationship_types=list(self.relationship_types),
            objects=list(self.objects),
            assignments=list(self.assignments),
            relationships=list(self.relationships),
        )

    @property
    def has_taxonomy(self) -> bool:
        return bool(self.object_classes)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def object_class(self, class_id: str) -> ObjectClass | None:
        return next((c for c in self.object_classes if c.id == class_id), None)

    def object_type(self, type_id: str) -> ObjectType | None:
        return next((t for t in self.object_types if t.id == type_id), None)

    def relationship_type(self, type_id: str) -> RelationshipType | None:
        return next((t for t in self.relationship_types if t.id == type_id), None)

    def get_object(self, object_id: str) -> GraphObject | None:
        return next((o for o in self.objects if o.id == object_id), None)

    def get_relationship(self, relationship_id: str) -> GraphRelationship | None:
        return next((r for r in self.relationships if r.id == relationship_id), None)

    def find_relationship(
        self, source_id: str, target_id: str, rel_type: str
    ) -> GraphRelationship | None:
        triple = (source_id, target_id, rel_type)
        return next((r for r in self.relationships if r.triple == triple), None)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def objects_of_class(self, class_id: str) -> list[GraphObject]:
        return [o for o in self.objects if o.object_class == class_id]

    def objects_with_type(self, type_id: str) -> list[GraphObject]:
        ids = {a.object_id for a in self.assignments if a.type_id == type_id}
        return [o for o in self.objects if o.id in ids]

    def types_of_object(self, object_id: str) -> list[ObjectType]:
        """Types assigned to an object: the primary one first, then taxonomy order."""
        assigned = {a.type_id: a.is_primary for a in self.assignments if a.object_id == object_id}
        types = [t for t in self.object_types if t.id in assigned]
        return sorted(types, key=lambda t: not assigned[t.id])

    def primary_type(self, object_id: str) -> ObjectType | None:
        types = self.types_of_object(object_id)
        return types[0] if types else None

    def types_of_class(self, class_id: str) -> list[ObjectType]:
        return [t for t in self.object_types if t.object_class == class_id]

    def relationships_of_object(self, object_id: str) -> list[GraphRelationship]:
        return [
            r for r in self.relationships if r.source_id == object_id or r.target_id == object_id
        ]

    def related_objects(self, object_id: str) -> list[RelatedObject]:
        """Neighbours of an object with the connecting edge and its direction."""
        index = {o.id: o for o in self.objects}
        related: list[RelatedObject] = []
        for rel in self.relationships:
            if rel.source_id == object_id and rel.target_id in index:
                related.append(
                    RelatedObject(
                        relationship=rel,
                        neighbor=index[rel.target_id],
                        direction=Direction.OUTGOING,
                    )
                )
            elif rel.target_id == object_id and rel.source_id in index:
                related.append(
                    RelatedObject(
                        relationship=rel,
                        neighbor=index[rel.source_id],
                        direction=Direction.INCOMING,
                    )
                )
        return related

    # ------------------------------------------------------------------
    # Mirror maintenance (called after a successful backend write)
    # ------------------------------------------------------------------

    def put_object(self, obj: GraphObject) -> None:
        """Insert or replace an object, keeping the list ordered by name then id."""
        for i, existing in enumerate(self.objects):
            if existing.id == obj.id:
                del self.objects[i]
                break
        insort(self.objects, obj, key=_by_name)

    def drop_object(self, object_id: str) -> None:
        """Remove an object with its assignments and incident relationships."""
        self.objects = [o for o in self.objects if o.id != object_id]
        self.assignments = [a for a in self.assignments if a.object_id != object_id]
        self.relationships = [
            r for r in self.relationships if object_id not in (r.source_id, r.target_id)
        ]

    def put_assignment(self, assignment: ObjectTypeAssignment) -> None:
        """Upsert an assignment; a primary one demotes the object's other primaries."""
        updated: list[ObjectTypeAssignment] = []
        replaced = False
        for existing in self.assignments:
            if existing.object_id == assignment.object_id:
                if existing.type_id == assignment.type_id:
                    updated.append(assignment)
                    replaced = True
                    continue
                if assignment.is_primary and existing.is_primary:
                    existing = existing.model_copy(update={"is_primary": False})
            updated.append(existing)
        if not replaced:
            updated.append(assignment)
        self.assignments = updated

    def demote_primary(self, object_id: str) -> None:
        self.assignments = [
            a.model_copy(update={"is_primary": False})
            if a.object_id == object_id and a.is_primary
            else a
            for a in self.assignments
        ]

    def drop_assignment(self, object_id: str, type_id: str) -> None:
        self.assignments = [
            a for a in self.assignments if not (a.object_id == object_id and a.type_id == type_id)
        ]

    def put_relationship(self, rel: GraphRelationship) -> None:
        for i, existing in enumerate(self.relationships):
            if existing.id == rel.id:
                self.relationships[i] = rel
                return
        self.relationships.append(rel)

    def drop_relationship(self, relationship_id: str) -> None:
        self.relationships = [r for r in self.relationships if r.id != relationship_id]
