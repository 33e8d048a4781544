"""GraphService — object, type-assignment and relationship operations.

Thin validation-and-shaping layer over :class:`GraphStore`. Objects can be
referenced by id or by exact (case-insensitive) name so the CLI stays
usable without copying UUIDs around.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from coterie.domain.models import AttributeMap, Direction, GraphObject
from coterie.infrastructure.errors import NotFound, StoreError, ValidationError
from coterie.infrastructure.graph.engine import GraphEngine
from coterie.services._helpers import error_result, object_payload, relationship_payload
from coterie.services.base import BaseService
from coterie.services.result import ServiceResult


class GraphService(BaseService):
    """Handles CRUD and neighbourhood queries on the graph."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def resolve_object(self, ref: str) -> GraphObject:
        """Find an object by id, else by unique case-insensitive name.

        Raises ``NotFound`` when nothing matches and ``ValidationError``
        when the name is ambiguous.
        """
        snap = self._store.snapshot
        obj = snap.get_object(ref)
        if obj is not None:
            return obj
        wanted = ref.strip().casefold()
        hits = [o for o in snap.objects if o.name.casefold() == wanted]
        if not hits:
            raise NotFound(f"No object with id or name '{ref}'", detail={"ref": ref})
        if len(hits) > 1:
            raise ValidationError(
                f"Name '{ref}' is ambiguous; use an id",
                detail={"ids": [o.id for o in hits]},
            )
        return hits[0]

    # ------------------------------------------------------------------
    # Taxonomy
    # ------------------------------------------------------------------

    def taxonomy(self) -> ServiceResult:
        """Object classes with their types, plus relationship types."""
        try:
            snap = self._store.snapshot
        except StoreError as exc:
            return error_result("taxonomy", exc)

        classes = [
            {
                "id": c.id,
                "display_name": c.display_name,
                "types": [
                    {"id": t.id, "display_name": t.display_name}
                    for t in snap.types_of_class(c.id)
                ],
            }
            for c in snap.object_classes
        ]
        relationship_types = [
            {
                "id": rt.id,
                "display_name": rt.display_name,
                "source": list(rt.valid_source_classes or []),
                "target": list(rt.valid_target_classes or []),
            }
            for rt in snap.relationship_types
        ]
        return ServiceResult(
            ok=True,
            op="taxonomy",
            data={"classes": classes, "relationship_types": relationship_types},
        )

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def create_object(
        self,
        object_class: str,
        name: str,
        *,
        types: Sequence[str] = (),
        data: AttributeMap | None = None,
    ) -> ServiceResult:
        op = "create_object"
        try:
            obj = self._store.create_object(object_class, name, types, data)
        except StoreError as exc:
            return error_result(op, exc)
        return ServiceResult(ok=True, op=op, data=object_payload(obj, self._store.snapshot))

    def list_objects(
        self,
        *,
        object_class: str | None = None,
        type_id: str | None = None,
        name_contains: str | None = None,
    ) -> ServiceResult:
        """Objects in snapshot order, optionally filtered."""
        op = "list_objects"
        try:
            snap = self._store.snapshot
        except StoreError as exc:
            return error_result(op, exc)

        if type_id is not None:
            items = snap.objects_with_type(type_id)
        elif object_class is not None:
            items = snap.objects_of_class(object_class)
        else:
            items = list(snap.objects)
        if type_id is not None and object_class is not None:
            items = [o for o in items if o.object_class == object_class]
        if name_contains:
            needle = name_contains.casefold()
            items = [o for o in items if needle in o.name.casefold()]

        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(items), "items": [object_payload(o, snap) for o in items]},
        )

    def show_object(self, ref: str, *, depth: int = 1) -> ServiceResult:
        """An object with its relationships and the ids within *depth* hops."""
        op = "show_object"
        try:
            obj = self.resolve_object(ref)
        except StoreError as exc:
            return error_result(op, exc)

        snap = self._store.snapshot
        related = [
            {
                "direction": r.direction.value,
                "relationship_id": r.relationship.id,
                "type": r.relationship.type,
                "id": r.neighbor.id,
                "name": r.neighbor.name,
                "class": r.neighbor.object_class,
            }
            for r in snap.related_objects(obj.id)
        ]
        neighborhood = GraphEngine(snap).neighborhood(obj.id, depth=max(1, depth))
        data = object_payload(obj, snap)
        data["related"] = related
        data["neighborhood"] = neighborhood
        return ServiceResult(ok=True, op=op, data=data)

    def rename_object(self, ref: str, name: str) -> ServiceResult:
        op = "rename_object"
        try:
            obj = self.resolve_object(ref)
            stored = self._store.update_object(obj.renamed(name.strip()))
        except StoreError as exc:
            return error_result(op, exc)
        return self._updated(op, obj.id, stored)

    def move_object(self, ref: str, x: float, y: float) -> ServiceResult:
        op = "move_object"
        try:
            obj = self.resolve_object(ref)
            stored = self._store.update_object(obj.moved(x, y))
        except StoreError as exc:
            return error_result(op, exc)
        return self._updated(op, obj.id, stored)

    def update_data(
        self,
        ref: str,
        values: AttributeMap,
        *,
        unset: Sequence[str] = (),
    ) -> ServiceResult:
        """Merge *values* into the object's attribute map and drop *unset* keys."""
        op = "update_data"
        try:
            obj = self.resolve_object(ref)
            merged: dict[str, Any] = {**obj.data, **values}
            for key in unset:
                merged.pop(key, None)
            stored = self._store.update_object(obj.with_data(merged))
        except StoreError as exc:
            return error_result(op, exc)
        return self._updated(op, obj.id, stored)

    def _updated(self, op: str, object_id: str, stored: GraphObject | None) -> ServiceResult:
        if stored is None:
            # Deleted by someone else between resolve and write.
            return ServiceResult(
                ok=True,
                op=op,
                data={"id": object_id, "updated": False},
                warnings=["Object no longer exists"],
            )
        data = object_payload(stored, self._store.snapshot)
        data["updated"] = True
        return ServiceResult(ok=True, op=op, data=data)

    def delete_object(self, ref: str) -> ServiceResult:
        """Delete with cascade. Unknown refs succeed with ``deleted: False``."""
        op = "delete_object"
        try:
            obj = self.resolve_object(ref)
        except NotFound:
            return ServiceResult(ok=True, op=op, data={"id": ref, "deleted": False})
        except StoreError as exc:
            return error_result(op, exc)

        snap = self._store.snapshot
        removed_relationships = len(snap.relationships_of_object(obj.id))
        try:
            self._store.delete_object(obj.id)
        except StoreError as exc:
            return error_result(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": obj.id,
                "name": obj.name,
                "deleted": True,
                "relationships_removed": removed_relationships,
            },
        )

    # ------------------------------------------------------------------
    # Type assignments
    # ------------------------------------------------------------------

    def assign_type(self, ref: str, type_id: str, *, primary: bool = False) -> ServiceResult:
        op = "assign_type"
        try:
            obj = self.resolve_object(ref)
            self._store.assign_type(obj.id, type_id, is_primary=primary)
        except StoreError as exc:
            return error_result(op, exc)
        return ServiceResult(ok=True, op=op, data=object_payload(obj, self._store.snapshot))

    def remove_type(self, ref: str, type_id: str) -> ServiceResult:
        op = "remove_type"
        try:
            obj = self.resolve_object(ref)
            self._store.remove_type(obj.id, type_id)
        except StoreError as exc:
            return error_result(op, exc)
        return ServiceResult(ok=True, op=op, data=object_payload(obj, self._store.snapshot))

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def create_relationship(
        self,
        source_ref: str,
        target_ref: str,
        rel_type: str,
        *,
        data: AttributeMap | None = None,
    ) -> ServiceResult:
        op = "create_relationship"
        try:
            source = self.resolve_object(source_ref)
            target = self.resolve_object(target_ref)
            rel = self._store.create_relationship(source.id, target.id, rel_type, data)
        except StoreError as exc:
            return error_result(op, exc)
        return ServiceResult(ok=True, op=op, data=relationship_payload(rel, self._store.snapshot))

    def list_relationships(
        self,
        *,
        ref: str | None = None,
        rel_type: str | None = None,
        direction: Direction | None = None,
    ) -> ServiceResult:
        """Relationships in snapshot order, optionally around one object."""
        op = "list_relationships"
        try:
            snap = self._store.snapshot
            if ref is None:
                rels = list(snap.relationships)
            else:
                obj = self.resolve_object(ref)
                rels = snap.relationships_of_object(obj.id)
                if direction is Direction.OUTGOING:
                    rels = [r for r in rels if r.source_id == obj.id]
                elif direction is Direction.INCOMING:
                    rels = [r for r in rels if r.target_id == obj.id]
        except StoreError as exc:
            return error_result(op, exc)

        if rel_type is not None:
            rels = [r for r in rels if r.type == rel_type]
        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(rels), "items": [relationship_payload(r, snap) for r in rels]},
        )

    def delete_relationship(self, relationship_id: str) -> ServiceResult:
        op = "delete_relationship"
        try:
            existed = self._store.snapshot.get_relationship(relationship_id) is not None
            self._store.delete_relationship(relationship_id)
        except StoreError as exc:
            return error_result(op, exc)
        return ServiceResult(ok=True, op=op, data={"id": relationship_id, "deleted": existed})
