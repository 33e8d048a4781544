"""LocalBackend — SQLite persistence via SQLAlchemy Core.

Every method runs in its own ``engine.begin()`` transaction, so each store
operation is atomic on disk. Driver errors are translated into the store
error taxonomy (UNIQUE violations as Conflict, foreign-key violations as
NotFound); callers never see ``sqlalchemy.exc`` types.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from coterie.infrastructure.database.engine import init_database
from coterie.infrastructure.database.schema import (
    object_classes,
    object_type_assignments,
    object_types,
    objects,
    relationship_types,
    relationships,
)
from coterie.infrastructure.errors import Conflict, NotFound, StorageFailure
from coterie.infrastructure.rows import (
    assignment_from_row,
    class_from_row,
    dump_json,
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
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from coterie.domain.models import GraphObject, GraphRelationship, ObjectTypeAssignment

logger = logging.getLogger(__name__)


class LocalBackend(StoreBackend):
    """Embedded SQLite backend.

    Construct with :meth:`open` to create the schema and seed the taxonomy,
    or pass an already-initialized engine (tests).
    """

    name = "local"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def open(cls, data_dir: Path) -> LocalBackend:
        """Initialize (idempotently) and open the database under *data_dir*."""
        try:
            engine = init_database(data_dir)
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Cannot open database in {data_dir}", body=str(exc)) from exc
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _write(self, op: str) -> Iterator[Connection]:
        """Transaction wrapper translating driver failures."""
        try:
            with self._engine.begin() as conn:
                yield conn
        except IntegrityError as exc:
            logger.debug("Local write violated a constraint: %s", op, exc_info=True)
            reason = str(exc.orig)
            if "FOREIGN KEY" in reason:
                raise NotFound(f"{op} references a missing row", detail={"body": reason}) from exc
            if "UNIQUE" in reason:
                raise Conflict(
                    f"{op} violates a uniqueness constraint", detail={"body": reason}
                ) from exc
            raise StorageFailure(f"{op} failed", body=reason) from exc
        except SQLAlchemyError as exc:
            logger.debug("Local write failed: %s", op, exc_info=True)
            raise StorageFailure(f"{op} failed", body=str(exc)) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load(self) -> GraphSnapshot:
        try:
            with self._engine.connect() as conn:
                classes = conn.execute(select(object_classes)).mappings().all()
                types = conn.execute(select(object_types)).mappings().all()
                rel_types = conn.execute(select(relationship_types)).mappings().all()
                object_rows = conn.execute(
                    select(objects).order_by(objects.c.name, objects.c.id)
                ).mappings().all()
                assignment_rows = conn.execute(select(object_type_assignments)).mappings().all()
                rel_rows = conn.execute(
                    select(relationships).order_by(relationships.c.created_at, relationships.c.id)
                ).mappings().all()
        except SQLAlchemyError as exc:
            raise StorageFailure("load failed", body=str(exc)) from exc

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
        with self._write("insert_object") as conn:
            conn.execute(insert(objects).values(**object_to_row(obj, as_text=True)))
        return obj

    def update_object(self, obj: GraphObject) -> GraphObject | None:
        with self._write("update_object") as conn:
            result = conn.execute(
                update(objects)
                .where(objects.c.id == obj.id)
                .values(
                    name=obj.name,
                    data=dump_json(obj.data),
                    map_x=obj.position.x if obj.position else None,
                    map_y=obj.position.y if obj.position else None,
                    updated_at=iso(obj.updated_at),
                )
            )
            if result.rowcount == 0:
                return None
            row = conn.execute(select(objects).where(objects.c.id == obj.id)).mappings().one()
        return object_from_row(row)

    def delete_object(self, object_id: str) -> None:
        # Foreign keys cascade to assignments and relationships.
        with self._write("delete_object") as conn:
            conn.execute(delete(objects).where(objects.c.id == object_id))

    # ------------------------------------------------------------------
    # Type assignments
    # ------------------------------------------------------------------

    def upsert_assignment(self, assignment: ObjectTypeAssignment) -> ObjectTypeAssignment:
        stmt = sqlite_insert(object_type_assignments).values(
            object_id=assignment.object_id,
            type_id=assignment.type_id,
            is_primary=int(assignment.is_primary),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["object_id", "type_id"],
            set_={"is_primary": stmt.excluded.is_primary},
        )
        with self._write("assign_type") as conn:
            conn.execute(stmt)
        return assignment

    def demote_primary(self, object_id: str) -> None:
        with self._write("demote_primary") as conn:
            conn.execute(
                update(object_type_assignments)
                .where(
                    object_type_assignments.c.object_id == object_id,
                    object_type_assignments.c.is_primary == 1,
                )
                .values(is_primary=0)
            )

    def delete_assignment(self, object_id: str, type_id: str) -> None:
        with self._write("remove_type") as conn:
            conn.execute(
                delete(object_type_assignments).where(
                    object_type_assignments.c.object_id == object_id,
                    object_type_assignments.c.type_id == type_id,
                )
            )

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def insert_relationship(self, rel: GraphRelationship) -> GraphRelationship:
        with self._write("create_relationship") as conn:
            existing = conn.execute(
                select(relationships.c.id).where(
                    relationships.c.source_id == rel.source_id,
                    relationships.c.target_id == rel.target_id,
                    relationships.c.type == rel.type,
                )
            ).first()
            if existing is not None:
                raise Conflict(
                    f"Relationship {rel.source_id} -{rel.type}-> {rel.target_id} already exists",
                    detail={"existing_id": existing.id},
                )
            conn.execute(insert(relationships).values(**relationship_to_row(rel, as_text=True)))
        return rel

    def delete_relationship(self, relationship_id: str) -> None:
        with self._write("delete_relationship") as conn:
            conn.execute(delete(relationships).where(relationships.c.id == relationship_id))

    def close(self) -> None:
        self._engine.dispose()
