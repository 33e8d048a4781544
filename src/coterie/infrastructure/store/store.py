"""GraphStore — the single owner of graph state.

Every caller mutates and queries the graph through one ``GraphStore``. The
store validates input against the taxonomy, delegates I/O to its
:class:`StoreBackend`, and keeps a :class:`GraphSnapshot` mirror for
synchronous queries.

INVARIANT: the snapshot changes only after the backend call returned
successfully, so it never reflects a failed write.

INVARIANT: mutations, position batches and ``fetch_all()`` are serialized
by one re-entrant lock; readers holding :meth:`read` see no interleaved
write.

Missing ids: operations addressing a row by its own id (update, delete,
remove_type, delete_relationship) are silent no-ops when the row is absent.
Operations that reference another object (assign_type, create_relationship)
raise :class:`NotFound`.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, Field

from coterie.domain.models import (
    AttributeMap,
    GraphObject,
    GraphRelationship,
    ObjectTypeAssignment,
)
from coterie.infrastructure.errors import (
    Conflict,
    NotFound,
    StoreError,
    ValidationError,
)

if TYPE_CHECKING:
    from types import TracebackType

    from coterie.infrastructure.store.base import StoreBackend
    from coterie.infrastructure.store.snapshot import GraphSnapshot

logger = logging.getLogger(__name__)

CANCELLED = "CANCELLED"


def utc_now() -> datetime:
    return datetime.now(UTC)


class BatchFailure(BaseModel):
    """One position that could not be committed."""

    model_config = {"frozen": True}

    object_id: str
    code: str
    reason: str


class BatchResult(BaseModel):
    """Outcome of :meth:`GraphStore.apply_positions`."""

    model_config = {"frozen": True}

    applied: list[str] = Field(default_factory=list)
    failures: list[BatchFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class GraphStore:
    """Validating, serialized facade over one backend.

    Usage::

        with GraphStore(LocalBackend.open(data_dir)) as store:
            acme = store.create_object("company", "Acme Studios", types=["studio"])
            store.snapshot.objects_of_class("company")
    """

    def __init__(
        self,
        backend: StoreBackend,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._lock = threading.RLock()
        self._snapshot: GraphSnapshot | None = None

    @property
    def backend(self) -> StoreBackend:
        return self._backend

    @property
    def snapshot(self) -> GraphSnapshot:
        """The live mirror, loaded on first access.

        Treat it as read-only; use :meth:`read` for a consistent view across
        several queries while other threads write.
        """
        return self._ensure_loaded()

    @contextmanager
    def read(self) -> Iterator[GraphSnapshot]:
        """Hold the store lock and yield the mirror."""
        with self._lock:
            yield self._ensure_loaded()

    def _ensure_loaded(self) -> GraphSnapshot:
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._backend.load()
            return self._snapshot

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def fetch_all(self) -> GraphSnapshot:
        """Reload every table from the backend and replace the mirror."""
        with self._lock:
            snapshot = self._backend.load()
            self._snapshot = snapshot
        logger.debug(
            "Fetched graph from %s backend: %d objects, %d relationships",
            self._backend.name,
            len(snapshot.objects),
            len(snapshot.relationships),
        )
        return snapshot

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def create_object(
        self,
        object_class: str,
        name: str,
        types: Sequence[str] = (),
        data: AttributeMap | None = None,
    ) -> GraphObject:
        """Create an object and assign its initial types.

        The first initial type is flagged primary. Not idempotent: calling
        twice creates two objects.
        """
        name = name.strip()
        type_ids = list(dict.fromkeys(types))
        with self._lock:
            snap = self._ensure_loaded()
            if not name:
                raise ValidationError("Object name must not be empty")
            if snap.object_class(object_class) is None:
                raise ValidationError(
                    f"Unknown object class: {object_class}",
                    detail={"object_class": object_class},
                )
            for type_id in type_ids:
                self._check_type(snap, type_id, object_class)

            now = self._clock()
            obj = GraphObject(
                id=str(uuid.uuid4()),
                object_class=object_class,
                name=name,
                data=dict(data or {}),
                created_at=now,
                updated_at=now,
            )
            stored = self._backend.insert_object(obj)
            snap.put_object(stored)
            logger.debug("Created %s %s (%s)", object_class, stored.id, name)

            for index, type_id in enumerate(type_ids):
                self.assign_type(stored.id, type_id, is_primary=index == 0)
            return stored

    def update_object(self, obj: GraphObject) -> GraphObject | None:
        """Replace name, data and position; refresh ``updated_at``.

        Returns the canonical stored object, or None when no object has
        this id.
        """
        if not obj.name.strip():
            raise ValidationError("Object name must not be empty")
        with self._lock:
            snap = self._ensure_loaded()
            current = snap.get_object(obj.id)
            if current is not None and current.object_class != obj.object_class:
                raise ValidationError(
                    f"Object class cannot change ({current.object_class} -> {obj.object_class})",
                    detail={"id": obj.id},
                )
            changes: dict[str, Any] = {"updated_at": self._clock()}
            if current is not None:
                changes["created_at"] = current.created_at
            stored = self._backend.update_object(obj.model_copy(update=changes))
            if stored is None:
                snap.drop_object(obj.id)
                return None
            snap.put_object(stored)
            return stored

    def delete_object(self, object_id: str) -> None:
        """Delete an object, its assignments and incident relationships."""
        with self._lock:
            snap = self._ensure_loaded()
            self._backend.delete_object(object_id)
            snap.drop_object(object_id)

    # ------------------------------------------------------------------
    # Type assignments
    # ------------------------------------------------------------------

    def assign_type(
        self,
        object_id: str,
        type_id: str,
        is_primary: bool = False,
    ) -> ObjectTypeAssignment:
        """Upsert an assignment; a primary one demotes the object's other primary."""
        with self._lock:
            snap = self._ensure_loaded()
            obj = self._require_object(snap, object_id)
            self._check_type(snap, type_id, obj.object_class)

            if is_primary and any(
                a.is_primary and a.object_id == object_id and a.type_id != type_id
                for a in snap.assignments
            ):
                self._backend.demote_primary(object_id)
                snap.demote_primary(object_id)

            assignment = ObjectTypeAssignment(
                object_id=object_id, type_id=type_id, is_primary=is_primary
            )
            stored = self._backend.upsert_assignment(assignment)
            snap.put_assignment(stored)
            return stored

    def remove_type(self, object_id: str, type_id: str) -> None:
        with self._lock:
            snap = self._ensure_loaded()
            self._backend.delete_assignment(object_id, type_id)
            snap.drop_assignment(object_id, type_id)

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def create_relationship(
        self,
        source_id: str,
        target_id: str,
        rel_type: str,
        data: AttributeMap | None = None,
    ) -> GraphRelationship:
        """Create a directed edge.

        Raises ``Conflict`` when the (source, target, type) triple exists.
        """
        with self._lock:
            snap = self._ensure_loaded()
            source = self._require_object(snap, source_id)
            target = self._require_object(snap, target_id)
            relationship_type = snap.relationship_type(rel_type)
            if relationship_type is None:
                raise ValidationError(
                    f"Unknown relationship type: {rel_type}", detail={"type": rel_type}
                )
            if not relationship_type.allows(source.object_class, target.object_class):
                raise ValidationError(
                    f"{rel_type} does not allow {source.object_class} -> {target.object_class}",
                    detail={"type": rel_type},
                )
            existing = snap.find_relationship(source_id, target_id, rel_type)
            if existing is not None:
                raise Conflict(
                    f"Relationship {source_id} -{rel_type}-> {target_id} already exists",
                    detail={"existing_id": existing.id},
                )

            now = self._clock()
            rel = GraphRelationship(
                id=str(uuid.uuid4()),
                source_id=source_id,
                target_id=target_id,
                type=rel_type,
                data=dict(data or {}),
                created_at=now,
                updated_at=now,
            )
            stored = self._backend.insert_relationship(rel)
            snap.put_relationship(stored)
            return stored

    def delete_relationship(self, relationship_id: str) -> None:
        with self._lock:
            snap = self._ensure_loaded()
            self._backend.delete_relationship(relationship_id)
            snap.drop_relationship(relationship_id)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def apply_positions(
        self,
        positions: Iterable[tuple[str, float, float]],
        *,
        cancel: threading.Event | None = None,
    ) -> BatchResult:
        """Commit ``(object_id, x, y)`` triples one by one under the store lock.

        A failing item is recorded and the batch moves on. When *cancel* is
        set, the remaining items are reported with code ``CANCELLED``.
        """
        items = list(positions)
        applied: list[str] = []
        failures: list[BatchFailure] = []
        with self._lock:
            snap = self._ensure_loaded()
            for index, (object_id, x, y) in enumerate(items):
                if cancel is not None and cancel.is_set():
                    failures.extend(
                        BatchFailure(object_id=pending, code=CANCELLED, reason="cancelled")
                        for pending, _, _ in items[index:]
                    )
                    break
                current = snap.get_object(object_id)
                if current is None:
                    failures.append(
                        BatchFailure(
                            object_id=object_id, code=NotFound.code, reason="object not found"
                        )
                    )
                    continue
                try:
                    stored = self.update_object(current.moved(x, y))
                except StoreError as exc:
                    logger.warning("Position commit failed for %s: %s", object_id, exc.message)
                    failures.append(
                        BatchFailure(object_id=object_id, code=exc.code, reason=exc.message)
                    )
                    continue
                if stored is None:
                    failures.append(
                        BatchFailure(
                            object_id=object_id, code=NotFound.code, reason="object not found"
                        )
                    )
                else:
                    applied.append(object_id)
        return BatchResult(applied=applied, failures=failures)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _require_object(snap: GraphSnapshot, object_id: str) -> GraphObject:
        obj = snap.get_object(object_id)
        if obj is None:
            raise NotFound(f"No object with id {object_id}", detail={"id": object_id})
        return obj

    @staticmethod
    def _check_type(snap: GraphSnapshot, type_id: str, object_class: str) -> None:
        object_type = snap.object_type(type_id)
        if object_type is None:
            raise ValidationError(f"Unknown object type: {type_id}", detail={"type": type_id})
        if object_type.object_class != object_class:
            raise ValidationError(
                f"Type {type_id} belongs to class {object_type.object_class}, not {object_class}",
                detail={"type": type_id, "object_class": object_class},
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._backend.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
