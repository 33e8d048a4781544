"""StoreBackend — the persistence contract every backend implements.

A backend only moves rows: it does not validate taxonomy references or
keep an in-memory mirror. Validation, the snapshot, and serialization of
operations live in :class:`~coterie.infrastructure.store.store.GraphStore`,
which follows every successful backend call with the matching mirror
update.

INVARIANT: backends raise only :mod:`coterie.infrastructure.errors` types.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from coterie.domain.models import GraphObject, GraphRelationship, ObjectTypeAssignment
    from coterie.infrastructure.store.snapshot import GraphSnapshot


class StoreBackend(ABC):
    """Row-level persistence for the graph store."""

    name: ClassVar[str] = "abstract"

    @abstractmethod
    def load(self) -> GraphSnapshot:
        """Read every table into a fresh snapshot."""

    @abstractmethod
    def insert_object(self, obj: GraphObject) -> GraphObject:
        """Persist a new object; return the canonical stored row."""

    @abstractmethod
    def update_object(self, obj: GraphObject) -> GraphObject | None:
        """Replace name, data, position and ``updated_at``.

        Returns the canonical stored row, or None when no row has this id.
        """

    @abstractmethod
    def delete_object(self, object_id: str) -> None:
        """Delete an object with its assignments and incident relationships."""

    @abstractmethod
    def upsert_assignment(self, assignment: ObjectTypeAssignment) -> ObjectTypeAssignment:
        """Insert or overwrite ``is_primary`` for an (object, type) pair."""

    @abstractmethod
    def demote_primary(self, object_id: str) -> None:
        """Clear ``is_primary`` on every assignment of an object."""

    @abstractmethod
    def delete_assignment(self, object_id: str, type_id: str) -> None:
        """Remove an (object, type) pair if present."""

    @abstractmethod
    def insert_relationship(self, rel: GraphRelationship) -> GraphRelationship:
        """Persist a new relationship; raise ``Conflict`` on a duplicate triple."""

    @abstractmethod
    def delete_relationship(self, relationship_id: str) -> None:
        """Delete a relationship if present."""

    def close(self) -> None:  # noqa: B027
        """Release connections. Default: nothing to release."""
