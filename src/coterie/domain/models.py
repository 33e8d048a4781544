"""Entity models for the graph core.

Taxonomy rows (classes, types, relationship types) and graph entities
(objects, type assignments, relationships) are frozen pydantic models.
Mutations produce new instances via ``model_copy``; the store swaps them
into its snapshot only after the backing write succeeds.

Attribute bags are ``dict[str, JsonValue]`` — pydantic's recursive union of
str | int | float | bool | None | list | dict. They stay structured in the
domain and are serialized to JSON only at the storage boundary.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, JsonValue

AttributeMap = dict[str, JsonValue]


class Direction(StrEnum):
    """Direction of a relationship relative to a given object."""

    OUTGOING = "outgoing"
    INCOMING = "incoming"


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------


class ObjectClass(BaseModel):
    """Top-level entity category (company, person, project)."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    icon: str | None = None
    color: str | None = None


class ObjectType(BaseModel):
    """Finer-grained tag owned by exactly one object class."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    object_class: str
    icon: str | None = None
    color: str | None = None


class RelationshipType(BaseModel):
    """Directed edge label, optionally constrained to source/target classes."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    valid_source_classes: tuple[str, ...] | None = None
    valid_target_classes: tuple[str, ...] | None = None
    icon: str | None = None
    color: str | None = None

    def allows(self, source_class: str, target_class: str) -> bool:
        """Whether an edge between objects of these classes is permitted."""
        if self.valid_source_classes is not None and source_class not in self.valid_source_classes:
            return False
        if self.valid_target_classes is not None and target_class not in self.valid_target_classes:
            return False
        return True


# ---------------------------------------------------------------------------
# Graph entities
# ---------------------------------------------------------------------------


class Position(BaseModel):
    """Canvas coordinates of a placed object."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class GraphObject(BaseModel):
    """A node in the graph."""

    model_config = ConfigDict(frozen=True)

    id: str
    object_class: str
    name: str
    data: AttributeMap = Field(default_factory=dict)
    position: Position | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def renamed(self, name: str) -> GraphObject:
        return self.model_copy(update={"name": name})

    def moved(self, x: float, y: float) -> GraphObject:
        return self.model_copy(update={"position": Position(x=x, y=y)})

    def with_data(self, data: AttributeMap) -> GraphObject:
        return self.model_copy(update={"data": dict(data)})


class ObjectTypeAssignment(BaseModel):
    """Many-to-many link between an object and one of its types."""

    model_config = ConfigDict(frozen=True)

    object_id: str
    type_id: str
    is_primary: bool = False


class GraphRelationship(BaseModel):
    """A directed, typed edge. Unique per (source_id, target_id, type)."""

    model_config = ConfigDict(frozen=True)

    id: str
    source_id: str
    target_id: str
    type: str
    data: AttributeMap = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def triple(self) -> tuple[str, str, str]:
        return (self.source_id, self.target_id, self.type)


class RelatedObject(BaseModel):
    """One neighbour of an object, with the edge that connects them."""

    model_config = ConfigDict(frozen=True)

    relationship: GraphRelationship
    neighbor: GraphObject
    direction: Direction


class PlannedPosition(NamedTuple):
    """A computed canvas position awaiting commit."""

    object_id: str
    x: float
    y: float
