"""Row codecs between storage rows and domain models.

Both backends speak the same column names (``class``, ``map_x``,
``is_primary`` ...). The local database hands back JSON columns as text and
booleans as integers; the REST backend hands back decoded JSON. The
decoders here accept either form, so a row from any backend yields the same
model.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from coterie.domain.models import (
    AttributeMap,
    GraphObject,
    GraphRelationship,
    ObjectClass,
    ObjectType,
    ObjectTypeAssignment,
    Position,
    RelationshipType,
)

logger = logging.getLogger(__name__)


def dump_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def load_attributes(raw: Any) -> AttributeMap:
    """Decode an attribute map column. Unreadable values decode to ``{}``."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding unreadable attribute map: %r", raw)
        return {}
    return decoded if isinstance(decoded, dict) else {}


def _load_class_list(raw: Any) -> tuple[str, ...] | None:
    if raw is None:
        return None
    if isinstance(raw, (list, tuple)):
        return tuple(raw)
    try:
        decoded = json.loads(raw)
    except ValueError:
        # Legacy rows hold a bare class slug.
        return (raw,)
    if isinstance(decoded, list):
        return tuple(decoded)
    return (str(decoded),)


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------


def class_from_row(row: Mapping[str, Any]) -> ObjectClass:
    return ObjectClass(
        id=row["id"],
        display_name=row["display_name"],
        icon=row.get("icon"),
        color=row.get("color"),
    )


def class_to_row(cls: ObjectClass) -> dict[str, Any]:
    return cls.model_dump()


def type_from_row(row: Mapping[str, Any]) -> ObjectType:
    return ObjectType(
        id=row["id"],
        display_name=row["display_name"],
        object_class=row["class"],
        icon=row.get("icon"),
        color=row.get("color"),
    )


def type_to_row(object_type: ObjectType) -> dict[str, Any]:
    return {
        "id": object_type.id,
        "display_name": object_type.display_name,
        "class": object_type.object_class,
        "icon": object_type.icon,
        "color": object_type.color,
    }


def relationship_type_from_row(row: Mapping[str, Any]) -> RelationshipType:
    return RelationshipType(
        id=row["id"],
        display_name=row["display_name"],
        valid_source_classes=_load_class_list(row.get("valid_source_classes")),
        valid_target_classes=_load_class_list(row.get("valid_target_classes")),
        icon=row.get("icon"),
        color=row.get("color"),
    )


def relationship_type_to_row(rel_type: RelationshipType, *, as_text: bool) -> dict[str, Any]:
    """Encode a relationship type; *as_text* stores class lists as JSON text."""

    def encode(classes: tuple[str, ...] | None) -> Any:
        if classes is None:
            return None
        return dump_json(list(classes)) if as_text else list(classes)

    return {
        "id": rel_type.id,
        "display_name": rel_type.display_name,
        "valid_source_classes": encode(rel_type.valid_source_classes),
        "valid_target_classes": encode(rel_type.valid_target_classes),
        "icon": rel_type.icon,
        "color": rel_type.color,
    }


# ---------------------------------------------------------------------------
# Graph entities
# ---------------------------------------------------------------------------


def object_from_row(row: Mapping[str, Any]) -> GraphObject:
    x, y = row.get("map_x"), row.get("map_y")
    return GraphObject(
        id=str(row["id"]),
        object_class=row["class"],
        name=row["name"],
        data=load_attributes(row.get("data")),
        position=Position(x=x, y=y) if x is not None and y is not None else None,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def object_to_row(obj: GraphObject, *, as_text: bool) -> dict[str, Any]:
    """Encode an object; *as_text* stores the attribute map as JSON text."""
    return {
        "id": obj.id,
        "class": obj.object_class,
        "name": obj.name,
        "data": dump_json(obj.data) if as_text else obj.data,
        "map_x": obj.position.x if obj.position else None,
        "map_y": obj.position.y if obj.position else None,
        "created_at": iso(obj.created_at),
        "updated_at": iso(obj.updated_at),
    }


def assignment_from_row(row: Mapping[str, Any]) -> ObjectTypeAssignment:
    return ObjectTypeAssignment(
        object_id=str(row["object_id"]),
        type_id=row["type_id"],
        is_primary=bool(row.get("is_primary") or False),
    )


def relationship_from_row(row: Mapping[str, Any]) -> GraphRelationship:
    return GraphRelationship(
        id=str(row["id"]),
        source_id=str(row["source_id"]),
        target_id=str(row["target_id"]),
        type=row["type"],
        data=load_attributes(row.get("data")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def relationship_to_row(rel: GraphRelationship, *, as_text: bool) -> dict[str, Any]:
    return {
        "id": rel.id,
        "source_id": rel.source_id,
        "target_id": rel.target_id,
        "type": rel.type,
        "data": dump_json(rel.data) if as_text else rel.data,
        "created_at": iso(rel.created_at),
        "updated_at": iso(rel.updated_at),
    }
