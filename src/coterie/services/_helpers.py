"""Shared service-layer helper functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from coterie.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from coterie.domain.models import GraphObject, GraphRelationship
    from coterie.infrastructure.errors import StoreError
    from coterie.infrastructure.store.snapshot import GraphSnapshot


def error_result(op: str, exc: StoreError, *, warnings: list[str] | None = None) -> ServiceResult:
    """Failed result carrying the store error's code, message and detail."""
    detail = dict(exc.detail)
    body = getattr(exc, "body", None)
    if body:
        detail["body"] = body
    return ServiceResult(
        ok=False,
        op=op,
        warnings=warnings or [],
        error=ServiceError(code=exc.code, message=exc.message, detail=detail),
    )


def object_payload(obj: GraphObject, snapshot: GraphSnapshot) -> dict[str, Any]:
    """JSON-ready view of an object with its assigned types."""
    types = snapshot.types_of_object(obj.id)
    return {
        "id": obj.id,
        "class": obj.object_class,
        "name": obj.name,
        "types": [t.id for t in types],
        "primary_type": types[0].id if types else None,
        "data": obj.data,
        "position": obj.position.model_dump() if obj.position else None,
        "created_at": obj.created_at.isoformat() if obj.created_at else None,
        "updated_at": obj.updated_at.isoformat() if obj.updated_at else None,
    }


def relationship_payload(rel: GraphRelationship, snapshot: GraphSnapshot) -> dict[str, Any]:
    """JSON-ready view of a relationship with endpoint names."""
    source = snapshot.get_object(rel.source_id)
    target = snapshot.get_object(rel.target_id)
    return {
        "id": rel.id,
        "type": rel.type,
        "source_id": rel.source_id,
        "source_name": source.name if source else None,
        "target_id": rel.target_id,
        "target_name": target.name if target else None,
        "data": rel.data,
        "created_at": rel.created_at.isoformat() if rel.created_at else None,
    }
