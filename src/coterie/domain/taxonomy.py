"""Fixed taxonomy: object classes, object types, relationship types.

Seeded once into a fresh store and read-only afterwards. Tuple order is
significant: it is the order rows are inserted, and therefore the order
``types_of_object`` falls back to when no assignment is flagged primary.
"""

from __future__ import annotations

from enum import StrEnum

from coterie.domain.models import ObjectClass, ObjectType, RelationshipType


class ObjectClassId(StrEnum):
    """The three object classes."""

    COMPANY = "company"
    PERSON = "person"
    PROJECT = "project"


class RelationshipTypeId(StrEnum):
    """Relationship type slugs referenced from code."""

    OWNS = "owns"
    DIVISION_OF = "division_of"
    EMPLOYED_BY = "employed_by"
    REPORTS_TO = "reports_to"
    HAS_DEAL_AT = "has_deal_at"
    REPRESENTS = "represents"
    REPRESENTED_BY = "represented_by"
    SET_UP_AT = "set_up_at"
    ATTACHED_TO = "attached_to"
    PRODUCES = "produces"
    RELATED_TO = "related_to"


OBJECT_CLASSES: tuple[ObjectClass, ...] = (
    ObjectClass(id="company", display_name="Company", icon="building.2", color="#3B82F6"),
    ObjectClass(id="person", display_name="Person", icon="person.fill", color="#10B981"),
    ObjectClass(id="project", display_name="Project", icon="film", color="#F59E0B"),
)


def _t(type_id: str, name: str, object_class: str, icon: str, color: str) -> ObjectType:
    return ObjectType(
        id=type_id, display_name=name, object_class=object_class, icon=icon, color=color
    )


OBJECT_TYPES: tuple[ObjectType, ...] = (
    # company
    _t("studio", "Studio", "company", "building.2.fill", "#3B82F6"),
    _t("parent_company", "Parent Company", "company", "building.columns", "#1E40AF"),
    _t("network", "Network", "company", "tv", "#7C3AED"),
    _t("streamer", "Streamer", "company", "play.tv", "#DC2626"),
    _t("production_company", "Production Company", "company", "film.stack", "#059669"),
    _t("agency", "Agency", "company", "person.3", "#EA580C"),
    _t("management", "Management", "company", "person.2", "#DB2777"),
    _t("financier", "Financier", "company", "dollarsign.circle", "#CA8A04"),
    _t("distributor", "Distributor", "company", "shippingbox", "#0891B2"),
    _t("guild_union", "Guild/Union", "company", "person.badge.shield.checkmark", "#6B7280"),
    # person
    _t("executive", "Executive", "person", "person.badge.key", "#1E40AF"),
    _t("producer", "Producer", "person", "person.crop.rectangle", "#7C3AED"),
    _t("creative", "Creative", "person", "pencil.and.outline", "#059669"),
    _t("talent", "Talent", "person", "star", "#CA8A04"),
    _t("agent", "Agent", "person", "briefcase", "#EA580C"),
    _t("manager", "Manager", "person", "person.badge.clock", "#DB2777"),
    _t("lawyer", "Lawyer", "person", "text.book.closed", "#6B7280"),
    _t("investor", "Investor", "person", "chart.line.uptrend.xyaxis", "#0891B2"),
    # project
    _t("feature", "Feature", "project", "film", "#F59E0B"),
    _t("tv_series", "TV Series", "project", "tv", "#7C3AED"),
    _t("limited_series", "Limited Series", "project", "tv.inset.filled", "#DC2626"),
    _t("pilot", "Pilot", "project", "play.rectangle", "#059669"),
    _t("documentary", "Documentary", "project", "doc.text.image", "#3B82F6"),
    _t("short", "Short", "project", "film.stack", "#6B7280"),
    _t("unscripted", "Unscripted", "project", "person.wave.2", "#EA580C"),
)


def _r(
    type_id: str,
    name: str,
    source: str | None,
    target: str | None,
    icon: str,
) -> RelationshipType:
    return RelationshipType(
        id=type_id,
        display_name=name,
        valid_source_classes=(source,) if source else None,
        valid_target_classes=(target,) if target else None,
        icon=icon,
    )


RELATIONSHIP_TYPES: tuple[RelationshipType, ...] = (
    _r("owns", "Owns", "company", "company", "arrow.down.circle"),
    _r("division_of", "Division Of", "company", "company", "square.grid.2x2"),
    _r("employed_by", "Employed By", "person", "company", "briefcase"),
    _r("reports_to", "Reports To", "person", "person", "arrow.up.circle"),
    _r("has_deal_at", "Has Deal At", "company", "company", "doc.text"),
    _r("represents", "Represents", "company", "person", "person.badge.shield.checkmark"),
    _r("represented_by", "Represented By", "person", "company", "person.badge.shield.checkmark"),
    _r("set_up_at", "Set Up At", "project", "company", "building.2"),
    _r("attached_to", "Attached To", "person", "project", "paperclip"),
    _r("produces", "Produces", "company", "project", "film"),
    _r("related_to", "Related To", None, None, "link"),
)
