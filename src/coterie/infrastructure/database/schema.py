"""SQLAlchemy Core table definitions for the local graph store.

Mirrors the REST backend's resources one-to-one so that rows read from
either side decode through the same codecs. Attribute maps are stored as
JSON text; timestamps are ISO-8601 strings.
"""

from __future__ import annotations

from sqlalchemy import (
    REAL,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

object_classes = Table(
    "object_classes",
    metadata,
    Column("id", Text, primary_key=True),
    Column("display_name", Text, nullable=False),
    Column("icon", Text),
    Column("color", Text),
)

object_types = Table(
    "object_types",
    metadata,
    Column("id", Text, primary_key=True),
    Column("display_name", Text, nullable=False),
    Column("class", Text, ForeignKey("object_classes.id"), nullable=False),
    Column("icon", Text),
    Column("color", Text),
)

objects = Table(
    "objects",
    metadata,
    Column("id", Text, primary_key=True),
    Column("class", Text, ForeignKey("object_classes.id"), nullable=False),
    Column("name", Text, nullable=False),
    Column("data", Text, nullable=False, default="{}", server_default="{}"),  # JSON object
    Column("map_x", REAL),
    Column("map_y", REAL),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

object_type_assignments = Table(
    "object_type_assignments",
    metadata,
    Column("object_id", Text, ForeignKey("objects.id", ondelete="CASCADE"), nullable=False),
    Column("type_id", Text, ForeignKey("object_types.id"), nullable=False),
    Column("is_primary", Integer, nullable=False, default=0, server_default="0"),
    PrimaryKeyConstraint("object_id", "type_id"),
)

relationship_types = Table(
    "relationship_types",
    metadata,
    Column("id", Text, primary_key=True),
    Column("display_name", Text, nullable=False),
    Column("valid_source_classes", Text),  # JSON array or NULL (unconstrained)
    Column("valid_target_classes", Text),  # JSON array or NULL (unconstrained)
    Column("icon", Text),
    Column("color", Text),
)

relationships = Table(
    "relationships",
    metadata,
    Column("id", Text, primary_key=True),
    Column("source_id", Text, ForeignKey("objects.id", ondelete="CASCADE"), nullable=False),
    Column("target_id", Text, ForeignKey("objects.id", ondelete="CASCADE"), nullable=False),
    Column("type", Text, ForeignKey("relationship_types.id"), nullable=False),
    Column("data", Text, nullable=False, default="{}", server_default="{}"),  # JSON object
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    UniqueConstraint("source_id", "target_id", "type"),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_objects_class", objects.c["class"])
Index("ix_objects_name", objects.c.name)
Index("ix_type_assignments_type", object_type_assignments.c.type_id)
Index("ix_relationships_source", relationships.c.source_id)
Index("ix_relationships_target", relationships.c.target_id)
