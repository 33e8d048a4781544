"""SQLite database engine and schema via SQLAlchemy Core."""

from coterie.infrastructure.database.engine import (
    create_db_engine,
    init_database,
    seed_taxonomy,
)
from coterie.infrastructure.database.schema import (
    metadata,
    object_classes,
    object_type_assignments,
    object_types,
    objects,
    relationship_types,
    relationships,
)

__all__ = [
    "create_db_engine",
    "init_database",
    "metadata",
    "object_classes",
    "object_type_assignments",
    "object_types",
    "objects",
    "relationship_types",
    "relationships",
    "seed_taxonomy",
]
