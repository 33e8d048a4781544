"""Database engine setup for SQLite with WAL mode.

SQLite is the local persistence layer: WAL mode for concurrent readers,
foreign keys with ``ON DELETE CASCADE`` for the object cascade, and one
transaction per store operation. The DB lives at ``{data_dir}/coterie.db``.

SQLAlchemy Core (not ORM) is used because the store keeps its own
in-memory snapshot — no benefit from an identity map or session.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from coterie.domain.taxonomy import OBJECT_CLASSES, OBJECT_TYPES, RELATIONSHIP_TYPES
from coterie.infrastructure.database.schema import (
    metadata,
    object_classes,
    object_types,
    relationship_types,
)
from coterie.infrastructure.rows import (
    class_to_row,
    relationship_type_to_row,
    type_to_row,
)

logger = logging.getLogger(__name__)

DB_FILENAME = "coterie.db"


def create_db_engine(db_path: Path | str) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled.

    ``":memory:"`` yields a private in-memory database (WAL is skipped).
    """
    if str(db_path) == ":memory:":
        engine = create_engine(
            "sqlite://",
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        if str(db_path) != ":memory:":
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(data_dir: Path) -> Engine:
    """Initialize the local store at ``{data_dir}/coterie.db``.

    Creates *data_dir*, every table in :data:`schema.metadata`, and seeds
    the taxonomy on first run.

    Idempotent — safe to call on every startup.

    Returns the engine ready for use.
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(data_dir / DB_FILENAME)
    metadata.create_all(engine)
    seed_taxonomy(engine)
    return engine


def seed_taxonomy(engine: Engine) -> bool:
    """Insert classes, types and relationship types unless already present.

    The presence of any ``object_classes`` row means a previous run seeded
    the taxonomy; nothing is written in that case. Returns True when rows
    were inserted.
    """
    with engine.begin() as conn:
        count = conn.execute(select(func.count()).select_from(object_classes)).scalar_one()
        if count:
            return False

        conn.execute(insert(object_classes), [class_to_row(c) for c in OBJECT_CLASSES])
        conn.execute(insert(object_types), [type_to_row(t) for t in OBJECT_TYPES])
        conn.execute(
            insert(relationship_types),
            [relationship_type_to_row(r, as_text=True) for r in RELATIONSHIP_TYPES],
        )

    logger.debug(
        "Seeded taxonomy: %d classes, %d types, %d relationship types",
        len(OBJECT_CLASSES),
        len(OBJECT_TYPES),
        len(RELATIONSHIP_TYPES),
    )
    return True
