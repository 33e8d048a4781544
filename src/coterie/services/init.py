"""InitService — write ``coterie.toml`` and prepare the configured store."""

from __future__ import annotations

import logging
from pathlib import Path

from coterie.config.discovery import CONFIG_FILENAME, render_default_config
from coterie.config.models import BackendKind
from coterie.infrastructure.errors import StoreError
from coterie.infrastructure.store.store import GraphStore
from coterie.services._helpers import error_result
from coterie.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)


class InitService:
    """Creates the project config and seeds the taxonomy."""

    @staticmethod
    def init_project(
        root: Path,
        store: GraphStore,
        *,
        backend: BackendKind = BackendKind.LOCAL,
        data_dir: str = ".coterie",
    ) -> ServiceResult:
        """Write a default config under *root* (kept when present) and load *store*.

        Loading a local store creates and seeds its database; loading a
        remote one verifies the connection and the API key.
        """
        op = "init"
        config_path = root / CONFIG_FILENAME
        created_config = False
        if not config_path.exists():
            try:
                root.mkdir(parents=True, exist_ok=True)
                config_path.write_text(
                    render_default_config(backend=backend.value, data_dir=data_dir),
                    encoding="utf-8",
                )
            except OSError as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code="IO_ERROR",
                        message=f"Cannot write {config_path}: {exc}",
                        detail={"path": str(config_path)},
                    ),
                )
            created_config = True
            logger.info("Wrote %s", config_path)

        try:
            snap = store.fetch_all()
        except StoreError as exc:
            return error_result(op, exc)

        warnings: list[str] = []
        if not snap.has_taxonomy:
            warnings.append("Store has no taxonomy rows; run the schema migration first")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "config_path": str(config_path),
                "config_created": created_config,
                "backend": store.backend.name,
                "object_classes": len(snap.object_classes),
                "object_types": len(snap.object_types),
                "relationship_types": len(snap.relationship_types),
                "objects": len(snap.objects),
            },
            warnings=warnings,
        )
