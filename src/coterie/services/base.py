"""BaseService — abstract foundation for all coterie services.

Every service receives a :class:`GraphStore` at construction time and
performs all reads and writes through it. Services catch
:class:`StoreError` at their boundary and turn it into a failed
:class:`ServiceResult`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coterie.infrastructure.store.store import GraphStore

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class GraphService(BaseService):
            def delete_object(self, object_id: str) -> ServiceResult:
                try:
                    self._store.delete_object(object_id)
                except StoreError as exc:
                    return error_result("delete_object", exc)
                ...
    """

    def __init__(self, store: GraphStore) -> None:
        self._store = store

    @property
    def store(self) -> GraphStore:
        return self._store
