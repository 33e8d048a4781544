"""Build a :class:`GraphStore` from settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from coterie.config.models import BackendKind
from coterie.infrastructure.errors import ValidationError
from coterie.infrastructure.remote.client import RestClient, default_timeout
from coterie.infrastructure.store.local import LocalBackend
from coterie.infrastructure.store.memory import MemoryBackend
from coterie.infrastructure.store.remote import RemoteBackend
from coterie.infrastructure.store.store import GraphStore

if TYPE_CHECKING:
    from coterie.config.settings import CoterieSettings
    from coterie.infrastructure.store.base import StoreBackend

logger = logging.getLogger(__name__)


def create_backend(
    settings: CoterieSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> StoreBackend:
    """Instantiate the backend named by ``settings.store.backend``.

    *transport* replaces the HTTP transport of the remote backend (tests).
    """
    kind = settings.store.backend
    if kind is BackendKind.MEMORY:
        return MemoryBackend()
    if kind is BackendKind.REMOTE:
        remote = settings.remote
        api_key = remote.api_key.get_secret_value()
        if not remote.url or not api_key:
            raise ValidationError(
                "Remote backend needs [remote] url and an API key "
                "(COTERIE_REMOTE__API_KEY)"
            )
        client = RestClient(
            remote.url,
            api_key,
            timeout=default_timeout(remote.timeout_seconds),
            retry_attempts=remote.retry_attempts,
            transport=transport,
        )
        return RemoteBackend(client, max_concurrency=remote.max_concurrency)
    return LocalBackend.open(settings.data_dir)


def open_store(
    settings: CoterieSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> GraphStore:
    backend = create_backend(settings, transport=transport)
    logger.debug("Opened %s store", backend.name)
    return GraphStore(backend)
