"""PostgREST client used by the remote store backend."""

from coterie.infrastructure.remote.client import RestClient, default_timeout

__all__ = ["RestClient", "default_timeout"]
