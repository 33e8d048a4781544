"""Store error taxonomy shared by every backend.

Backends translate their native failures (SQLAlchemy errors, httpx
transport errors, non-2xx responses) into these types so that callers never
see a raw driver or transport exception. Each class carries a stable
``code`` that the service layer copies into ``ServiceError.code``.
"""

from __future__ import annotations

from typing import Any


class StoreError(Exception):
    """Base class for every graph store failure."""

    code = "STORE_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail or {}


class ValidationError(StoreError):
    """Malformed input: empty name, unknown taxonomy id, class mismatch."""

    code = "VALIDATION_ERROR"


class NotFound(StoreError):
    """An operation referenced an object that does not exist."""

    code = "NOT_FOUND"


class Conflict(StoreError):
    """A (source, target, type) relationship triple already exists."""

    code = "CONFLICT"


class StorageFailure(StoreError):
    """The backing write or read failed.

    ``body`` keeps the raw response body (remote) or driver message (local)
    for diagnostics.
    """

    code = "STORAGE_FAILURE"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, detail=detail)
        self.status_code = status_code
        self.body = body


class Unauthorized(StorageFailure):
    """The remote backend rejected the API key (HTTP 401/403)."""

    code = "UNAUTHORIZED"


class NetworkError(StorageFailure):
    """The remote backend could not be reached or timed out."""

    code = "NETWORK_ERROR"
