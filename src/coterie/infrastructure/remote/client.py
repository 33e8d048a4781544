"""RestClient — thin synchronous httpx wrapper over PostgREST resources.

Resources live under ``{url}/rest/v1/<table>``. Filters are equality
predicates encoded as ``column=eq.value`` query parameters; writes ask for
``Prefer: return=representation`` so the caller gets the canonical stored
rows back.

Every failure leaves this module as a store error: transport problems and
timeouts become :class:`NetworkError`, 401/403 :class:`Unauthorized`, 409
:class:`Conflict` (or :class:`NotFound` for a foreign-key violation) and any
other non-2xx :class:`StorageFailure` with the response body attached.
Reads are retried on transient transport errors; writes are not, since a
create is not safe to repeat.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeAlias

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from coterie.infrastructure.errors import (
    Conflict,
    NetworkError,
    NotFound,
    StorageFailure,
    Unauthorized,
)

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1/"

# PostgreSQL SQLSTATE codes PostgREST forwards in the error body.
FOREIGN_KEY_VIOLATION = "23503"

TransientHttpError = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)

Filters: TypeAlias = Mapping[str, str | int | float | bool]


def default_timeout(seconds: float = 15.0) -> httpx.Timeout:
    return httpx.Timeout(seconds, connect=min(seconds, 10.0))


def _eq(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "eq.true" if value else "eq.false"
    return f"eq.{value}"


def _filter_params(filters: Filters | None) -> dict[str, str]:
    return {column: _eq(value) for column, value in (filters or {}).items()}


def _error_code(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        code = payload.get("code")
        return str(code) if code is not None else None
    return None


class RestClient:
    """PostgREST client bound to one project URL and API key.

    Keep one instance per store; the underlying connection pool is shared
    by the fan-out threads of a full load.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout: httpx.Timeout | None = None,
        retry_attempts: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=url.rstrip("/") + REST_PREFIX,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
            timeout=timeout or default_timeout(),
            transport=transport,
        )
        self._retrying = Retrying(
            reraise=True,
            stop=stop_after_attempt(max(retry_attempts, 1)),
            wait=wait_exponential_jitter(multiplier=0.2, max=2.0),
            retry=retry_if_exception_type(TransientHttpError),
        )

    # ------------------------------------------------------------------
    # Resource verbs
    # ------------------------------------------------------------------

    def select(
        self,
        resource: str,
        *,
        filters: Filters | None = None,
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        params = _filter_params(filters)
        params["select"] = "*"
        if order:
            params["order"] = order
        return self.request("GET", resource, params=params, retry=True)

    def insert(self, resource: str, row: Mapping[str, Any]) -> list[dict[str, Any]]:
        return self.request("POST", resource, json=dict(row))

    def upsert(
        self,
        resource: str,
        row: Mapping[str, Any],
        *,
        on_conflict: str,
    ) -> list[dict[str, Any]]:
        return self.request(
            "POST",
            resource,
            params={"on_conflict": on_conflict},
            json=dict(row),
            headers={"Prefer": "return=representation,resolution=merge-duplicates"},
        )

    def update(
        self,
        resource: str,
        values: Mapping[str, Any],
        *,
        filters: Filters,
    ) -> list[dict[str, Any]]:
        return self.request("PATCH", resource, params=_filter_params(filters), json=dict(values))

    def delete(self, resource: str, *, filters: Filters) -> list[dict[str, Any]]:
        return self.request("DELETE", resource, params=_filter_params(filters))

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        resource: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        retry: bool = False,
    ) -> list[dict[str, Any]]:
        """Send one request and return the decoded row list."""

        def send() -> httpx.Response:
            return self._client.request(
                method, resource, params=params, json=json, headers=headers
            )

        try:
            response = self._retrying.copy()(send) if retry else send()
        except httpx.TimeoutException as exc:
            raise NetworkError(f"{method} {resource} timed out") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {resource} failed: {exc}") from exc

        logger.debug("%s %s -> %d", method, resource, response.status_code)
        self._raise_for_status(method, resource, response)

        if not response.content:
            return []
        try:
            payload = response.json()
        except ValueError as exc:
            raise StorageFailure(
                f"{method} {resource} returned invalid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from exc
        if isinstance(payload, dict):
            return [payload]
        return list(payload)

    @staticmethod
    def _raise_for_status(method: str, resource: str, response: httpx.Response) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return
        body = response.text
        message = f"{method} {resource} returned HTTP {status}"
        if status in (401, 403):
            raise Unauthorized(message, status_code=status, body=body)
        if status == 409:
            code = _error_code(response)
            if code == FOREIGN_KEY_VIOLATION:
                raise NotFound(message, detail={"status_code": status, "body": body})
            raise Conflict(message, detail={"status_code": status, "body": body, "code": code})
        raise StorageFailure(message, status_code=status, body=body)

    def close(self) -> None:
        self._client.close()
