"""Tests for RestClient — request shape and error mapping."""

from __future__ import annotations

import json
import warnings
from collections.abc import Callable

import httpx
import pytest

from coterie.infrastructure.errors import (
    Conflict,
    NetworkError,
    NotFound,
    StorageFailure,
    Unauthorized,
)
from coterie.infrastructure.remote.client import RestClient, default_timeout

_URL = "https://graph.example.test/"


def _client(
    handler: Callable[[httpx.Request], httpx.Response], *, retry_attempts: int = 1
) -> RestClient:
    return RestClient(
        _URL,
        "secret",
        retry_attempts=retry_attempts,
        transport=httpx.MockTransport(handler),
    )


def _respond(response: httpx.Response) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: response


class TestRequestShape:
    def test_select_url_and_headers(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"id": "a"}])

        rows = _client(handler).select("objects", filters={"class": "company"}, order="name.asc")
        assert rows == [{"id": "a"}]
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/objects"
        assert request.url.params["class"] == "eq.company"
        assert request.url.params["select"] == "*"
        assert request.url.params["order"] == "name.asc"
        assert request.headers["apikey"] == "secret"
        assert request.headers["Authorization"] == "Bearer secret"

    def test_bool_filters(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        _client(handler).update(
            "object_type_assignments",
            {"is_primary": False},
            filters={"object_id": "a", "is_primary": True},
        )
        assert seen[0].method == "PATCH"
        assert seen[0].url.params["is_primary"] == "eq.true"
        assert json.loads(seen[0].content) == {"is_primary": False}

    def test_upsert_prefers_merge(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json=[{"object_id": "a"}])

        _client(handler).upsert(
            "object_type_assignments", {"object_id": "a"}, on_conflict="object_id,type_id"
        )
        assert seen[0].url.params["on_conflict"] == "object_id,type_id"
        assert "resolution=merge-duplicates" in seen[0].headers["Prefer"]
        assert "return=representation" in seen[0].headers["Prefer"]

    def test_empty_body_is_empty_list(self) -> None:
        client = _client(_respond(httpx.Response(204)))
        assert client.delete("objects", filters={"id": "a"}) == []

    def test_single_object_body_is_wrapped(self) -> None:
        client = _client(_respond(httpx.Response(200, json={"id": "a"})))
        assert client.select("objects") == [{"id": "a"}]

    def test_default_timeout(self) -> None:
        timeout = default_timeout(30.0)
        assert timeout.read == 30.0
        assert timeout.connect == 10.0


class TestErrorMapping:
    @pytest.mark.parametrize("status", [401, 403])
    def test_unauthorized(self, status: int) -> None:
        client = _client(_respond(httpx.Response(status, text="bad key")))
        with pytest.raises(Unauthorized) as exc_info:
            client.select("objects")
        assert exc_info.value.status_code == status
        assert exc_info.value.body == "bad key"

    def test_unique_violation_is_conflict(self) -> None:
        client = _client(_respond(httpx.Response(409, json={"code": "23505"})))
        with pytest.raises(Conflict):
            client.insert("relationships", {"id": "r"})

    def test_foreign_key_violation_is_not_found(self) -> None:
        client = _client(_respond(httpx.Response(409, json={"code": "23503"})))
        with pytest.raises(NotFound):
            client.insert("relationships", {"id": "r"})

    def test_server_error_keeps_body(self) -> None:
        client = _client(_respond(httpx.Response(500, text="boom")))
        with pytest.raises(StorageFailure) as exc_info:
            client.insert("objects", {"id": "a"})
        assert type(exc_info.value) is StorageFailure
        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "boom"
        assert exc_info.value.code == "STORAGE_FAILURE"

    def test_invalid_json(self) -> None:
        client = _client(_respond(httpx.Response(200, text="<html>")))
        with pytest.raises(StorageFailure, match="invalid JSON"):
            client.select("objects")

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError):
            _client(handler).insert("objects", {"id": "a"})

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(NetworkError, match="timed out"):
            _client(handler).select("objects")

    def test_network_error_is_storage_failure(self) -> None:
        assert issubclass(NetworkError, StorageFailure)
        assert issubclass(Unauthorized, StorageFailure)


class TestRetry:
    def test_backoff_uses_supported_arguments(self) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            client = _client(_respond(httpx.Response(200, json=[])), retry_attempts=2)
        assert client.select("objects") == []

    def test_reads_retry_transient_errors(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, json=[])

        assert _client(handler, retry_attempts=2).select("objects") == []
        assert calls == 2

    def test_writes_do_not_retry(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("reset", request=request)

        with pytest.raises(NetworkError):
            _client(handler, retry_attempts=3).insert("objects", {"id": "a"})
        assert calls == 1

    def test_reads_give_up(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("down", request=request)

        with pytest.raises(NetworkError):
            _client(handler, retry_attempts=2).select("objects")
        assert calls == 2
