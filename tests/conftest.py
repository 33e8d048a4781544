"""Shared pytest fixtures for coterie tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from coterie.domain.taxonomy import OBJECT_CLASSES, OBJECT_TYPES, RELATIONSHIP_TYPES
from coterie.infrastructure.remote.client import RestClient
from coterie.infrastructure.rows import class_to_row, relationship_type_to_row, type_to_row
from coterie.infrastructure.store.local import LocalBackend
from coterie.infrastructure.store.memory import MemoryBackend
from coterie.infrastructure.store.remote import RemoteBackend
from coterie.infrastructure.store.store import GraphStore

REMOTE_URL = "https://graph.example.test"
API_KEY = "test-api-key"


# ---------------------------------------------------------------------------
# In-process PostgREST fake
# ---------------------------------------------------------------------------


class FakePostgrest:
    """Minimal PostgREST emulation for ``httpx.MockTransport``.

    Supports ``eq.`` filters, insert/upsert/patch/delete with
    ``return=representation``, the relationship uniqueness constraint
    (409 / 23505), foreign keys (409 / 23503) and the object cascade.
    """

    _KEYS: dict[str, tuple[str, ...]] = {
        "object_classes": ("id",),
        "object_types": ("id",),
        "relationship_types": ("id",),
        "objects": ("id",),
        "object_type_assignments": ("object_id", "type_id"),
        "relationships": ("id",),
    }

    def __init__(self, *, seed: bool = True) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {name: [] for name in self._KEYS}
        self.requests: list[httpx.Request] = []
        # Canned responses returned (in order) before normal handling.
        self.responses: list[httpx.Response | Exception] = []
        if seed:
            self.tables["object_classes"] = [class_to_row(c) for c in OBJECT_CLASSES]
            self.tables["object_types"] = [type_to_row(t) for t in OBJECT_TYPES]
            self.tables["relationship_types"] = [
                relationship_type_to_row(r, as_text=False) for r in RELATIONSHIP_TYPES
            ]

    # -- helpers -----------------------------------------------------------

    @staticmethod
    def _cell_matches(cell: Any, expected: str) -> bool:
        if isinstance(cell, bool):
            return expected == ("true" if cell else "false")
        return str(cell) == expected

    def _filtered(self, resource: str, params: httpx.QueryParams) -> list[dict[str, Any]]:
        filters = {
            key: value[3:]
            for key, value in params.items()
            if key not in ("select", "order", "on_conflict") and value.startswith("eq.")
        }
        return [
            row
            for row in self.tables[resource]
            if all(self._cell_matches(row.get(k), v) for k, v in filters.items())
        ]

    @staticmethod
    def _error(code: str, message: str) -> httpx.Response:
        return httpx.Response(409, json={"code": code, "message": message})

    def _violations(self, resource: str, row: dict[str, Any]) -> httpx.Response | None:
        object_ids = {o["id"] for o in self.tables["objects"]}
        if resource == "relationships":
            if row["source_id"] not in object_ids or row["target_id"] not in object_ids:
                return self._error("23503", "foreign key violation")
            triple = (row["source_id"], row["target_id"], row["type"])
            for existing in self.tables["relationships"]:
                if (existing["source_id"], existing["target_id"], existing["type"]) == triple:
                    return self._error("23505", "duplicate key value")
        if resource == "object_type_assignments" and row["object_id"] not in object_ids:
            return self._error("23503", "foreign key violation")
        return None

    def _key(self, resource: str, row: dict[str, Any]) -> tuple[Any, ...]:
        return tuple(row[k] for k in self._KEYS[resource])

    # -- verbs -------------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            canned = self.responses.pop(0)
            if isinstance(canned, Exception):
                raise canned
            return canned

        resource = request.url.path.removeprefix("/rest/v1/")
        if resource not in self.tables:
            return httpx.Response(404, json={"message": f"unknown resource {resource}"})
        params = request.url.params

        if request.method == "GET":
            return httpx.Response(200, json=self._filtered(resource, params))

        if request.method == "POST":
            row = json.loads(request.content)
            on_conflict = params.get("on_conflict")
            violation = self._violations(resource, row)
            if violation is not None:
                return violation
            if on_conflict:
                for existing in self.tables[resource]:
                    if self._key(resource, existing) == self._key(resource, row):
                        existing.update(row)
                        return httpx.Response(201, json=[dict(existing)])
            self.tables[resource].append(dict(row))
            return httpx.Response(201, json=[dict(row)])

        if request.method == "PATCH":
            values = json.loads(request.content)
            matched = self._filtered(resource, params)
            for row in matched:
                row.update(values)
            return httpx.Response(200, json=[dict(r) for r in matched])

        if request.method == "DELETE":
            matched = self._filtered(resource, params)
            ids = {id(r) for r in matched}
            self.tables[resource] = [r for r in self.tables[resource] if id(r) not in ids]
            if resource == "objects":
                gone = {r["id"] for r in matched}
                self.tables["object_type_assignments"] = [
                    a for a in self.tables["object_type_assignments"] if a["object_id"] not in gone
                ]
                self.tables["relationships"] = [
                    r
                    for r in self.tables["relationships"]
                    if r["source_id"] not in gone and r["target_id"] not in gone
                ]
            return httpx.Response(200, json=matched)

        return httpx.Response(405)


@pytest.fixture
def fake_server() -> FakePostgrest:
    return FakePostgrest()


@pytest.fixture
def rest_client(fake_server: FakePostgrest) -> Iterator[RestClient]:
    client = RestClient(
        REMOTE_URL,
        API_KEY,
        retry_attempts=1,
        transport=httpx.MockTransport(fake_server.handler),
    )
    try:
        yield client
    finally:
        client.close()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_store() -> Iterator[GraphStore]:
    store = GraphStore(MemoryBackend())
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def local_store(tmp_path: Path) -> Iterator[GraphStore]:
    store = GraphStore(LocalBackend.open(tmp_path / "data"))
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def remote_store(rest_client: RestClient) -> GraphStore:
    return GraphStore(RemoteBackend(rest_client, max_concurrency=2))


@pytest.fixture(params=["memory", "local", "remote"])
def store(request: pytest.FixtureRequest) -> GraphStore:
    """The same contract run against every backend."""
    return request.getfixturevalue(f"{request.param}_store")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp project so the CLI opens an isolated local store.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command test
    classes.
    """
    for var in ("COTERIE_CONFIG", "COTERIE_STORE__BACKEND", "COTERIE_STORE__DATA_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
