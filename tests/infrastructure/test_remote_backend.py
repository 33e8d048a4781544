"""Tests for RemoteBackend against the in-process PostgREST fake."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from coterie.infrastructure.errors import NetworkError, NotFound, Unauthorized
from coterie.infrastructure.store.store import GraphStore


class TestRemoteLoad:
    def test_reads_every_resource(self, remote_store: GraphStore, fake_server: Any) -> None:
        remote_store.fetch_all()
        paths = sorted(r.url.path for r in fake_server.requests)
        assert paths == sorted(
            f"/rest/v1/{name}"
            for name in (
                "object_classes",
                "object_types",
                "relationship_types",
                "objects",
                "object_type_assignments",
                "relationships",
            )
        )

    def test_server_rows_win(self, remote_store: GraphStore, fake_server: Any) -> None:
        obj = remote_store.create_object("company", "Acme")
        fake_server.tables["objects"][0]["name"] = "Acme (server)"
        assert remote_store.fetch_all().get_object(obj.id).name == "Acme (server)"


class TestRemoteWrites:
    def test_insert_returns_canonical_row(
        self, remote_store: GraphStore, fake_server: Any
    ) -> None:
        canned = {
            "id": "00000000-0000-0000-0000-000000000001",
            "class": "company",
            "name": "Acme Canonical",
            "data": {"source": "server"},
            "map_x": None,
            "map_y": None,
            "created_at": "2026-01-01T00:00:00+00:00",
            "updated_at": "2026-01-01T00:00:00+00:00",
        }
        remote_store.fetch_all()
        fake_server.responses.append(httpx.Response(201, json=[canned]))
        obj = remote_store.create_object("company", "Acme")
        assert obj.name == "Acme Canonical"
        assert remote_store.snapshot.get_object(canned["id"]).data == {"source": "server"}

    def test_primary_demotion_patches_first(
        self, remote_store: GraphStore, fake_server: Any
    ) -> None:
        obj = remote_store.create_object("company", "Acme", ["studio"])
        fake_server.requests.clear()
        remote_store.assign_type(obj.id, "network", is_primary=True)
        assert [r.method for r in fake_server.requests] == ["PATCH", "POST"]
        rows = {
            a["type_id"]: a["is_primary"] for a in fake_server.tables["object_type_assignments"]
        }
        assert rows == {"studio": False, "network": True}

    def test_unauthorized_leaves_snapshot(
        self, remote_store: GraphStore, fake_server: Any
    ) -> None:
        remote_store.fetch_all()
        fake_server.responses.append(httpx.Response(401, text="invalid api key"))
        with pytest.raises(Unauthorized) as exc_info:
            remote_store.create_object("company", "Acme")
        assert exc_info.value.body == "invalid api key"
        assert remote_store.snapshot.objects == []

    def test_network_error_leaves_snapshot(
        self, remote_store: GraphStore, fake_server: Any
    ) -> None:
        obj = remote_store.create_object("company", "Acme")
        fake_server.responses.append(httpx.ConnectError("offline"))
        with pytest.raises(NetworkError):
            remote_store.update_object(obj.renamed("Renamed"))
        assert remote_store.snapshot.get_object(obj.id).name == "Acme"

    def test_endpoint_deleted_elsewhere(self, remote_store: GraphStore, fake_server: Any) -> None:
        acme = remote_store.create_object("company", "Acme")
        jane = remote_store.create_object("person", "Jane")
        fake_server.tables["objects"] = [
            o for o in fake_server.tables["objects"] if o["id"] != acme.id
        ]
        with pytest.raises(NotFound):
            remote_store.create_relationship(jane.id, acme.id, "employed_by")
        assert remote_store.snapshot.relationships == []
