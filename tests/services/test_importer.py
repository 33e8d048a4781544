"""Tests for contact and landscape import."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from coterie.infrastructure.errors import ValidationError
from coterie.infrastructure.store.memory import MemoryBackend
from coterie.infrastructure.store.store import GraphStore
from coterie.services.importer import (
    ContactEntry,
    ContactImportService,
    KnownCompany,
    load_contacts,
    load_landscape,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write(tmp_path: Path, payload: Any, name: str = "input.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _by_name(store: GraphStore, name: str) -> Any:
    return next(o for o in store.snapshot.objects if o.name == name)


def _employers(store: GraphStore, person_id: str) -> list[str]:
    snap = store.snapshot
    names = {o.id: o.name for o in snap.objects}
    return [
        names[r.target_id]
        for r in snap.relationships
        if r.source_id == person_id and r.type == "employed_by"
    ]


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


class TestLoadContacts:
    def test_list(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            [{"given_name": "Jane", "family_name": "Doe", "organization": "Acme", "x": 1}],
        )
        contacts = load_contacts(path)
        expected = ContactEntry(given_name="Jane", family_name="Doe", organization="Acme")
        assert contacts == [expected]
        assert contacts[0].full_name == "Jane Doe"

    def test_wrapped(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"contacts": [{"given_name": "Jane"}]})
        assert [c.full_name for c in load_contacts(path)] == ["Jane"]

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError, match="Invalid JSON"):
            load_contacts(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="Cannot read"):
            load_contacts(tmp_path / "missing.json")

    def test_wrong_shape(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="expected a list"):
            load_contacts(_write(tmp_path, "just a string"))

    def test_invalid_entry(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            load_contacts(_write(tmp_path, [{"emails": "not-a-list"}]))


class TestLoadLandscape:
    def test_sections_concatenated(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            {
                "companies": [{"name": "Plan B", "type": "production_company"}],
                "agencies": [{"name": "CAA", "type": "agency"}],
                "management_companies": [{"name": "Anonymous Content", "type": "management"}],
            },
        )
        assert [c.name for c in load_landscape(path)] == ["Plan B", "CAA", "Anonymous Content"]

    def test_missing_name(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            load_landscape(_write(tmp_path, [{"type": "studio"}]))


class TestKnownCompany:
    def test_unknown_type_falls_back(self) -> None:
        assert KnownCompany(name="X", type="boutique").object_type == "production_company"
        assert KnownCompany(name="X", type="streamer").object_type == "streamer"

    def test_attributes_skip_unset(self) -> None:
        company = KnownCompany(name="X", location="LA", specialty=["drama"], tier="A")
        assert company.attributes() == {"location": "LA", "specialty": ["drama"], "tier": "A"}


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------


class TestImportContacts:
    def test_reconcile_and_create(self, memory_store: GraphStore) -> None:
        acme = memory_store.create_object("company", "Acme Studios", ["studio"])
        contacts = [
            ContactEntry(
                given_name="Jane",
                family_name="Doe",
                organization="Acme Studios Inc",
                title="VP Development",
                emails=["jane@acme.test", "jd@home.test"],
                phones=["555-0100"],
            ),
            ContactEntry(given_name="Bob", family_name="Smith", organization="Brand New Co"),
            ContactEntry(given_name="Carl", organization="brand new co"),
            ContactEntry(organization="Nameless Org"),
            ContactEntry(given_name="Ann", family_name="Lee"),
        ]

        result = ContactImportService(memory_store).import_contacts(contacts)
        assert result.ok
        assert result.op == "import_contacts"
        assert result.data["imported"] == 4
        assert result.data["skipped"] == 1
        assert result.data["companies_created"] == ["Brand New Co"]
        assert result.data["matched"][0] == {
            "organization": "Acme Studios Inc",
            "company": "Acme Studios",
            "score": 1.0,
        }
        # Acme, Brand New Co and four people.
        assert result.data["placed"] == 6

        jane = _by_name(memory_store, "Jane Doe")
        assert jane.data == {
            "source": "contacts",
            "title": "VP Development",
            "email": "jane@acme.test",
            "phone": "555-0100",
        }
        assert memory_store.snapshot.primary_type(jane.id).id == "executive"
        assert _employers(memory_store, jane.id) == [acme.name]
        assert _employers(memory_store, _by_name(memory_store, "Carl").id) == ["Brand New Co"]
        assert _employers(memory_store, _by_name(memory_store, "Ann Lee").id) == []
        brand = _by_name(memory_store, "Brand New Co")
        assert memory_store.snapshot.primary_type(brand.id).id == "production_company"
        assert all(o.position is not None for o in memory_store.snapshot.objects)

    def test_fuzzy_reconciliation_uses_threshold(self, memory_store: GraphStore) -> None:
        memory_store.create_object("company", "Paramount")
        contacts = [ContactEntry(given_name="Pat", organization="Paramont")]

        strict = ContactImportService(memory_store, threshold=0.95).import_contacts(contacts)
        assert strict.data["companies_created"] == ["Paramont"]

    def test_entry_failure_is_warning(self) -> None:
        backend = MemoryBackend()
        store = GraphStore(backend)
        store.create_object("company", "Acme")
        backend.fail_on.add("insert_relationship")

        result = ContactImportService(store).import_contacts(
            [
                ContactEntry(given_name="Jane", organization="Acme"),
                ContactEntry(given_name="Solo"),
            ]
        )
        assert result.ok
        assert result.data["imported"] == 1
        assert result.warnings == ["Jane: insert_relationship failed"]

    def test_load_failure(self) -> None:
        backend = MemoryBackend()
        backend.fail_on.add("load")
        result = ContactImportService(GraphStore(backend)).import_contacts([])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "STORAGE_FAILURE"


# ---------------------------------------------------------------------------
# Landscape
# ---------------------------------------------------------------------------


class TestImportLandscape:
    def test_creates_companies_and_principals(self, memory_store: GraphStore) -> None:
        memory_store.create_object("company", "Acme Studios", ["studio"])
        companies = [
            KnownCompany(name="Acme Studios", type="studio"),
            KnownCompany(
                name="Plan B",
                type="production_company",
                location="Los Angeles",
                principals=["Brad Pitt", "Dede Gardner"],
                deal="Amazon MGM",
            ),
            KnownCompany(name="Odd Shop", type="boutique", principals=["Brad Pitt"]),
        ]

        result = ContactImportService(memory_store).import_landscape(companies)
        assert result.ok
        assert result.data["companies_created"] == ["Plan B", "Odd Shop"]
        assert result.data["skipped"] == ["Acme Studios"]
        assert result.data["people_created"] == 2
        assert result.data["placed"] == 5

        plan_b = _by_name(memory_store, "Plan B")
        assert plan_b.data == {"location": "Los Angeles", "deal": "Amazon MGM"}
        odd = _by_name(memory_store, "Odd Shop")
        assert memory_store.snapshot.primary_type(odd.id).id == "production_company"

        brad = _by_name(memory_store, "Brad Pitt")
        assert _employers(memory_store, brad.id) == ["Plan B", "Odd Shop"]
        assert memory_store.snapshot.primary_type(brad.id).id == "producer"
        roles = {
            r.data["role"] for r in memory_store.snapshot.relationships if r.source_id == brad.id
        }
        assert roles == {"Principal"}

    def test_rerun_is_idempotent(self, memory_store: GraphStore) -> None:
        companies = [KnownCompany(name="Plan B", principals=["Brad Pitt"])]
        service = ContactImportService(memory_store)
        service.import_landscape(companies)
        again = service.import_landscape(companies)
        assert again.data["companies_created"] == []
        assert again.data["skipped"] == ["Plan B"]
        assert len(memory_store.snapshot.objects) == 2
        assert len(memory_store.snapshot.relationships) == 1

    def test_company_failure_is_warning(self) -> None:
        backend = MemoryBackend()
        store = GraphStore(backend)
        backend.fail_on.add("insert_object")
        result = ContactImportService(store).import_landscape([KnownCompany(name="Plan B")])
        assert result.ok
        assert result.data["companies_created"] == []
        assert result.warnings == ["Plan B: insert_object failed"]
