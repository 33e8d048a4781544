"""Tests for GraphEngine — NetworkX view over a snapshot."""

from __future__ import annotations

from coterie.domain.models import Direction
from coterie.infrastructure.graph.engine import GraphEngine
from coterie.infrastructure.store.store import GraphStore


class TestBuild:
    def test_nodes_and_edges(self, memory_store: GraphStore) -> None:
        acme = memory_store.create_object("company", "Acme")
        jane = memory_store.create_object("person", "Jane")
        memory_store.create_object("project", "Lonely")
        rel = memory_store.create_relationship(jane.id, acme.id, "employed_by")

        g = GraphEngine(memory_store.snapshot).graph
        assert g.number_of_nodes() == 3
        assert g.nodes[acme.id]["object_class"] == "company"
        assert g.edges[jane.id, acme.id, rel.id]["type"] == "employed_by"

    def test_dangling_edges_dropped(self, memory_store: GraphStore) -> None:
        acme = memory_store.create_object("company", "Acme")
        jane = memory_store.create_object("person", "Jane")
        memory_store.create_relationship(jane.id, acme.id, "employed_by")
        snap = memory_store.snapshot.copy()
        snap.objects = [o for o in snap.objects if o.id != acme.id]
        assert GraphEngine(snap).graph.number_of_edges() == 0


class TestFirstNeighbor:
    def test_earliest_edge_wins(self, memory_store: GraphStore) -> None:
        zeta = memory_store.create_object("company", "Zeta")
        alpha = memory_store.create_object("company", "Alpha")
        jane = memory_store.create_object("person", "Jane")
        memory_store.create_relationship(jane.id, zeta.id, "employed_by")
        memory_store.create_relationship(jane.id, alpha.id, "employed_by")
        engine = GraphEngine(memory_store.snapshot)
        assert engine.first_neighbor(jane.id, "employed_by", Direction.OUTGOING) == zeta.id

    def test_accept_filter(self, memory_store: GraphStore) -> None:
        zeta = memory_store.create_object("company", "Zeta")
        alpha = memory_store.create_object("company", "Alpha")
        jane = memory_store.create_object("person", "Jane")
        memory_store.create_relationship(jane.id, zeta.id, "employed_by")
        memory_store.create_relationship(jane.id, alpha.id, "employed_by")
        engine = GraphEngine(memory_store.snapshot)
        found = engine.first_neighbor(
            jane.id, "employed_by", Direction.OUTGOING, accept={alpha.id}.__contains__
        )
        assert found == alpha.id

    def test_incoming(self, memory_store: GraphStore) -> None:
        acme = memory_store.create_object("company", "Acme")
        film = memory_store.create_object("project", "Night Train")
        memory_store.create_relationship(acme.id, film.id, "produces")
        engine = GraphEngine(memory_store.snapshot)
        assert engine.first_neighbor(film.id, "produces", Direction.INCOMING) == acme.id
        assert engine.first_neighbor(film.id, "produces", Direction.OUTGOING) is None

    def test_unknown_object(self, memory_store: GraphStore) -> None:
        engine = GraphEngine(memory_store.snapshot)
        assert engine.first_neighbor("nope", "produces", Direction.INCOMING) is None


class TestNeighborhood:
    def test_depth(self, memory_store: GraphStore) -> None:
        acme = memory_store.create_object("company", "Acme")
        jane = memory_store.create_object("person", "Jane")
        bob = memory_store.create_object("person", "Bob")
        memory_store.create_relationship(jane.id, acme.id, "employed_by")
        memory_store.create_relationship(bob.id, jane.id, "reports_to")
        engine = GraphEngine(memory_store.snapshot)
        assert engine.neighborhood(acme.id, depth=1) == [jane.id]
        assert engine.neighborhood(acme.id, depth=2) == [jane.id, bob.id]
        assert engine.neighborhood("missing") == []
