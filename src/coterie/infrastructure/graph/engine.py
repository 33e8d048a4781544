"""GraphEngine — lazy-built NetworkX view of a graph snapshot.

Rebuilt per invocation, no cross-invocation cache. Nodes are object ids;
edges are keyed by relationship id and carry their relationship ``type``
plus ``order``, the edge's index in the snapshot. Anything that must break
ties the way the snapshot does picks the lowest ``order``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeAlias

import networkx as nx

from coterie.domain.models import Direction

if TYPE_CHECKING:
    from coterie.infrastructure.store.snapshot import GraphSnapshot

_Graph: TypeAlias = nx.MultiDiGraph


class GraphEngine:
    """Lazy-loading graph engine over a :class:`GraphSnapshot`."""

    def __init__(self, snapshot: GraphSnapshot) -> None:
        self._snapshot = snapshot
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building from the snapshot on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    def _build(self) -> _Graph:
        """Build a MultiDiGraph; isolated objects are included as nodes."""
        g: _Graph = nx.MultiDiGraph()
        for obj in self._snapshot.objects:
            g.add_node(obj.id, object_class=obj.object_class, name=obj.name)
        for order, rel in enumerate(self._snapshot.relationships):
            # Edges to objects missing from the snapshot are dropped.
            if rel.source_id not in g or rel.target_id not in g:
                continue
            g.add_edge(rel.source_id, rel.target_id, key=rel.id, type=rel.type, order=order)
        return g

    def first_neighbor(
        self,
        object_id: str,
        rel_type: str,
        direction: Direction,
        accept: Callable[[str], bool] | None = None,
    ) -> str | None:
        """Neighbour across the earliest *rel_type* edge that *accept* allows.

        ``OUTGOING`` follows edges from *object_id* to their targets,
        ``INCOMING`` from sources into *object_id*.
        """
        g = self.graph
        if object_id not in g:
            return None
        if direction is Direction.OUTGOING:
            edges = (
                (data["order"], neighbor)
                for _, neighbor, data in g.out_edges(object_id, data=True)
                if data["type"] == rel_type
            )
        else:
            edges = (
                (data["order"], neighbor)
                for neighbor, _, data in g.in_edges(object_id, data=True)
                if data["type"] == rel_type
            )
        for _, neighbor in sorted(edges):
            if accept is None or accept(neighbor):
                return neighbor
        return None

    def neighborhood(self, object_id: str, depth: int = 1) -> list[str]:
        """Ids within *depth* hops in either direction, in snapshot object order."""
        g = self.graph
        if object_id not in g:
            return []
        reachable = nx.single_source_shortest_path_length(
            g.to_undirected(as_view=True), object_id, cutoff=depth
        )
        return [o.id for o in self._snapshot.objects if o.id in reachable and o.id != object_id]
