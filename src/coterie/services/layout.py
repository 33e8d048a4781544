"""Auto-layout — deterministic canvas positions from graph structure.

:func:`compute_layout` is a pure function of a snapshot: companies in
columns by primary type, people below-right of their employer, projects
left of their producer, and everything without an anchor in a band at the
bottom (people) or top (projects). Iteration is always over snapshot lists
or insertion-ordered dicts, so identical inputs give identical output.

:class:`LayoutService` computes against a copy of the store's snapshot
taken under the store lock and commits the result as one batch.
"""

from __future__ import annotations

import logging
import threading
from typing import TypeAlias
from collections import defaultdict

from coterie.config.models import LayoutConfig
from coterie.domain.models import Direction, PlannedPosition
from coterie.domain.taxonomy import ObjectClassId, RelationshipTypeId
from coterie.infrastructure.errors import StoreError
from coterie.infrastructure.graph.engine import GraphEngine
from coterie.infrastructure.store.memory import MemoryBackend
from coterie.infrastructure.store.snapshot import GraphSnapshot
from coterie.infrastructure.store.store import GraphStore
from coterie.services._helpers import error_result
from coterie.services.base import BaseService
from coterie.services.result import ServiceResult

logger = logging.getLogger(__name__)

OTHER_GROUP = "other"

# Left-to-right company column order.
CANONICAL_COMPANY_ORDER: tuple[str, ...] = (
    "studio",
    "streamer",
    "network",
    "production_company",
    "agency",
    "management",
    "financier",
    "distributor",
    OTHER_GROUP,
)

_Coords: TypeAlias = tuple[float, float]


def company_columns(snapshot: GraphSnapshot) -> dict[str, list[str]]:
    """Company ids grouped by primary type, in canonical order, empty groups dropped."""
    groups: dict[str, list[str]] = {key: [] for key in CANONICAL_COMPANY_ORDER}
    for company in snapshot.objects_of_class(ObjectClassId.COMPANY):
        primary = snapshot.primary_type(company.id)
        key = primary.id if primary is not None and primary.id in groups else OTHER_GROUP
        groups[key].append(company.id)
    return {key: ids for key, ids in groups.items() if ids}


def _layout_companies(snapshot: GraphSnapshot, config: LayoutConfig) -> dict[str, _Coords]:
    placed: dict[str, _Coords] = {}
    per_column = config.max_per_column
    current_x = config.start_x
    for ids in company_columns(snapshot).values():
        columns = (len(ids) + per_column - 1) // per_column
        for index, company_id in enumerate(ids):
            column, row = divmod(index, per_column)
            # The trailing sub-column may be partial; centre it on its own count.
            in_column = min(per_column, len(ids) - column * per_column)
            top = config.canvas_height / 2 - in_column * config.card_spacing_y / 2
            placed[company_id] = (
                current_x + column * config.card_spacing_x,
                top + row * config.card_spacing_y,
            )
        current_x += columns * config.card_spacing_x + config.column_gap
    return placed


def _band(index: int, base_y: float, config: LayoutConfig) -> _Coords:
    row, col = divmod(index, config.band_per_row)
    return (
        config.start_x + col * config.card_spacing_x,
        base_y + row * config.card_spacing_y,
    )


def compute_layout(
    snapshot: GraphSnapshot,
    config: LayoutConfig | None = None,
    *,
    force: bool = False,
) -> list[PlannedPosition]:
    """Plan canvas positions for the objects in *snapshot*.

    Positions are computed for every object. Without *force*, only objects
    that have no position yet are returned, and a company that already has
    a stored position anchors its people and projects from there.

    Returns planned positions in placement order: companies, people, then
    projects.
    """
    config = config or LayoutConfig()
    graph = GraphEngine(snapshot)
    stored = {o.id: (o.position.x, o.position.y) for o in snapshot.objects if o.position}

    planned: dict[str, _Coords] = _layout_companies(snapshot, config)
    anchors = dict(planned)
    if not force:
        anchors.update({cid: stored[cid] for cid in planned if cid in stored})

    # People: below-right of the first employer that has a position.
    per_employer: defaultdict[str, int] = defaultdict(int)
    unanchored_people: list[str] = []
    for person in snapshot.objects_of_class(ObjectClassId.PERSON):
        employer = graph.first_neighbor(
            person.id,
            RelationshipTypeId.EMPLOYED_BY,
            Direction.OUTGOING,
            accept=anchors.__contains__,
        )
        if employer is None:
            unanchored_people.append(person.id)
            continue
        n = per_employer[employer]
        per_employer[employer] += 1
        ex, ey = anchors[employer]
        step_col, step_row = divmod(n, config.people_per_column)
        planned[person.id] = (
            ex + config.person_offset_x + step_col * config.person_step_x,
            ey + config.person_offset_y + step_row * config.person_step_y,
        )
    band_y = config.canvas_height - config.person_band_margin
    for index, person_id in enumerate(unanchored_people):
        planned[person_id] = _band(index, band_y, config)

    # Projects: left of the first producer that has a position.
    per_producer: defaultdict[str, int] = defaultdict(int)
    unanchored_projects: list[str] = []
    for project in snapshot.objects_of_class(ObjectClassId.PROJECT):
        producer = graph.first_neighbor(
            project.id,
            RelationshipTypeId.PRODUCES,
            Direction.INCOMING,
            accept=anchors.__contains__,
        )
        if producer is None:
            unanchored_projects.append(project.id)
            continue
        n = per_producer[producer]
        per_producer[producer] += 1
        px, py = anchors[producer]
        step_col, step_row = divmod(n, config.projects_per_column)
        planned[project.id] = (
            px - config.project_offset_x - step_col * config.project_step_x,
            py + step_row * config.project_step_y,
        )
    for index, project_id in enumerate(unanchored_projects):
        planned[project_id] = _band(index, config.project_band_y, config)

    return [
        PlannedPosition(object_id, x, y)
        for object_id, (x, y) in planned.items()
        if force or object_id not in stored
    ]


class LayoutService(BaseService):
    """Computes and commits auto-layout positions."""

    def __init__(self, store: GraphStore, config: LayoutConfig | None = None) -> None:
        super().__init__(store)
        self._config = config or LayoutConfig()

    def auto_layout(
        self,
        *,
        force: bool = False,
        dry_run: bool = False,
        cancel: threading.Event | None = None,
    ) -> ServiceResult:
        """Place unpositioned objects (all objects with *force*).

        With *dry_run* the batch is committed to an in-memory copy of the
        graph, so the result reports exactly what a real run would write
        while the store stays untouched.
        """
        op = "auto_layout"
        try:
            # Compute and commit under one hold of the store lock.
            with self._store.read() as snap:
                snapshot = snap.copy()
                positions = compute_layout(snapshot, self._config, force=force)
                logger.debug("Planned %d positions (force=%s)", len(positions), force)
                target = self._store
                if dry_run:
                    target = GraphStore(MemoryBackend.from_snapshot(snapshot))
                batch = target.apply_positions(positions, cancel=cancel)
        except StoreError as exc:
            return error_result(op, exc)

        warnings = [f"{f.object_id}: {f.reason}" for f in batch.failures]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "placed": len(batch.applied),
                "failed": len(batch.failures),
                "dry_run": dry_run,
                "positions": [p._asdict() for p in positions],
                "failures": [f.model_dump() for f in batch.failures],
            },
            warnings=warnings,
        )
