"""MatchService — fuzzy lookup of external names against graph objects."""

from __future__ import annotations

from coterie.domain.fuzzy import (
    DEFAULT_THRESHOLD,
    best_match,
    is_match,
    levenshtein_similarity,
    normalize,
)
from coterie.domain.taxonomy import ObjectClassId
from coterie.infrastructure.errors import StoreError
from coterie.services._helpers import error_result
from coterie.services.base import BaseService
from coterie.services.result import ServiceResult


class MatchService(BaseService):
    """Resolves a free-form name to existing objects of one class."""

    def match(
        self,
        name: str,
        *,
        object_class: str = ObjectClassId.COMPANY,
        threshold: float = DEFAULT_THRESHOLD,
        limit: int = 10,
    ) -> ServiceResult:
        """Best match plus every plausible candidate, strongest first.

        Candidates are the objects :func:`is_match` accepts, ranked by edit
        similarity of their normalized names; ties keep snapshot order.
        """
        op = "match"
        try:
            objects = self._store.snapshot.objects_of_class(object_class)
        except StoreError as exc:
            return error_result(op, exc)

        normalized = normalize(name)
        best = best_match(name, [o.name for o in objects], threshold)
        best_obj = next((o for o in objects if best and o.name == best.name), None)

        candidates = [
            {
                "id": o.id,
                "name": o.name,
                "score": round(levenshtein_similarity(normalized, normalize(o.name)), 4),
            }
            for o in objects
            if is_match(name, o.name, threshold)
        ]
        candidates.sort(key=lambda c: c["score"], reverse=True)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "query": name,
                "normalized": normalized,
                "best": (
                    {"id": best_obj.id, "name": best_obj.name, "score": round(best.score, 4)}
                    if best is not None and best_obj is not None
                    else None
                ),
                "count": len(candidates[:limit]),
                "candidates": candidates[:limit],
            },
        )
