"""Fuzzy company-name matching.

Used to reconcile external names (imported contacts, known-company lists)
against names already in the graph. Pure functions, no store dependency.

Normalization lowercases, strips everything outside ``[a-z0-9 ]`` and drops
corporate suffixes and generic industry words, so that
``"Warner Bros. Entertainment Inc."`` and ``"Warner Bros"`` both reduce to
``"warner bros"``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import NamedTuple

STOPWORDS: frozenset[str] = frozenset(
    {
        "inc",
        "incorporated",
        "llc",
        "corp",
        "corporation",
        "co",
        "company",
        "ltd",
        "limited",
        "entertainment",
        "pictures",
        "films",
        "studios",
        "studio",
        "productions",
        "production",
        "media",
        "group",
        "holdings",
    }
)

DEFAULT_THRESHOLD = 0.8
CONTAINMENT_SCORE = 0.95
MIN_TOKEN_OVERLAP = 0.5

_NON_ALNUM = re.compile(r"[^a-z0-9 ]")


class Match(NamedTuple):
    """A candidate accepted by :func:`best_match`."""

    name: str
    score: float


def normalize(name: str) -> str:
    """Reduce a company name to its distinctive lowercase tokens.

    Examples:
        >>> normalize("Netflix, Inc.")
        'netflix'
        >>> normalize("A24 Films LLC")
        'a24'
    """
    cleaned = _NON_ALNUM.sub("", name.lower())
    tokens = [t for t in cleaned.split(" ") if t and t not in STOPWORDS]
    return " ".join(tokens).strip()


def levenshtein_distance(s1: str, s2: str) -> int:
    """Unit-cost edit distance (insertion, deletion, substitution)."""
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1, start=1):
        current = [i]
        for j, c2 in enumerate(s2, start=1):
            cost = 0 if c1 == c2 else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def levenshtein_similarity(s1: str, s2: str) -> float:
    """``1 - distance / max(len)``; 1.0 when both strings are empty."""
    longest = max(len(s1), len(s2))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(s1, s2) / longest


def is_match(name1: str, name2: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
    """Whether two names plausibly refer to the same company.

    Checks run cheapest first and short-circuit on the first hit:
    normalized equality, containment, token overlap, then edit similarity.
    """
    n1 = normalize(name1)
    n2 = normalize(name2)

    if n1 == n2:
        return True
    if not n1 or not n2:
        return False
    if n1 in n2 or n2 in n1:
        return True

    words1 = set(n1.split(" "))
    words2 = set(n2.split(" "))
    shared = words1 & words2
    if shared and len(shared) / min(len(words1), len(words2)) >= MIN_TOKEN_OVERLAP:
        return True

    return levenshtein_similarity(n1, n2) >= threshold


def best_match(
    query: str,
    candidates: Iterable[str],
    threshold: float = DEFAULT_THRESHOLD,
) -> Match | None:
    """Pick the candidate that best matches *query*.

    An exact normalized match returns immediately with score 1.0.
    Containment scores 0.95. Anything else scores its Levenshtein
    similarity and must reach *threshold*. A candidate only replaces the
    running best when it scores strictly higher, so earlier candidates win
    ties. Sets carry no order and are sorted before iteration.

    Returns the candidate's original spelling, or None.
    """
    normalized = normalize(query)
    if not normalized:
        return None

    if isinstance(candidates, (set, frozenset)):
        candidates = sorted(candidates)

    best: Match | None = None
    best_score = 0.0
    for candidate in candidates:
        candidate_norm = normalize(candidate)

        if candidate_norm == normalized:
            return Match(candidate, 1.0)

        if candidate_norm and (candidate_norm in normalized or normalized in candidate_norm):
            if CONTAINMENT_SCORE > best_score:
                best, best_score = Match(candidate, CONTAINMENT_SCORE), CONTAINMENT_SCORE
            continue

        similarity = levenshtein_similarity(normalized, candidate_norm)
        if similarity > best_score and similarity >= threshold:
            best, best_score = Match(candidate, similarity), similarity

    return best
