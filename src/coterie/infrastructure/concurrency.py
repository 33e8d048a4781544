"""Bounded fan-out/fan-in for independent I/O-bound calls."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def fan_out(
    items: Sequence[T],
    fn: Callable[[T], R],
    *,
    max_workers: int = 4,
) -> list[R]:
    """Run ``fn`` over *items* on at most *max_workers* threads.

    Results come back in input order regardless of completion order. The
    first exception (by input index) propagates after all calls finish.
    """
    if not items:
        return []
    if max_workers <= 1 or len(items) == 1:
        return [fn(item) for item in items]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as executor:
        futures = [executor.submit(fn, item) for item in items]
        results: list[R] = []
        for future in futures:
            results.append(future.result())
    return results
