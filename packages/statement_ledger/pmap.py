"""Order-preserving bounded-concurrency map over a thread pool.

Per-file CSV parsing shares no mutable state, so files can be parsed side by
side. ``p_map`` hides the executor plumbing and returns results in input
order so everything downstream stays deterministic.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` with at most ``concurrency`` workers.

    The first mapper exception propagates to the caller after pending work is
    cancelled. With ``concurrency == 1`` the work runs inline.
    """

    if not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    items = list(iterable)
    if concurrency == 1 or len(items) <= 1:
        return [mapper(item) for item in items]

    with ThreadPoolExecutor(max_workers=min(concurrency, len(items))) as pool:
        futures = [pool.submit(mapper, item) for item in items]
        try:
            return [f.result() for f in futures]
        except Exception:
            for f in futures:
                f.cancel()
            raise


__all__ = ["p_map"]
