"""
Batch deduplication: last occurrence of a natural key wins.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

T = TypeVar("T")


def dedupe_last_wins(records: Iterable[T], key: Callable[[T], str]) -> list[T]:
    """
    Collapse records sharing a canonical key, keeping the later one.

    Records whose key is empty are dropped. Output order is not significant.
    """
    latest: dict[str, T] = {}
    for record in records:
        k = key(record)
        if not k:
            continue
        latest[k] = record
    return list(latest.values())
