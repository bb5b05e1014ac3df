'''
    File Name: ranking.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
    Description: Group-by helpers with stable descending ordering.
'''
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class GroupTotal:
    key: Any
    total: float


@dataclass(frozen=True)
class GroupCount:
    key: Any
    count: int


def group_sum(items: Iterable[T], key_fn: Callable[[T], Optional[Hashable]], value_fn: Callable[[T], float]) -> List[GroupTotal]:
    """Sum `value_fn` per key, largest total first.

    Keys keep the order in which they were first seen when totals tie.
    Items whose key is None are skipped.
    """
    totals: Dict[Hashable, float] = {}
    for item in items:
        key = key_fn(item)
        if key is None:
            continue
        totals[key] = totals.get(key, 0.0) + value_fn(item)
    # sorted() is stable, reverse=True included
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return [GroupTotal(key, total) for key, total in ranked]


def group_count(items: Iterable[T], key_fn: Callable[[T], Optional[Hashable]]) -> List[GroupCount]:
    """Count items per key, most frequent first; same tie and None rules as `group_sum`."""
    counts: Dict[Hashable, int] = {}
    for item in items:
        key = key_fn(item)
        if key is None:
            continue
        counts[key] = counts.get(key, 0) + 1
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [GroupCount(key, count) for key, count in ranked]


def top_k(sequence: Sequence[T], k: int) -> List[T]:
    if k <= 0:
        return []
    return list(sequence[:k])
