"""
Generic grouping primitive shared by every "by category" report.

    counts = group_by(records, key_fn, order=...)
    rows = with_percentage(counts)

A key function returning None leaves the record out of the grouping (and out
of its total). Output order is stable: keys listed in `order` first, in that
order, then any remaining keys sorted.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence

from .config import PERCENT_PLACES


@dataclass(frozen=True)
class GroupCount:
    key: Any
    count: int
    percentage: float


def _sort_key(key: Any):
    if isinstance(key, (int, float)) and not isinstance(key, bool):
        return (0, key, "")
    return (1, 0, str(key).lower())


def group_by(
    records: Iterable[Any],
    key_fn: Callable[[Any], Optional[Hashable]],
    order: Optional[Sequence[Hashable]] = None,
) -> Dict[Hashable, int]:
    """Count records per key. Keys named in `order` are always present."""
    counts: Counter = Counter()
    for record in records:
        key = key_fn(record)
        if key is None:
            continue
        counts[key] += 1

    grouped: Dict[Hashable, int] = {}
    for key in order or ():
        grouped[key] = counts.pop(key, 0)
    for key in sorted(counts, key=_sort_key):
        grouped[key] = counts[key]
    return grouped


def percentage(count: int, total: int, places: int = PERCENT_PLACES) -> float:
    """count / total * 100, rounded; 0.0 when total is 0."""
    if total <= 0:
        return 0.0
    return round(count / total * 100.0, places)


def with_percentage(grouped: Dict[Hashable, int], places: int = PERCENT_PLACES) -> List[GroupCount]:
    total = sum(grouped.values())
    return [
        GroupCount(key=key, count=count, percentage=percentage(count, total, places))
        for key, count in grouped.items()
    ]


def grouping_rows(grouped: Dict[Hashable, int], label: str) -> List[Dict[str, Any]]:
    """Row dicts for a grouping: {<label>: key, count, percentage}."""
    return [
        {label: item.key, "count": item.count, "percentage": item.percentage}
        for item in with_percentage(grouped)
    ]
