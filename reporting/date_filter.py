"""
Date parsing and the global date-range filter.

The same filter and the same per-kind field table (ENTITY_DATE_FIELDS) are
used for every report, so that all results of one generation reflect the
same window:

    members            -> registration_date
    executives         -> appointed_date
    cbas               -> registration_date
    unions             -> established_date OR general_assembly_date
    incidents          -> occurred_at
    terminated_unions  -> termination_date

With no range set the filter is the identity. With a range set, records whose
date field is missing or unparseable are excluded.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence, TypeVar

from .config import ENTITY_DATE_FIELDS

T = TypeVar("T")

_DATE_PREFIX = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})")

_DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M",
]


# ============================================================================
# Parsing
# ============================================================================

def parse_date(value: Any) -> Optional[date]:
    """Parse a loosely-typed date value. Returns None when it cannot be read."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    match = _DATE_PREFIX.match(value.strip())
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a timestamp; a bare date becomes midnight of that day."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    day = parse_date(text)
    if day is None:
        return None
    return datetime.combine(day, datetime.min.time())


def as_date(value: Any) -> Optional[date]:
    """Calendar day of a date or datetime (None stays None)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


# ============================================================================
# Range
# ============================================================================

@dataclass(frozen=True)
class DateRange:
    """
    Inclusive [start, end] window on calendar days.

    Either bound may be absent; with both absent the range is "all time".
    The end bound covers the whole of its calendar day.
    """
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_set(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, value: Any) -> bool:
        day = parse_date(value)
        if day is None:
            return False
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    def to_dict(self) -> dict:
        return {
            "date_from": self.start.isoformat() if self.start else None,
            "date_to": self.end.isoformat() if self.end else None,
        }


ALL_TIME = DateRange()


# ============================================================================
# Filtering
# ============================================================================

def _field_value(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def filter_by_fields(
    records: Sequence[T],
    fields: Iterable[str],
    date_range: DateRange,
) -> Sequence[T]:
    """Keep records where any of `fields` falls inside `date_range`."""
    if not date_range.is_set:
        return records
    fields = tuple(fields)
    return [
        record for record in records
        if any(date_range.contains(_field_value(record, f)) for f in fields)
    ]


def filter_records(records: Sequence[T], kind: str, date_range: DateRange) -> Sequence[T]:
    """Apply the date range to an entity collection using its designated field(s)."""
    try:
        fields = ENTITY_DATE_FIELDS[kind]
    except KeyError:
        raise ValueError(f"No date field registered for entity kind '{kind}'")
    return filter_by_fields(records, fields, date_range)
