"""
Report Pipeline

Runs the full transform for one snapshot:

    Snapshot -> prepare(FilterContext) -> assemble(report) -> ReportResult

Every call is driven by an explicit, immutable FilterContext (date range,
"today" and the report-local selectors); nothing reads ambient state. Results
are memoized per context, which is safe because recomputation is pure: two
runs over the same snapshot and context produce identical results.

Usage:
    snapshot = FileRepository("data/").fetch_snapshot()
    pipeline = ReportPipeline(snapshot)
    context = FilterContext.create(date_from=date(2024, 1, 1), today=date(2024, 7, 1))
    results = pipeline.generate(context)
    results["cba_status"].to_dict()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .assembler import REPORT_CATALOGUE, ReportResult, ReportDefinition, assemble
from .config import (
    DEFAULT_ASSEMBLY_RECENT_DAYS,
    DEFAULT_ASSEMBLY_UPCOMING_DAYS,
    DEFAULT_CBA_EXPIRING_DAYS,
)
from .date_filter import ALL_TIME, DateRange
from .repository import Snapshot
from .schemas import normalize_id
from .views import PreparedData, prepare

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportSelectors:
    """Report-local selectors; changing one only changes the reports that read it."""
    union_id: Optional[str] = None
    executive_expiry_date: Optional[date] = None
    cba_expiring_days: int = DEFAULT_CBA_EXPIRING_DAYS
    assembly_recent_days: int = DEFAULT_ASSEMBLY_RECENT_DAYS
    assembly_upcoming_days: int = DEFAULT_ASSEMBLY_UPCOMING_DAYS

    def __post_init__(self):
        object.__setattr__(self, "union_id", normalize_id(self.union_id))
        for name in ("cba_expiring_days", "assembly_recent_days", "assembly_upcoming_days"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")


@dataclass(frozen=True)
class FilterContext:
    """Immutable inputs of one generation; also the memoization key."""
    date_range: DateRange = ALL_TIME
    today: date = field(default_factory=date.today)
    selectors: ReportSelectors = field(default_factory=ReportSelectors)

    def __post_init__(self):
        start, end = self.date_range.start, self.date_range.end
        if start is not None and end is not None and start > end:
            raise ValueError(f"date_from {start} is after date_to {end}")

    @classmethod
    def create(
        cls,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        today: Optional[date] = None,
        **selectors: Any,
    ) -> "FilterContext":
        """Build a context from loose keyword arguments (API / CLI)."""
        return cls(
            date_range=DateRange(start=date_from, end=date_to),
            today=today or date.today(),
            selectors=ReportSelectors(**selectors),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"today": self.today.isoformat(), **self.date_range.to_dict()}


class ReportPipeline:
    """
    Generates catalogue reports from one snapshot.

    Prepared data (filtered, joined, classified views) is cached per
    (date range, today); report results are cached per (context, key).
    """

    def __init__(self, snapshot: Snapshot, catalogue: Optional[Dict[str, ReportDefinition]] = None):
        self.snapshot = snapshot
        self.catalogue = catalogue if catalogue is not None else REPORT_CATALOGUE
        self._prepared: Dict[Tuple[DateRange, date], PreparedData] = {}
        self._results: Dict[Tuple[FilterContext, str], ReportResult] = {}

    @property
    def failures(self) -> Dict[str, str]:
        return dict(self.snapshot.failures)

    def prepared(self, context: FilterContext) -> PreparedData:
        key = (context.date_range, context.today)
        if key not in self._prepared:
            self._prepared[key] = prepare(self.snapshot, context.date_range, context.today)
        return self._prepared[key]

    def report(self, key: str, context: FilterContext) -> ReportResult:
        """One report; raises KeyError for a key outside the catalogue."""
        if key not in self.catalogue:
            raise KeyError(f"Unknown report '{key}'")
        cache_key = (context, key)
        if cache_key not in self._results:
            self._results[cache_key] = assemble(
                self.catalogue[key], self.prepared(context), context.selectors
            )
        return self._results[cache_key]

    def generate(self, context: FilterContext, keys: Optional[Iterable[str]] = None) -> Dict[str, ReportResult]:
        """
        Generate several reports under one context.

        Args:
            context: Date range, today and selectors shared by every report
            keys: Report keys to build (default: the whole catalogue)

        Returns:
            Ordered dict key -> ReportResult
        """
        selected: List[str] = list(keys) if keys is not None else list(self.catalogue)
        unknown = [k for k in selected if k not in self.catalogue]
        if unknown:
            raise KeyError(f"Unknown report(s): {', '.join(unknown)}")

        results = {key: self.report(key, context) for key in selected}
        unavailable = [key for key, result in results.items() if not result.available]
        if unavailable:
            logger.warning(f"{len(unavailable)} of {len(results)} reports unavailable: {', '.join(unavailable)}")
        return results

    def clear_cache(self) -> None:
        self._prepared.clear()
        self._results.clear()
