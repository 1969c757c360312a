"""
Union Reporting Engine

Joins the independently fetched union records (members, unions, executives,
CBAs, OSH incidents, terminated unions), classifies them and assembles the
fixed catalogue of summary reports under one date-range filter.

Usage:
    from reporting import FileRepository, FilterContext, ReportPipeline

    snapshot = FileRepository("exports/").fetch_snapshot()
    pipeline = ReportPipeline(snapshot)

    context = FilterContext.create(date_from=date(2024, 1, 1), cba_expiring_days=60)
    for key, result in pipeline.generate(context).items():
        print(key, result.total)
"""

from .assembler import REPORT_CATALOGUE, ReportResult, catalogue
from .date_filter import ALL_TIME, DateRange
from .pipeline import FilterContext, ReportPipeline, ReportSelectors
from .repository import (
    EntityFetchError,
    FileRepository,
    HttpRepository,
    Snapshot,
    StaticRepository,
)

__all__ = [
    'REPORT_CATALOGUE',
    'ReportResult',
    'catalogue',
    'ALL_TIME',
    'DateRange',
    'FilterContext',
    'ReportPipeline',
    'ReportSelectors',
    'EntityFetchError',
    'FileRepository',
    'HttpRepository',
    'Snapshot',
    'StaticRepository',
]
