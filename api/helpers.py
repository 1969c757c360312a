"""
Shared helper functions used across routers.
"""
from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, Query

from reporting import FilterContext
from reporting.config import (
    DEFAULT_ASSEMBLY_RECENT_DAYS,
    DEFAULT_ASSEMBLY_UPCOMING_DAYS,
    DEFAULT_CBA_EXPIRING_DAYS,
)


def get_today() -> date:
    """Reference date for all day arithmetic of a request."""
    return date.today()


def report_context(
    date_from: Optional[date] = Query(None, description="Inclusive start of the date range"),
    date_to: Optional[date] = Query(None, description="Inclusive end of the date range"),
    union_id: Optional[str] = Query(None, description="Union for executives_by_union"),
    executive_expiry_date: Optional[date] = Query(None, description="Cutoff for executives_expiring_before (default today)"),
    cba_expiring_days: int = Query(DEFAULT_CBA_EXPIRING_DAYS, ge=0),
    assembly_recent_days: int = Query(DEFAULT_ASSEMBLY_RECENT_DAYS, ge=0),
    assembly_upcoming_days: int = Query(DEFAULT_ASSEMBLY_UPCOMING_DAYS, ge=0),
    today: date = Depends(get_today),
) -> FilterContext:
    """Build the FilterContext from the shared query parameters."""
    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=422, detail="date_from must be on or before date_to")
    return FilterContext.create(
        date_from=date_from,
        date_to=date_to,
        today=today,
        union_id=union_id,
        executive_expiry_date=executive_expiry_date,
        cba_expiring_days=cba_expiring_days,
        assembly_recent_days=assembly_recent_days,
        assembly_upcoming_days=assembly_upcoming_days,
    )
