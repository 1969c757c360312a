"""
Derived-status calculators.

Pure, total functions over one record's fields. Every function accepts
missing data and answers with None or the "Unknown" bucket rather than
raising. "today" is always passed in; nothing here reads the clock.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from .config import (
    AGE_BRACKET_BOUNDARY,
    CBA_NOT_SIGNED,
    CBA_ONGOING,
    CBA_SIGNED,
    CBA_STATUS_ALIASES,
    DAMAGE_SEVERITIES,
    DAMAGE_SEVERITY_ALIASES,
    ELDER,
    FEMALE,
    INCIDENT_CATEGORIES,
    INCIDENT_STATUSES,
    INCIDENT_STATUS_ALIASES,
    INJURY_SEVERITIES,
    INJURY_SEVERITY_ALIASES,
    MALE,
    UNKNOWN,
    YOUTH,
)
from .date_filter import as_date


# ============================================================================
# People
# ============================================================================

def normalize_sex(raw: Any) -> str:
    """Male / Female / Unknown from free text ("m", "MALE", " female ", ...)."""
    value = str(raw or "").strip().lower()
    if value.startswith("m"):
        return MALE
    if value.startswith("f"):
        return FEMALE
    return UNKNOWN


def age_on(birth_date: Optional[date], today: date) -> Optional[int]:
    """Whole years between birth_date and today (calendar-aware)."""
    if birth_date is None or birth_date > today:
        return None
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def age_bracket(birth_date: Optional[date], today: date) -> Optional[str]:
    """youth (< 35) or elder (>= 35); None when the birth date is unusable."""
    age = age_on(birth_date, today)
    if age is None:
        return None
    return YOUTH if age < AGE_BRACKET_BOUNDARY else ELDER


# ============================================================================
# Day arithmetic
# ============================================================================

def days_until(target: Any, today: date) -> Optional[int]:
    """
    Whole days from today to target, both taken at local midnight.

    Negative values mean the target has already passed.
    """
    day = as_date(target)
    if day is None:
        return None
    return (day - today).days


def days_since(target: Any, today: date) -> Optional[int]:
    remaining = days_until(target, today)
    if remaining is None:
        return None
    return -remaining


def add_years(start: date, years: int) -> Optional[date]:
    """
    Add calendar years; 29 February rolls over to 1 March when needed.

    Returns None when the result falls outside the representable date range.
    """
    year = start.year + years
    if not date.min.year <= year <= date.max.year:
        return None
    try:
        return start.replace(year=year)
    except ValueError:
        return date(year, 3, 1)


def term_end_date(appointed: Optional[date], term_years: Optional[int]) -> Optional[date]:
    if appointed is None or term_years is None or term_years < 0:
        return None
    return add_years(appointed, term_years)


# ============================================================================
# Windows
# ============================================================================

def is_expiring_soon(days: Optional[int], window: int) -> bool:
    """CBA window: |days| <= window, so recently lapsed agreements count too."""
    return days is not None and abs(days) <= window


def is_upcoming(days: Optional[int], window: int) -> bool:
    """Assembly window: strictly in the future, at most `window` days away."""
    return days is not None and 0 < days <= window


def is_recent(elapsed: Optional[int], window: int) -> bool:
    """Past event no more than `window` days ago (today included)."""
    return elapsed is not None and 0 <= elapsed <= window


# ============================================================================
# Agreements
# ============================================================================

def canonical_cba_status(
    raw_status: Any,
    registration_date: Optional[date],
    end_date: Optional[date],
    today: date,
) -> str:
    """
    Normalize a CBA's free-text status to Signed / Ongoing / Not-Signed.

    Recognized text wins regardless of dates. Otherwise the status is
    inferred from the registration and end dates; missing dates fall back
    to Not-Signed.
    """
    text = str(raw_status or "").strip().lower()
    if text in CBA_STATUS_ALIASES:
        return CBA_STATUS_ALIASES[text]

    if registration_date is None or end_date is None:
        return CBA_NOT_SIGNED
    if registration_date > today:
        return CBA_SIGNED
    if registration_date <= today <= end_date:
        return CBA_ONGOING
    return CBA_NOT_SIGNED


# ============================================================================
# Incidents
# ============================================================================

def _match_vocabulary(raw: Any, vocabulary: Sequence[str], aliases: Dict[str, str]) -> str:
    text = str(raw or "").strip()
    if not text:
        return UNKNOWN
    lowered = text.lower()
    for term in vocabulary:
        if term.lower() == lowered:
            return term
    return aliases.get(lowered, UNKNOWN)


def injury_severity_bucket(raw: Any) -> str:
    return _match_vocabulary(raw, INJURY_SEVERITIES, INJURY_SEVERITY_ALIASES)


def damage_severity_bucket(raw: Any) -> str:
    return _match_vocabulary(raw, DAMAGE_SEVERITIES, DAMAGE_SEVERITY_ALIASES)


def incident_category(raw: Any) -> str:
    return _match_vocabulary(raw, INCIDENT_CATEGORIES, {})


def incident_status(raw: Any) -> str:
    return _match_vocabulary(raw, INCIDENT_STATUSES, INCIDENT_STATUS_ALIASES)
