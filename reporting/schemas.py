"""
Ingestion schemas, one pydantic model per entity kind.

Source records arrive loosely typed: camelCase or snake_case keys, aliased
fields (mem_id / id, registry_date / created_at, ...), dates as strings of
varying shape, identifiers as ints or strings. Each model coalesces its
aliases and normalizes values exactly once here, so that the calculators and
assemblers downstream only see one well-typed representation.

Malformed values never reject a record; they become None (or "Unknown").
Only input that is not a mapping at all fails validation.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Annotated, Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError, model_validator

from .calculators import normalize_sex
from .config import CBAS, EXECUTIVES, INCIDENTS, MEMBERS, TERMINATED_UNIONS, UNIONS, UNKNOWN
from .date_filter import parse_date, parse_datetime

logger = logging.getLogger(__name__)


# ============================================================================
# Lenient value coercion
# ============================================================================

_TRUE_TEXT = {"true", "yes", "y", "1"}


def normalize_id(value: Any) -> Optional[str]:
    """Identifiers are joined as strings: 3, "3" and 3.0 are the same key."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if value != value or not value.is_integer():
            return None
        return str(int(value))
    text = str(value).strip()
    return text or None


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if number != number or not number.is_integer():
        return None
    return int(number)


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return None if number != number else number


def _to_flag(value: Any) -> bool:
    if value is True:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_TEXT
    return False


def _clean_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


RecordId = Annotated[Optional[str], BeforeValidator(normalize_id)]
LooseDate = Annotated[Optional[date], BeforeValidator(parse_date)]
LooseDateTime = Annotated[Optional[datetime], BeforeValidator(parse_datetime)]
LooseInt = Annotated[Optional[int], BeforeValidator(_to_int)]
LooseFloat = Annotated[Optional[float], BeforeValidator(_to_float)]
Text = Annotated[Optional[str], BeforeValidator(_clean_text)]
Sex = Annotated[str, BeforeValidator(normalize_sex)]
Flag = Annotated[bool, BeforeValidator(_to_flag)]


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _lookup(data: Mapping, path: str) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


# ============================================================================
# Models
# ============================================================================

class SourceRecord(BaseModel):
    """
    Base for all ingested records.

    FIELD_ALIASES maps a model field to the source keys that may carry it,
    in priority order. Dotted keys reach into nested objects
    ("member.sex"). The first non-empty value wins.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    FIELD_ALIASES: ClassVar[Dict[str, Tuple[str, ...]]] = {}

    id: RecordId = None

    @model_validator(mode="before")
    @classmethod
    def _coalesce_aliases(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        values = dict(data)
        for field, keys in cls.FIELD_ALIASES.items():
            values[field] = next(
                (v for v in (_lookup(data, k) for k in keys) if _is_present(v)),
                None,
            )
        return values


class Member(SourceRecord):
    FIELD_ALIASES = {
        "id": ("mem_id", "id"),
        "union_id": ("union_id", "unionId"),
        "sex": ("sex", "gender"),
        "birth_date": ("birthdate", "birth_date"),
        "registration_date": ("registry_date", "registration_date", "created_at"),
    }

    union_id: RecordId = None
    member_code: Text = None
    first_name: Text = None
    father_name: Text = None
    surname: Text = None
    sex: Sex = UNKNOWN
    birth_date: LooseDate = None
    registration_date: LooseDate = None
    salary: LooseFloat = None

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.father_name, self.surname) if p]
        return " ".join(parts) or None


class Union(SourceRecord):
    FIELD_ALIASES = {
        "id": ("id", "union_id"),
        "name": ("name_en", "name"),
        "strategic_plan": ("strategic_plan_in_place", "strategic_plan"),
    }

    union_code: Text = None
    name: Text = None
    sector: Text = None
    organization: Text = None
    established_date: LooseDate = None
    general_assembly_date: LooseDate = None
    strategic_plan: Flag = False
    external_audit_date: LooseDate = None
    terms_of_election: LooseInt = None


class Executive(SourceRecord):
    FIELD_ALIASES = {
        "member_id": ("mem_id", "member_id"),
        "sex": ("sex", "member.sex", "member_data.sex", "gender"),
    }

    union_id: RecordId = None
    member_id: RecordId = None
    position: Text = None
    appointed_date: LooseDate = None
    term_length_years: LooseInt = None
    # Raw text; resolved against the member record when absent
    sex: Text = None


class CollectiveBargainingAgreement(SourceRecord):
    FIELD_ALIASES = {
        "registration_date": ("registration_date", "start_date"),
        "next_end_date": ("next_end_date", "end_date"),
        "round": ("round", "round_number"),
    }

    union_id: RecordId = None
    title: Text = None
    registration_date: LooseDate = None
    next_end_date: LooseDate = None
    duration_years: LooseInt = None
    status: Text = None
    round: Text = None


class OSHIncident(SourceRecord):
    FIELD_ALIASES = {
        "union_id": ("unionId", "union_id"),
        "occurred_at": ("dateTimeOccurred", "date_time_occurred", "occurred_at"),
        "category": ("accidentCategory", "accident_category", "category"),
        "injury_severity": ("injurySeverity", "injury_severity"),
        "damage_severity": ("damageSeverity", "damage_severity"),
        "regulatory_report_required": ("regulatoryReportRequired", "regulatory_report_required"),
    }

    union_id: RecordId = None
    occurred_at: LooseDateTime = None
    category: Text = None
    injury_severity: Text = None
    damage_severity: Text = None
    status: Text = None
    regulatory_report_required: Flag = False


class TerminatedUnion(SourceRecord):
    FIELD_ALIASES = {
        "union_id": ("union_id", "union.id", "union.union_id"),
        "name": ("name_en", "name", "union.name_en", "union.name"),
        "union_code": ("union_code", "union.union_code"),
        "sector": ("sector", "union.sector"),
        "organization": ("organization", "union.organization"),
        "established_date": ("established_date", "union.established_date"),
        "termination_reason": ("termination_reason", "reason"),
    }

    union_id: RecordId = None
    name: Text = None
    union_code: Text = None
    sector: Text = None
    organization: Text = None
    established_date: LooseDate = None
    termination_date: LooseDate = None
    termination_reason: Text = None
    notes: Text = None


SCHEMAS: Dict[str, Type[SourceRecord]] = {
    MEMBERS: Member,
    UNIONS: Union,
    EXECUTIVES: Executive,
    CBAS: CollectiveBargainingAgreement,
    INCIDENTS: OSHIncident,
    TERMINATED_UNIONS: TerminatedUnion,
}


def parse_records(kind: str, raw_records: Iterable[Any]) -> Tuple[List[SourceRecord], int]:
    """
    Validate raw records of one kind.

    Returns (records, skipped). Records that cannot be read at all are
    skipped and logged, never raised.
    """
    schema = SCHEMAS[kind]
    records: List[SourceRecord] = []
    skipped = 0
    for position, raw in enumerate(raw_records):
        try:
            records.append(schema.model_validate(raw))
        except ValidationError as e:
            skipped += 1
            logger.debug(f"Skipping {kind} record #{position}: {e.error_count()} error(s)")
    return records, skipped
