"""
Classified per-record views.

prepare() runs the upstream half of the pipeline exactly once per
generation:

    filter (DateRange)  ->  resolve (CrossReference)  ->  classify (calculators)

The counted entity of every report is date-filtered here. Reference data
joined onto it (a member's union sector, an executive's member sex, whether a
union has any CBA) is resolved against the whole snapshot, so a narrow date
window never turns a known union into "Unknown".

Assemblers only ever read PreparedData; they never filter or classify again.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, List, Optional, Tuple

from .calculators import (
    age_bracket,
    canonical_cba_status,
    damage_severity_bucket,
    days_since,
    days_until,
    incident_category,
    incident_status,
    injury_severity_bucket,
    normalize_sex,
    term_end_date,
)
from .config import CBAS, EXECUTIVES, INCIDENTS, MEMBERS, TERMINATED_UNIONS, UNIONS, UNKNOWN
from .date_filter import DateRange, filter_records
from .repository import Snapshot
from .resolver import CrossReference, union_display_name
from .schemas import (
    CollectiveBargainingAgreement,
    Executive,
    Member,
    OSHIncident,
    TerminatedUnion,
    Union,
    normalize_id,
)


# ============================================================================
# View records
# ============================================================================

@dataclass(frozen=True)
class MemberView:
    member_id: Optional[str]
    union_id: Optional[str]
    sex: str
    age_bracket: Optional[str]
    registration_year: Optional[int]
    sector: str


@dataclass(frozen=True)
class UnionView:
    union_id: Optional[str]
    union_name: str
    union_code: Optional[str]
    sector: str
    organization: str
    strategic_plan: bool
    general_assembly_date: Optional[date]
    assembly_days_until: Optional[int]

    @property
    def assembly_days_since(self) -> Optional[int]:
        if self.assembly_days_until is None:
            return None
        return -self.assembly_days_until

    @property
    def has_assembly(self) -> bool:
        return self.general_assembly_date is not None


@dataclass(frozen=True)
class ExecutiveView:
    executive_id: Optional[str]
    union_id: Optional[str]
    union_name: str
    member_id: Optional[str]
    member_name: str
    position: Optional[str]
    sex: str
    appointed_date: Optional[date]
    term_end_date: Optional[date]
    remaining_days: Optional[int]


@dataclass(frozen=True)
class CBAView:
    cba_id: Optional[str]
    union_id: Optional[str]
    union_name: str
    status: str
    registration_date: Optional[date]
    next_end_date: Optional[date]
    days_until_expiry: Optional[int]


@dataclass(frozen=True)
class IncidentView:
    incident_id: Optional[str]
    union_id: Optional[str]
    category: str
    injury_severity: str
    damage_severity: str
    status: str
    regulatory_report_required: bool


@dataclass(frozen=True)
class TerminatedView:
    union_id: Optional[str]
    union_name: str
    union_code: Optional[str]
    sector: str
    termination_date: Optional[date]
    termination_reason: str


@dataclass(frozen=True)
class PreparedData:
    """Everything the assemblers read for one (date range, today) pair."""
    today: date
    date_range: DateRange
    members: Tuple[MemberView, ...] = ()
    unions: Tuple[UnionView, ...] = ()
    executives: Tuple[ExecutiveView, ...] = ()
    cbas: Tuple[CBAView, ...] = ()
    incidents: Tuple[IncidentView, ...] = ()
    terminated: Tuple[TerminatedView, ...] = ()
    # Unions holding at least one CBA anywhere in the snapshot
    cba_union_ids: FrozenSet[str] = frozenset()
    # Display name per union id, over the whole snapshot
    union_names: Dict[str, str] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)


# ============================================================================
# Classification
# ============================================================================

def member_view(member: Member, xref: CrossReference, today: date) -> MemberView:
    registered = member.registration_date
    return MemberView(
        member_id=member.id,
        union_id=member.union_id,
        sex=member.sex,
        age_bracket=age_bracket(member.birth_date, today),
        registration_year=registered.year if registered else None,
        sector=xref.union_sector(member.union_id),
    )


def union_view(union: Union, xref: CrossReference, today: date) -> UnionView:
    return UnionView(
        union_id=union.id,
        union_name=union_display_name(union),
        union_code=union.union_code,
        sector=union.sector or UNKNOWN,
        organization=union.organization or UNKNOWN,
        strategic_plan=union.strategic_plan,
        general_assembly_date=union.general_assembly_date,
        assembly_days_until=days_until(union.general_assembly_date, today),
    )


def resolve_executive_sex(executive: Executive, xref: CrossReference) -> str:
    """The executive's own sex when readable, else the linked member's."""
    own = normalize_sex(executive.sex)
    if own != UNKNOWN:
        return own
    return xref.member_sex(executive.member_id)


def executive_view(executive: Executive, xref: CrossReference, today: date) -> ExecutiveView:
    term_end = term_end_date(executive.appointed_date, executive.term_length_years)
    return ExecutiveView(
        executive_id=executive.id,
        union_id=executive.union_id,
        union_name=xref.union_name(executive.union_id),
        member_id=executive.member_id,
        member_name=xref.member_name(executive.member_id),
        position=executive.position,
        sex=resolve_executive_sex(executive, xref),
        appointed_date=executive.appointed_date,
        term_end_date=term_end,
        remaining_days=days_until(term_end, today),
    )


def cba_view(cba: CollectiveBargainingAgreement, xref: CrossReference, today: date) -> CBAView:
    return CBAView(
        cba_id=cba.id,
        union_id=cba.union_id,
        union_name=xref.union_name(cba.union_id),
        status=canonical_cba_status(cba.status, cba.registration_date, cba.next_end_date, today),
        registration_date=cba.registration_date,
        next_end_date=cba.next_end_date,
        days_until_expiry=days_until(cba.next_end_date, today),
    )


def incident_view(incident: OSHIncident) -> IncidentView:
    return IncidentView(
        incident_id=incident.id,
        union_id=incident.union_id,
        category=incident_category(incident.category),
        injury_severity=injury_severity_bucket(incident.injury_severity),
        damage_severity=damage_severity_bucket(incident.damage_severity),
        status=incident_status(incident.status),
        regulatory_report_required=incident.regulatory_report_required,
    )


def terminated_view(record: TerminatedUnion, xref: CrossReference) -> TerminatedView:
    # The archived snapshot is authoritative; the live union only fills gaps
    name = record.name or record.union_code
    if not name and record.union_id is not None:
        name = xref.union_name(record.union_id)
    return TerminatedView(
        union_id=record.union_id,
        union_name=name or UNKNOWN,
        union_code=record.union_code,
        sector=record.sector or UNKNOWN,
        termination_date=record.termination_date,
        termination_reason=record.termination_reason or UNKNOWN,
    )


# ============================================================================
# Prepare
# ============================================================================

def prepare(snapshot: Snapshot, date_range: DateRange, today: date) -> PreparedData:
    """Filter, resolve and classify a snapshot for one generation."""
    all_unions = snapshot.get(UNIONS)
    all_members = snapshot.get(MEMBERS)
    all_cbas = snapshot.get(CBAS)
    xref = CrossReference.build(all_unions, all_members)

    def counted(kind: str) -> List:
        return list(filter_records(snapshot.get(kind), kind, date_range))

    cba_union_ids = frozenset(
        key for key in (normalize_id(cba.union_id) for cba in all_cbas) if key is not None
    )

    return PreparedData(
        today=today,
        date_range=date_range,
        members=tuple(member_view(m, xref, today) for m in counted(MEMBERS)),
        unions=tuple(union_view(u, xref, today) for u in counted(UNIONS)),
        executives=tuple(executive_view(e, xref, today) for e in counted(EXECUTIVES)),
        cbas=tuple(cba_view(c, xref, today) for c in counted(CBAS)),
        incidents=tuple(incident_view(i) for i in counted(INCIDENTS)),
        terminated=tuple(terminated_view(t, xref) for t in counted(TERMINATED_UNIONS)),
        cba_union_ids=cba_union_ids,
        union_names={key: union_display_name(union) for key, union in xref.unions.index.items()},
        failures=dict(snapshot.failures),
    )
