"""
Report Assembler

The fixed report catalogue. Each report is a pure function of PreparedData
and the report-local selectors, registered with @report:

    @report("cba_status", "CBA Status", requires=(CBAS,))
    def cba_status(data, selectors):
        return grouping_body(group_by(data.cbas, ...), "status")

assemble() checks the report's required entity kinds against the snapshot
failures first. A report whose input did not load is returned as an empty,
unavailable result; the other reports are unaffected.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Tuple

from .aggregation import group_by, grouping_rows
from .config import (
    ASSEMBLY_CONDUCTED,
    ASSEMBLY_NOT_CONDUCTED,
    BRACKET_ORDER,
    CBA_ONGOING,
    CBA_STATUS_ORDER,
    CBAS,
    DAMAGE_SEVERITIES,
    ELDER,
    EXECUTIVES,
    FATAL_SEVERITY,
    FEMALE,
    INCIDENT_CATEGORIES,
    INCIDENT_STATUSES,
    INCIDENTS,
    INJURY_SEVERITIES,
    MAJOR_SEVERITY,
    MALE,
    MEMBERS,
    PLAN_IN_PLACE,
    PLAN_NOT_IN_PLACE,
    SEX_ORDER,
    TERMINATED_UNIONS,
    UNIONS,
    UNKNOWN,
    YOUTH,
)
from .calculators import is_expiring_soon, is_recent, is_upcoming
from .schemas import normalize_id
from .views import CBAView, ExecutiveView, PreparedData, UnionView

if TYPE_CHECKING:
    from .pipeline import ReportSelectors

logger = logging.getLogger(__name__)


# ============================================================================
# Result types
# ============================================================================

def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@dataclass
class ReportResult:
    """One report of the catalogue, as consumed by charts, tables and export."""
    key: str
    title: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    available: bool = True
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form; dates become ISO strings."""
        return {
            "key": self.key,
            "title": self.title,
            "rows": _jsonable(self.rows),
            "total": self.total,
            "available": self.available,
            "error": self.error,
            "meta": _jsonable(self.meta),
        }


@dataclass
class ReportBody:
    rows: List[Dict[str, Any]]
    total: int
    meta: Dict[str, Any] = field(default_factory=dict)


ReportFn = Callable[[PreparedData, "ReportSelectors"], ReportBody]


@dataclass(frozen=True)
class ReportDefinition:
    key: str
    title: str
    requires: Tuple[str, ...]
    optional: Tuple[str, ...]
    build: ReportFn

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "requires": list(self.requires),
            "optional": list(self.optional),
        }


REPORT_CATALOGUE: Dict[str, ReportDefinition] = {}


def report(key: str, title: str, requires: Sequence[str], optional: Sequence[str] = ()):
    """Register a report builder in REPORT_CATALOGUE."""
    def decorator(fn: ReportFn) -> ReportFn:
        if key in REPORT_CATALOGUE:
            raise ValueError(f"Report '{key}' registered twice")
        REPORT_CATALOGUE[key] = ReportDefinition(
            key=key, title=title, requires=tuple(requires), optional=tuple(optional), build=fn
        )
        return fn
    return decorator


def assemble(definition: ReportDefinition, data: PreparedData, selectors: "ReportSelectors") -> ReportResult:
    """Build one report, degrading to 'unavailable' when a required kind failed."""
    missing = [kind for kind in definition.requires if kind in data.failures]
    if missing:
        logger.debug(f"Report {definition.key} unavailable: {', '.join(missing)} failed to load")
        return ReportResult(
            key=definition.key,
            title=definition.title,
            available=False,
            error=f"{', '.join(missing)} unavailable",
            meta={"missing": missing},
        )

    body = definition.build(data, selectors)
    meta = dict(body.meta)
    degraded = [kind for kind in definition.optional if kind in data.failures]
    if degraded:
        meta["degraded"] = degraded
    return ReportResult(key=definition.key, title=definition.title, rows=body.rows, total=body.total, meta=meta)


# ============================================================================
# Body helpers
# ============================================================================

def grouping_body(grouped: Dict[Any, int], label: str, **meta) -> ReportBody:
    return ReportBody(rows=grouping_rows(grouped, label), total=sum(grouped.values()), meta=meta)


def list_body(rows: List[Dict[str, Any]], **meta) -> ReportBody:
    return ReportBody(rows=rows, total=len(rows), meta=meta)


def metric_body(metrics: Sequence[Tuple[str, int]], total: int, **meta) -> ReportBody:
    rows = [{"metric": name, "count": count} for name, count in metrics]
    return ReportBody(rows=rows, total=total, meta=meta)


def _name_order(name: str, ident: Optional[str]):
    return (name.lower(), ident or "")


def _union_row(union: UnionView) -> Dict[str, Any]:
    return {
        "union_id": union.union_id,
        "union_name": union.union_name,
        "union_code": union.union_code,
        "sector": union.sector,
    }


def _executive_row(executive: ExecutiveView) -> Dict[str, Any]:
    return {
        "executive_id": executive.executive_id,
        "union_id": executive.union_id,
        "union_name": executive.union_name,
        "member_name": executive.member_name,
        "position": executive.position,
        "appointed_date": executive.appointed_date,
        "term_end_date": executive.term_end_date,
        "remaining_days": executive.remaining_days,
    }


def _cba_row(cba: CBAView) -> Dict[str, Any]:
    return {
        "cba_id": cba.cba_id,
        "union_id": cba.union_id,
        "union_name": cba.union_name,
        "status": cba.status,
        "registration_date": cba.registration_date,
        "next_end_date": cba.next_end_date,
        "days_until_expiry": cba.days_until_expiry,
    }


def _by_remaining_days(executives) -> List[ExecutiveView]:
    return sorted(executives, key=lambda e: (e.remaining_days, e.executive_id or ""))


def _by_days_until_expiry(cbas) -> List[CBAView]:
    return sorted(cbas, key=lambda c: (c.days_until_expiry, c.cba_id or ""))


def _sex_breakdown(items, key_fn) -> List[Dict[str, Any]]:
    """Rows {<key>, total, male, female} for a (key, sex) cross-tab."""
    totals = group_by(items, key_fn)
    male = group_by((i for i in items if i.sex == MALE), key_fn)
    female = group_by((i for i in items if i.sex == FEMALE), key_fn)
    return [
        {"key": key, "total": count, "male": male.get(key, 0), "female": female.get(key, 0)}
        for key, count in totals.items()
    ]


# ============================================================================
# Cover page / members
# ============================================================================

@report("summary", "Summary", requires=(MEMBERS, UNIONS, EXECUTIVES))
def summary(data: PreparedData, selectors) -> ReportBody:
    organizations = {u.organization for u in data.unions if u.organization != UNKNOWN}
    return metric_body(
        [
            ("members", len(data.members)),
            ("unions", len(data.unions)),
            ("executives", len(data.executives)),
            ("organizations", len(organizations)),
        ],
        total=len(data.members),
    )


@report("members_by_sex", "Members by Sex", requires=(MEMBERS,))
def members_by_sex(data: PreparedData, selectors) -> ReportBody:
    return grouping_body(group_by(data.members, lambda m: m.sex, order=SEX_ORDER), "sex")


@report("members_by_year", "Member Registrations by Year", requires=(MEMBERS,))
def members_by_year(data: PreparedData, selectors) -> ReportBody:
    dated = [m for m in data.members if m.registration_year is not None]
    rows = [
        {"year": row["key"], "total": row["total"], "male": row["male"], "female": row["female"]}
        for row in _sex_breakdown(dated, lambda m: m.registration_year)
    ]
    return ReportBody(rows=rows, total=len(dated))


@report("youth_vs_elders", "Youth vs Elders", requires=(MEMBERS,))
def youth_vs_elders(data: PreparedData, selectors) -> ReportBody:
    grouped = group_by(data.members, lambda m: m.age_bracket, order=BRACKET_ORDER)
    return grouping_body(grouped, "bracket")


@report("youth_by_sex", "Youth Members by Sex", requires=(MEMBERS,))
def youth_by_sex(data: PreparedData, selectors) -> ReportBody:
    youth = [m for m in data.members if m.age_bracket == YOUTH]
    return grouping_body(group_by(youth, lambda m: m.sex, order=SEX_ORDER), "sex")


@report("elders_by_sex", "Elder Members by Sex", requires=(MEMBERS,))
def elders_by_sex(data: PreparedData, selectors) -> ReportBody:
    elders = [m for m in data.members if m.age_bracket == ELDER]
    return grouping_body(group_by(elders, lambda m: m.sex, order=SEX_ORDER), "sex")


# ============================================================================
# Unions
# ============================================================================

@report("unions_total", "Total Unions", requires=(UNIONS,))
def unions_total(data: PreparedData, selectors) -> ReportBody:
    return metric_body([("unions", len(data.unions))], total=len(data.unions))


@report("unions_by_sector", "Unions by Sector", requires=(UNIONS,))
def unions_by_sector(data: PreparedData, selectors) -> ReportBody:
    return grouping_body(group_by(data.unions, lambda u: u.sector), "sector")


@report("unions_by_organization", "Unions by Organization", requires=(UNIONS,))
def unions_by_organization(data: PreparedData, selectors) -> ReportBody:
    return grouping_body(group_by(data.unions, lambda u: u.organization), "organization")


@report("members_by_sector", "Members by Sector", requires=(MEMBERS, UNIONS))
def members_by_sector(data: PreparedData, selectors) -> ReportBody:
    rows = [
        {"sector": row["key"], "total": row["total"], "male": row["male"], "female": row["female"]}
        for row in _sex_breakdown(data.members, lambda m: m.sector)
    ]
    return ReportBody(rows=rows, total=len(data.members))


@report("strategic_plan", "Strategic Plan", requires=(UNIONS,))
def strategic_plan(data: PreparedData, selectors) -> ReportBody:
    grouped = group_by(
        data.unions,
        lambda u: PLAN_IN_PLACE if u.strategic_plan else PLAN_NOT_IN_PLACE,
        order=(PLAN_IN_PLACE, PLAN_NOT_IN_PLACE),
    )
    return grouping_body(grouped, "status")


# ============================================================================
# Executives
# ============================================================================

@report("executives_total", "Total Executives", requires=(EXECUTIVES,))
def executives_total(data: PreparedData, selectors) -> ReportBody:
    return metric_body([("executives", len(data.executives))], total=len(data.executives))


@report("executives_by_sex", "Executives by Sex", requires=(EXECUTIVES,), optional=(MEMBERS,))
def executives_by_sex(data: PreparedData, selectors) -> ReportBody:
    return grouping_body(group_by(data.executives, lambda e: e.sex, order=SEX_ORDER), "sex")


@report("executive_remaining_days", "Executive Remaining Days", requires=(EXECUTIVES,), optional=(MEMBERS,))
def executive_remaining_days(data: PreparedData, selectors) -> ReportBody:
    with_term = [e for e in data.executives if e.remaining_days is not None]
    return list_body([_executive_row(e) for e in _by_remaining_days(with_term)])


@report("executives_expiring_before", "Executives Expiring Before Date", requires=(EXECUTIVES,), optional=(MEMBERS,))
def executives_expiring_before(data: PreparedData, selectors) -> ReportBody:
    cutoff = selectors.executive_expiry_date or data.today
    expiring = [
        e for e in data.executives
        if e.term_end_date is not None and e.term_end_date <= cutoff
    ]
    return list_body([_executive_row(e) for e in _by_remaining_days(expiring)], cutoff=cutoff)


@report("executives_by_union", "Executives of Union by Sex", requires=(EXECUTIVES,), optional=(MEMBERS,))
def executives_by_union(data: PreparedData, selectors) -> ReportBody:
    union_id = normalize_id(selectors.union_id)
    if union_id is None:
        return ReportBody(rows=[], total=0, meta={"union_id": None})
    executives = [e for e in data.executives if normalize_id(e.union_id) == union_id]
    union_name = data.union_names.get(union_id, UNKNOWN)
    grouped = group_by(executives, lambda e: e.sex, order=SEX_ORDER)
    return grouping_body(grouped, "sex", union_id=union_id, union_name=union_name)


# ============================================================================
# Collective bargaining agreements
# ============================================================================

@report("unions_with_cba", "Unions with CBA", requires=(CBAS,))
def unions_with_cba(data: PreparedData, selectors) -> ReportBody:
    counts: Dict[str, int] = {}
    names: Dict[str, str] = {}
    for cba in data.cbas:
        union_id = normalize_id(cba.union_id)
        if union_id is None:
            continue
        counts[union_id] = counts.get(union_id, 0) + 1
        names.setdefault(union_id, cba.union_name)
    rows = [
        {"union_id": union_id, "union_name": names[union_id], "cba_count": counts[union_id]}
        for union_id in sorted(counts, key=lambda u: _name_order(names[u], u))
    ]
    return list_body(rows)


@report("cba_status", "CBA Status", requires=(CBAS,))
def cba_status(data: PreparedData, selectors) -> ReportBody:
    return grouping_body(group_by(data.cbas, lambda c: c.status, order=CBA_STATUS_ORDER), "status")


@report("cba_expired", "Expired CBAs", requires=(CBAS,))
def cba_expired(data: PreparedData, selectors) -> ReportBody:
    expired = [c for c in data.cbas if c.days_until_expiry is not None and c.days_until_expiry < 0]
    return list_body([_cba_row(c) for c in _by_days_until_expiry(expired)])


@report("unions_without_cba", "Unions without CBA", requires=(UNIONS, CBAS))
def unions_without_cba(data: PreparedData, selectors) -> ReportBody:
    without = [u for u in data.unions if normalize_id(u.union_id) not in data.cba_union_ids]
    without.sort(key=lambda u: _name_order(u.union_name, u.union_id))
    return list_body([_union_row(u) for u in without])


@report("cba_expiring_soon", "CBAs Expiring Soon", requires=(CBAS,))
def cba_expiring_soon(data: PreparedData, selectors) -> ReportBody:
    window = selectors.cba_expiring_days
    expiring = [c for c in data.cbas if is_expiring_soon(c.days_until_expiry, window)]
    return list_body([_cba_row(c) for c in _by_days_until_expiry(expiring)], window_days=window)


@report("cba_ongoing", "Ongoing CBAs", requires=(CBAS,))
def cba_ongoing(data: PreparedData, selectors) -> ReportBody:
    ongoing = [c for c in data.cbas if c.status == CBA_ONGOING]
    ongoing.sort(key=lambda c: _name_order(c.union_name, c.cba_id))
    return list_body([_cba_row(c) for c in ongoing])


# ============================================================================
# General assemblies
# ============================================================================

def _assembly_row(union: UnionView) -> Dict[str, Any]:
    return {
        "union_id": union.union_id,
        "union_name": union.union_name,
        "general_assembly_date": union.general_assembly_date,
        "days_until": union.assembly_days_until,
        "days_since": union.assembly_days_since,
    }


@report("assembly_status", "General Assembly Status", requires=(UNIONS,))
def assembly_status(data: PreparedData, selectors) -> ReportBody:
    grouped = group_by(
        data.unions,
        lambda u: ASSEMBLY_CONDUCTED if u.has_assembly else ASSEMBLY_NOT_CONDUCTED,
        order=(ASSEMBLY_CONDUCTED, ASSEMBLY_NOT_CONDUCTED),
    )
    return grouping_body(grouped, "status")


@report("unions_with_assembly", "Unions with General Assembly", requires=(UNIONS,))
def unions_with_assembly(data: PreparedData, selectors) -> ReportBody:
    held = sorted(
        (u for u in data.unions if u.has_assembly),
        key=lambda u: _name_order(u.union_name, u.union_id),
    )
    return list_body([_assembly_row(u) for u in held])


@report("unions_without_assembly", "Unions without General Assembly", requires=(UNIONS,))
def unions_without_assembly(data: PreparedData, selectors) -> ReportBody:
    missing = sorted(
        (u for u in data.unions if not u.has_assembly),
        key=lambda u: _name_order(u.union_name, u.union_id),
    )
    return list_body([_union_row(u) for u in missing])


@report("recent_assemblies", "Recent General Assemblies", requires=(UNIONS,))
def recent_assemblies(data: PreparedData, selectors) -> ReportBody:
    window = selectors.assembly_recent_days
    recent = sorted(
        (u for u in data.unions if is_recent(u.assembly_days_since, window)),
        key=lambda u: (u.assembly_days_since, u.union_id or ""),
    )
    return list_body([_assembly_row(u) for u in recent], window_days=window)


@report("upcoming_assemblies", "Upcoming General Assemblies", requires=(UNIONS,))
def upcoming_assemblies(data: PreparedData, selectors) -> ReportBody:
    window = selectors.assembly_upcoming_days
    upcoming = sorted(
        (u for u in data.unions if is_upcoming(u.assembly_days_until, window)),
        key=lambda u: (u.assembly_days_until, u.union_id or ""),
    )
    return list_body([_assembly_row(u) for u in upcoming], window_days=window)


# ============================================================================
# Terminated unions
# ============================================================================

@report("terminated_unions", "Terminated Unions", requires=(TERMINATED_UNIONS,))
def terminated_unions(data: PreparedData, selectors) -> ReportBody:
    dated = sorted(
        (t for t in data.terminated if t.termination_date is not None),
        key=lambda t: (t.termination_date, t.union_id or ""),
        reverse=True,
    )
    undated = [t for t in data.terminated if t.termination_date is None]
    rows = [
        {
            "union_id": t.union_id,
            "union_name": t.union_name,
            "union_code": t.union_code,
            "sector": t.sector,
            "termination_date": t.termination_date,
            "termination_reason": t.termination_reason,
        }
        for t in dated + undated
    ]
    return list_body(rows)


@report("terminated_by_reason", "Terminated Unions by Reason", requires=(TERMINATED_UNIONS,))
def terminated_by_reason(data: PreparedData, selectors) -> ReportBody:
    return grouping_body(group_by(data.terminated, lambda t: t.termination_reason), "reason")


# ============================================================================
# Occupational safety and health
# ============================================================================

@report("osh_summary", "OSH Summary", requires=(INCIDENTS,))
def osh_summary(data: PreparedData, selectors) -> ReportBody:
    incidents = data.incidents
    return metric_body(
        [
            ("incidents", len(incidents)),
            ("fatal", sum(1 for i in incidents if i.injury_severity == FATAL_SEVERITY)),
            ("major", sum(1 for i in incidents if i.injury_severity == MAJOR_SEVERITY)),
            ("regulatory_report_required", sum(1 for i in incidents if i.regulatory_report_required)),
        ],
        total=len(incidents),
    )


@report("osh_by_category", "Incidents by Category", requires=(INCIDENTS,))
def osh_by_category(data: PreparedData, selectors) -> ReportBody:
    grouped = group_by(data.incidents, lambda i: i.category, order=INCIDENT_CATEGORIES)
    return grouping_body(grouped, "category")


@report("osh_by_severity", "Incidents by Injury Severity", requires=(INCIDENTS,))
def osh_by_severity(data: PreparedData, selectors) -> ReportBody:
    grouped = group_by(data.incidents, lambda i: i.injury_severity, order=INJURY_SEVERITIES)
    return grouping_body(grouped, "severity")


@report("osh_by_damage", "Incidents by Damage Severity", requires=(INCIDENTS,))
def osh_by_damage(data: PreparedData, selectors) -> ReportBody:
    grouped = group_by(data.incidents, lambda i: i.damage_severity, order=DAMAGE_SEVERITIES)
    return grouping_body(grouped, "severity")


@report("osh_by_status", "Incidents by Status", requires=(INCIDENTS,))
def osh_by_status(data: PreparedData, selectors) -> ReportBody:
    grouped = group_by(data.incidents, lambda i: i.status, order=INCIDENT_STATUSES)
    return grouping_body(grouped, "status")


def catalogue() -> List[Dict[str, Any]]:
    """[{key, title, requires, optional}] in catalogue order."""
    return [definition.to_dict() for definition in REPORT_CATALOGUE.values()]
