"""
Reporting Configuration

Entity kinds, source endpoints, classification thresholds and the fixed
vocabularies used by the derived-status calculators.
"""

from typing import Dict, Tuple


# ============================================================================
# ENTITY KINDS
# ============================================================================

MEMBERS = "members"
UNIONS = "unions"
EXECUTIVES = "executives"
CBAS = "cbas"
INCIDENTS = "incidents"
TERMINATED_UNIONS = "terminated_unions"

ENTITY_KINDS: Tuple[str, ...] = (
    MEMBERS,
    UNIONS,
    EXECUTIVES,
    CBAS,
    INCIDENTS,
    TERMINATED_UNIONS,
)

# Read endpoint per entity kind on the data-access layer
ENTITY_ENDPOINTS: Dict[str, str] = {
    MEMBERS: "/api/members",
    UNIONS: "/api/unions",
    EXECUTIVES: "/api/union-executives",
    CBAS: "/api/cbas",
    INCIDENTS: "/api/osh-incidents",
    TERMINATED_UNIONS: "/api/terminated-unions",
}

# Date field(s) each kind is filtered on. A record matches when ANY listed
# field falls inside the active range.
ENTITY_DATE_FIELDS: Dict[str, Tuple[str, ...]] = {
    MEMBERS: ("registration_date",),
    EXECUTIVES: ("appointed_date",),
    CBAS: ("registration_date",),
    UNIONS: ("established_date", "general_assembly_date"),
    INCIDENTS: ("occurred_at",),
    TERMINATED_UNIONS: ("termination_date",),
}


# ============================================================================
# THRESHOLDS
# ============================================================================

AGE_BRACKET_BOUNDARY = 35
DEFAULT_CBA_EXPIRING_DAYS = 90
DEFAULT_ASSEMBLY_RECENT_DAYS = 90
DEFAULT_ASSEMBLY_UPCOMING_DAYS = 30
PERCENT_PLACES = 1


# ============================================================================
# LABELS
# ============================================================================

UNKNOWN = "Unknown"

MALE = "Male"
FEMALE = "Female"
SEX_ORDER = (MALE, FEMALE, UNKNOWN)

YOUTH = "youth"
ELDER = "elder"
BRACKET_ORDER = (YOUTH, ELDER)

CBA_SIGNED = "Signed"
CBA_ONGOING = "Ongoing"
CBA_NOT_SIGNED = "Not-Signed"
CBA_STATUS_ORDER = (CBA_SIGNED, CBA_ONGOING, CBA_NOT_SIGNED)

# Raw status text (lowercased) -> canonical status
CBA_STATUS_ALIASES: Dict[str, str] = {
    "signed": CBA_SIGNED,
    "pending": CBA_SIGNED,
    "ongoing": CBA_ONGOING,
    "active": CBA_ONGOING,
    "not-signed": CBA_NOT_SIGNED,
    "notsigned": CBA_NOT_SIGNED,
    "not_signed": CBA_NOT_SIGNED,
    "expired": CBA_NOT_SIGNED,
}

PLAN_IN_PLACE = "In place"
PLAN_NOT_IN_PLACE = "Not in place"

ASSEMBLY_CONDUCTED = "Conducted"
ASSEMBLY_NOT_CONDUCTED = "Not conducted"


# ============================================================================
# OSH VOCABULARIES
# ============================================================================

INJURY_SEVERITIES = (
    "None",
    "Near-Miss",
    "First Aid Case (FAC)",
    "Medical Treatment Case (MTC)",
    "Restricted Work Case (RWC)",
    "Permanent Disability/Major Injury",
    "Fatality",
)

INJURY_SEVERITY_ALIASES: Dict[str, str] = {
    "near miss": "Near-Miss",
    "nearmiss": "Near-Miss",
    "fac": "First Aid Case (FAC)",
    "first aid": "First Aid Case (FAC)",
    "mtc": "Medical Treatment Case (MTC)",
    "medical treatment": "Medical Treatment Case (MTC)",
    "rwc": "Restricted Work Case (RWC)",
    "restricted work": "Restricted Work Case (RWC)",
    "major": "Permanent Disability/Major Injury",
    "major injury": "Permanent Disability/Major Injury",
    "permanent disability": "Permanent Disability/Major Injury",
    "fatal": "Fatality",
}

FATAL_SEVERITY = "Fatality"
MAJOR_SEVERITY = "Permanent Disability/Major Injury"

DAMAGE_SEVERITIES = ("None", "Minor", "Moderate", "Major", "Severe/Critical")

DAMAGE_SEVERITY_ALIASES: Dict[str, str] = {
    "severe": "Severe/Critical",
    "critical": "Severe/Critical",
}

INCIDENT_CATEGORIES = ("People", "Property", "Environment", "Process")

INCIDENT_STATUSES = ("open", "investigating", "closed")

INCIDENT_STATUS_ALIASES: Dict[str, str] = {
    "under investigation": "investigating",
}
