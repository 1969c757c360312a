"""
Shared test fixtures for the union reporting test suite.

All tests run against an in-memory snapshot; no network or data source is
needed. "Today" is fixed at 2024-07-01 so that day arithmetic is stable.
"""
import sys
import os
import copy
from datetime import date

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Never reach a real data source from the test suite
os.environ["SOURCE_API_URL"] = "http://source.invalid"
os.environ["SOURCE_DATA_DIR"] = ""

from starlette.testclient import TestClient  # noqa: E402

from api.main import app  # noqa: E402
from api.dependencies import get_repository  # noqa: E402
from api.helpers import get_today  # noqa: E402
from reporting import FilterContext, ReportPipeline, StaticRepository  # noqa: E402

TODAY = date(2024, 7, 1)

RAW_RECORDS = {
    "unions": [
        {"id": 1, "name_en": "Metal Workers Union", "union_code": "MWU", "sector": "Manufacturing",
         "organization": "Confederation A", "established_date": "2010-05-01",
         "general_assembly_date": "2024-06-21", "strategic_plan_in_place": True},
        {"id": "2", "name_en": "Teachers Union", "union_code": "TU", "sector": "Education",
         "organization": "Confederation A", "established_date": "2015-03-10",
         "general_assembly_date": "2024-07-11T00:00:00.000Z", "strategic_plan_in_place": "no"},
        {"union_id": 3, "name": "Transport Union", "sector": None, "organization": "Confederation B",
         "established_date": "2023-02-01"},
    ],
    "members": [
        # exactly 35 today -> elder
        {"mem_id": 10, "union_id": 1, "sex": "M", "birthdate": "1989-07-01", "registry_date": "2023-03-15"},
        # one day short of 35 -> youth
        {"mem_id": 11, "union_id": "1", "sex": "female", "birthdate": "1989-07-02", "registry_date": "2024-02-01"},
        {"id": 12, "union_id": 2, "gender": "F", "birth_date": "1970-01-01", "created_at": "2024-05-20T10:00:00Z"},
        # dangling union, no sex, no birth date
        {"mem_id": 13, "union_id": 99, "sex": "", "birthdate": None, "registry_date": "2022-11-30"},
    ],
    "executives": [
        {"id": 100, "union_id": 1, "mem_id": 10, "position": "Chairperson",
         "appointed_date": "2023-01-01", "term_length_years": 2},
        {"id": 101, "union_id": 1, "member_id": 11, "position": "Secretary",
         "appointed_date": "2020-03-01", "term_length_years": "3", "sex": "Female"},
        {"id": 102, "union_id": 2, "member_id": 404, "position": "Treasurer",
         "appointed_date": "2024-02-29", "term_length_years": None},
    ],
    "cbas": [
        # ended 80 days ago
        {"id": 200, "union_id": 1, "registration_date": "2022-01-01", "next_end_date": "2024-04-12",
         "status": "Signed"},
        {"id": 201, "union_id": 1, "start_date": "2023-01-01", "end_date": "2025-01-01", "status": "ongoing"},
        # ended 95 days ago
        {"id": 202, "union_id": 2, "registration_date": "2021-01-01", "next_end_date": "2024-03-28",
         "status": "not-signed"},
    ],
    "incidents": [
        {"id": 300, "unionId": 1, "dateTimeOccurred": "2024-03-05T08:30:00Z", "accidentCategory": "People",
         "injurySeverity": "Fatality", "damageSeverity": "Major", "status": "closed",
         "regulatoryReportRequired": True},
        {"id": 301, "union_id": 2, "date_time_occurred": "2023-11-20 14:00:00", "accident_category": "property",
         "injury_severity": "near miss", "damage_severity": "minor", "status": "Under investigation",
         "regulatory_report_required": "false"},
        {"id": 302, "unionId": 1, "dateTimeOccurred": "not a date", "accidentCategory": "Weather",
         "injurySeverity": "bruise", "status": "open"},
    ],
    "terminated_unions": [
        {"id": 400, "union": {"id": 5, "name_en": "Textile Union", "union_code": "TXU", "sector": "Manufacturing"},
         "termination_date": "2023-08-15", "termination_reason": "Merger"},
        {"id": 401, "union_id": 6, "name": "Dock Workers", "termination_date": "2024-01-10", "reason": "Dissolved"},
    ],
}


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def raw_records():
    """Fresh deep copy of the sample source collections."""
    return copy.deepcopy(RAW_RECORDS)


@pytest.fixture
def repository(raw_records):
    return StaticRepository(raw_records)


@pytest.fixture
def snapshot(repository):
    return repository.fetch_snapshot()


@pytest.fixture
def pipeline(snapshot):
    return ReportPipeline(snapshot)


@pytest.fixture
def context():
    """All-time context at the fixed reference date."""
    return FilterContext.create(today=TODAY)


@pytest.fixture(scope="session")
def client():
    """Test client reading the sample snapshot at the fixed reference date."""
    app.dependency_overrides[get_repository] = lambda: StaticRepository(copy.deepcopy(RAW_RECORDS))
    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
