"""
Report catalogue tests against the sample snapshot (today = 2024-07-01).

Each class covers one catalogue section; expected values are worked out from
the records in conftest.RAW_RECORDS.

Run with: py -m pytest tests/test_reports.py -v
"""
from datetime import date

import pytest

from reporting import FilterContext, REPORT_CATALOGUE
from reporting.config import ENTITY_KINDS


def rows_by(result, label):
    return {row[label]: row for row in result.rows}


def counts(result, label):
    return {row[label]: row["count"] for row in result.rows}


# ============================================================================
# A. CATALOGUE SHAPE
# ============================================================================

class TestCatalogueShape:

    def test_every_report_has_rows_and_total(self, pipeline, context):
        results = pipeline.generate(context)
        assert list(results) == list(REPORT_CATALOGUE)
        for key, result in results.items():
            assert result.available, key
            assert isinstance(result.rows, list)
            assert result.total >= 0

    def test_groupings_sum_to_total(self, pipeline, context):
        for key, result in pipeline.generate(context).items():
            if not result.rows or "percentage" not in result.rows[0]:
                continue
            assert sum(r["count"] for r in result.rows) == result.total, key
            if result.total:
                assert sum(r["percentage"] for r in result.rows) == pytest.approx(100.0, abs=0.5), key
            else:
                assert all(r["percentage"] == 0.0 for r in result.rows), key

    def test_requires_only_known_kinds(self):
        for definition in REPORT_CATALOGUE.values():
            assert set(definition.requires) <= set(ENTITY_KINDS)
            assert set(definition.optional) <= set(ENTITY_KINDS)


# ============================================================================
# B. MEMBERS
# ============================================================================

class TestMemberReports:

    def test_summary(self, pipeline, context):
        result = pipeline.report("summary", context)
        assert counts(result, "metric") == {"members": 4, "unions": 3, "executives": 3, "organizations": 2}

    def test_members_by_sex(self, pipeline, context):
        result = pipeline.report("members_by_sex", context)
        assert [r["sex"] for r in result.rows] == ["Male", "Female", "Unknown"]
        assert counts(result, "sex") == {"Male": 1, "Female": 2, "Unknown": 1}
        assert rows_by(result, "sex")["Female"]["percentage"] == 50.0

    def test_youth_vs_elders_excludes_undated(self, pipeline, context):
        result = pipeline.report("youth_vs_elders", context)
        assert counts(result, "bracket") == {"youth": 1, "elder": 2}
        assert result.total == 3

    def test_bracket_by_sex(self, pipeline, context):
        assert counts(pipeline.report("youth_by_sex", context), "sex") == {"Male": 0, "Female": 1, "Unknown": 0}
        assert counts(pipeline.report("elders_by_sex", context), "sex") == {"Male": 1, "Female": 1, "Unknown": 0}

    def test_members_by_year(self, pipeline, context):
        result = pipeline.report("members_by_year", context)
        assert result.rows == [
            {"year": 2022, "total": 1, "male": 0, "female": 0},
            {"year": 2023, "total": 1, "male": 1, "female": 0},
            {"year": 2024, "total": 2, "male": 0, "female": 2},
        ]
        assert result.total == 4

    def test_members_by_sector_joins_union(self, pipeline, context):
        result = pipeline.report("members_by_sector", context)
        sectors = rows_by(result, "sector")
        assert list(sectors) == ["Education", "Manufacturing", "Unknown"]
        assert sectors["Manufacturing"] == {"sector": "Manufacturing", "total": 2, "male": 1, "female": 1}
        assert sectors["Unknown"]["total"] == 1


# ============================================================================
# C. UNIONS
# ============================================================================

class TestUnionReports:

    def test_unions_total(self, pipeline, context):
        result = pipeline.report("unions_total", context)
        assert result.total == 3
        assert result.rows == [{"metric": "unions", "count": 3}]

    def test_by_sector_and_organization(self, pipeline, context):
        assert counts(pipeline.report("unions_by_sector", context), "sector") == {
            "Education": 1, "Manufacturing": 1, "Unknown": 1,
        }
        assert counts(pipeline.report("unions_by_organization", context), "organization") == {
            "Confederation A": 2, "Confederation B": 1,
        }

    def test_strategic_plan(self, pipeline, context):
        result = pipeline.report("strategic_plan", context)
        assert counts(result, "status") == {"In place": 1, "Not in place": 2}
        assert rows_by(result, "status")["Not in place"]["percentage"] == 66.7


# ============================================================================
# D. EXECUTIVES
# ============================================================================

class TestExecutiveReports:

    def test_executives_by_sex_resolves_member(self, pipeline, context):
        result = pipeline.report("executives_by_sex", context)
        assert counts(result, "sex") == {"Male": 1, "Female": 1, "Unknown": 1}

    def test_remaining_days(self, pipeline, context):
        result = pipeline.report("executive_remaining_days", context)
        assert [r["executive_id"] for r in result.rows] == ["101", "100"]
        chair = result.rows[1]
        assert chair["term_end_date"] == date(2025, 1, 1)
        assert chair["remaining_days"] == 184
        assert chair["member_name"] == "Unknown"
        assert chair["union_name"] == "Metal Workers Union"
        assert result.rows[0]["remaining_days"] == -488
        assert result.total == 2

    def test_expiring_before_defaults_to_today(self, pipeline, context):
        result = pipeline.report("executives_expiring_before", context)
        assert [r["executive_id"] for r in result.rows] == ["101"]
        assert result.meta["cutoff"] == date(2024, 7, 1)

    def test_expiring_before_cutoff_inclusive(self, pipeline):
        context = FilterContext.create(today=date(2024, 7, 1), executive_expiry_date=date(2025, 1, 1))
        result = pipeline.report("executives_expiring_before", context)
        assert [r["executive_id"] for r in result.rows] == ["101", "100"]

    def test_executives_by_union(self, pipeline):
        context = FilterContext.create(today=date(2024, 7, 1), union_id=1)
        result = pipeline.report("executives_by_union", context)
        assert counts(result, "sex") == {"Male": 1, "Female": 1, "Unknown": 0}
        assert result.meta["union_name"] == "Metal Workers Union"

    def test_executives_by_union_with_no_executives(self, pipeline):
        context = FilterContext.create(today=date(2024, 7, 1), union_id=3)
        result = pipeline.report("executives_by_union", context)
        assert result.total == 0
        assert result.meta["union_name"] == "Transport Union"

    def test_executives_by_union_without_selection(self, pipeline, context):
        result = pipeline.report("executives_by_union", context)
        assert result.rows == []
        assert result.total == 0


# ============================================================================
# E. CBAs
# ============================================================================

class TestCbaReports:

    def test_status_three_way(self, pipeline, context):
        result = pipeline.report("cba_status", context)
        assert [(r["status"], r["count"], r["percentage"]) for r in result.rows] == [
            ("Signed", 1, 33.3),
            ("Ongoing", 1, 33.3),
            ("Not-Signed", 1, 33.3),
        ]

    def test_unions_with_cba(self, pipeline, context):
        result = pipeline.report("unions_with_cba", context)
        assert result.rows == [
            {"union_id": "1", "union_name": "Metal Workers Union", "cba_count": 2},
            {"union_id": "2", "union_name": "Teachers Union", "cba_count": 1},
        ]

    def test_unions_without_cba(self, pipeline, context):
        result = pipeline.report("unions_without_cba", context)
        assert [r["union_name"] for r in result.rows] == ["Transport Union"]

    def test_expired(self, pipeline, context):
        result = pipeline.report("cba_expired", context)
        assert [(r["cba_id"], r["days_until_expiry"]) for r in result.rows] == [("202", -95), ("200", -80)]

    def test_expiring_soon_window(self, pipeline, context):
        result = pipeline.report("cba_expiring_soon", context)
        assert [r["cba_id"] for r in result.rows] == ["200"]
        assert result.meta["window_days"] == 90

    def test_expiring_soon_wider_window(self, pipeline):
        context = FilterContext.create(today=date(2024, 7, 1), cba_expiring_days=200)
        result = pipeline.report("cba_expiring_soon", context)
        assert [r["cba_id"] for r in result.rows] == ["202", "200", "201"]

    def test_ongoing(self, pipeline, context):
        result = pipeline.report("cba_ongoing", context)
        assert [r["cba_id"] for r in result.rows] == ["201"]


# ============================================================================
# F. ASSEMBLIES
# ============================================================================

class TestAssemblyReports:

    def test_status(self, pipeline, context):
        result = pipeline.report("assembly_status", context)
        assert counts(result, "status") == {"Conducted": 2, "Not conducted": 1}

    def test_with_and_without(self, pipeline, context):
        held = pipeline.report("unions_with_assembly", context)
        assert [r["union_name"] for r in held.rows] == ["Metal Workers Union", "Teachers Union"]
        missing = pipeline.report("unions_without_assembly", context)
        assert [r["union_name"] for r in missing.rows] == ["Transport Union"]

    def test_recent_is_past_only(self, pipeline, context):
        result = pipeline.report("recent_assemblies", context)
        assert [(r["union_id"], r["days_since"]) for r in result.rows] == [("1", 10)]

    def test_upcoming_is_future_only(self, pipeline, context):
        result = pipeline.report("upcoming_assemblies", context)
        assert [(r["union_id"], r["days_until"]) for r in result.rows] == [("2", 10)]


# ============================================================================
# G. TERMINATED UNIONS / OSH
# ============================================================================

class TestTerminatedReports:

    def test_newest_first(self, pipeline, context):
        result = pipeline.report("terminated_unions", context)
        assert [(r["union_id"], r["union_name"]) for r in result.rows] == [
            ("6", "Dock Workers"),
            ("5", "Textile Union"),
        ]
        assert result.rows[1]["sector"] == "Manufacturing"

    def test_by_reason(self, pipeline, context):
        assert counts(pipeline.report("terminated_by_reason", context), "reason") == {
            "Dissolved": 1, "Merger": 1,
        }


class TestOshReports:

    def test_summary(self, pipeline, context):
        result = pipeline.report("osh_summary", context)
        assert counts(result, "metric") == {
            "incidents": 3, "fatal": 1, "major": 0, "regulatory_report_required": 1,
        }
        assert result.total == 3

    def test_by_severity_vocabulary_order(self, pipeline, context):
        result = pipeline.report("osh_by_severity", context)
        keys = [r["severity"] for r in result.rows]
        assert keys[0] == "None"
        assert keys[-1] == "Unknown"
        grouped = counts(result, "severity")
        assert grouped["Fatality"] == 1
        assert grouped["Near-Miss"] == 1
        assert grouped["Unknown"] == 1
        assert result.total == 3

    def test_by_category(self, pipeline, context):
        assert counts(pipeline.report("osh_by_category", context), "category") == {
            "People": 1, "Property": 1, "Environment": 0, "Process": 0, "Unknown": 1,
        }

    def test_by_damage_missing_is_unknown(self, pipeline, context):
        grouped = counts(pipeline.report("osh_by_damage", context), "severity")
        assert grouped["Minor"] == 1
        assert grouped["Major"] == 1
        assert grouped["Unknown"] == 1

    def test_by_status(self, pipeline, context):
        assert counts(pipeline.report("osh_by_status", context), "status") == {
            "open": 1, "investigating": 1, "closed": 1,
        }
