"""
Grouping engine tests.

Run with: py -m pytest tests/test_aggregation.py -v
"""
import pytest

from reporting.aggregation import group_by, grouping_rows, percentage, with_percentage


class TestGroupBy:

    def test_counts(self):
        grouped = group_by(["a", "b", "a", "c", "a"], lambda v: v)
        assert grouped == {"a": 3, "b": 1, "c": 1}

    def test_none_key_is_left_out(self):
        grouped = group_by([1, None, 2, None], lambda v: v)
        assert grouped == {1: 1, 2: 1}

    def test_order_keys_always_present(self):
        grouped = group_by(["Female"], lambda v: v, order=("Male", "Female", "Unknown"))
        assert list(grouped.items()) == [("Male", 0), ("Female", 1), ("Unknown", 0)]

    def test_unordered_keys_follow_sorted(self):
        grouped = group_by(["zeta", "Alpha", "other", "Male"], lambda v: v, order=("Male",))
        assert list(grouped) == ["Male", "Alpha", "other", "zeta"]

    def test_numeric_keys_sort_numerically(self):
        grouped = group_by([2024, 2009, 2010], lambda v: v)
        assert list(grouped) == [2009, 2010, 2024]


class TestPercentage:

    def test_zero_total(self):
        assert percentage(0, 0) == 0.0

    def test_rounding(self):
        assert percentage(1, 3) == 33.3
        assert percentage(2, 3) == 66.7

    def test_three_way_split(self):
        grouped = group_by(
            ["Signed", "Ongoing", "Not-Signed"], lambda v: v,
            order=("Signed", "Ongoing", "Not-Signed"),
        )
        items = with_percentage(grouped)
        assert [(i.key, i.count, i.percentage) for i in items] == [
            ("Signed", 1, 33.3),
            ("Ongoing", 1, 33.3),
            ("Not-Signed", 1, 33.3),
        ]

    def test_sum_is_about_100(self):
        grouped = group_by(list("aaabbbbbbbcdddddddddddd"), lambda v: v)
        items = with_percentage(grouped)
        assert sum(i.count for i in items) == 23
        assert sum(i.percentage for i in items) == pytest.approx(100.0, abs=0.5)

    def test_empty_group_is_all_zero(self):
        grouped = group_by([], lambda v: v, order=("x", "y"))
        assert [i.percentage for i in with_percentage(grouped)] == [0.0, 0.0]


class TestGroupingRows:

    def test_labelled_rows(self):
        rows = grouping_rows({"Male": 1, "Female": 3}, "sex")
        assert rows == [
            {"sex": "Male", "count": 1, "percentage": 25.0},
            {"sex": "Female", "count": 3, "percentage": 75.0},
        ]
