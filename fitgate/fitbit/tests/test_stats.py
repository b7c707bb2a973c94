"""Tests for rounding, window statistics and baseline comparisons."""

from __future__ import annotations

from fitgate.fitbit.stats import (
    baseline_comparison,
    exclude_date,
    mean_or_none,
    percent_difference,
    present_values,
    ratio_percent,
    round_half_up,
    sort_by_date,
    window_stats,
)
from fitgate.fitbit.models import RestingHeartRate


class TestRounding:
    def test_half_rounds_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(-0.25, 1) == -0.2

    def test_ratio_percent_one_decimal(self) -> None:
        assert ratio_percent(1, 3) == 33.3
        assert ratio_percent(2, 3) == 66.7


class TestWindowStats:
    def test_mean_min_max(self) -> None:
        stats = window_stats([55, 57, 56, 58, 54, 56])
        assert stats.average == 56.0
        assert stats.min_value == 54
        assert stats.max_value == 58
        assert stats.count == 6

    def test_empty_window_is_all_none(self) -> None:
        stats = window_stats([])
        assert stats.to_dict() == {"average": None, "min_value": None, "max_value": None, "count": 0}

    def test_mean_or_none(self) -> None:
        assert mean_or_none([]) is None
        assert mean_or_none([7.5, 7.25], 2) == 7.38
        assert mean_or_none([1, 2], None) == 1.5


class TestBaseline:
    def test_hrv_against_trailing_week(self) -> None:
        result = baseline_comparison(55, [50, 52, 54, 58, 60])
        assert result.baseline_average == 54.8
        assert result.percent_difference == 0.4
        assert result.current_value == 55

    def test_empty_window_has_no_comparison(self) -> None:
        result = baseline_comparison(55, [])
        assert result.baseline_average is None
        assert result.percent_difference is None

    def test_zero_average_has_no_percent(self) -> None:
        assert percent_difference(10, 0) is None
        assert percent_difference(None, 50) is None

    def test_below_baseline_is_negative(self) -> None:
        assert percent_difference(45, 50) == -10.0


class TestRecordHelpers:
    def test_present_values_skip_none_and_zero(self) -> None:
        records = [RestingHeartRate("d1", 55), RestingHeartRate("d2", None), RestingHeartRate("d3", 0)]
        assert present_values(records, lambda r: r.value) == [55]

    def test_exclude_current_date(self) -> None:
        records = [RestingHeartRate("2026-02-22", 55), RestingHeartRate("2026-02-23", 60)]
        kept = exclude_date(records, "2026-02-23", lambda r: r.date)
        assert [r.date for r in kept] == ["2026-02-22"]

    def test_sort_directions(self) -> None:
        records = [RestingHeartRate("2026-02-20", 1), RestingHeartRate("2026-02-22", 2), RestingHeartRate("2026-02-21", 3)]
        assert [r.date for r in sort_by_date(records, descending=True)] == [
            "2026-02-22",
            "2026-02-21",
            "2026-02-20",
        ]
        assert [r.date for r in sort_by_date(records, descending=False)] == [
            "2026-02-20",
            "2026-02-21",
            "2026-02-22",
        ]
