"""Tests for provider request builders and range/paging clamping."""

from __future__ import annotations

from datetime import date

import pytest

from fitgate.fitbit import metric_requests as mr
from fitgate.fitbit.config_loader import EndpointConfig


class TestRangeClamping:
    def test_range_within_span_is_unchanged(self, endpoint_config: EndpointConfig) -> None:
        assert mr.clamp_range("hrv", "2026-02-01", "2026-02-22", endpoint_config) == (
            "2026-02-01",
            "2026-02-22",
        )

    def test_long_range_is_shortened_from_the_start(self, endpoint_config: EndpointConfig) -> None:
        start, end = mr.clamp_range("hrv", date(2026, 1, 1), date(2026, 3, 1), endpoint_config)
        assert (start, end) == ("2026-01-31", "2026-03-01")

    def test_sleep_span_is_100_days(self, endpoint_config: EndpointConfig) -> None:
        req = mr.sleep_range("2025-01-01", "2025-12-31", endpoint_config)
        assert req.path == "/1.2/user/-/sleep/date/2025-09-23/2025-12-31.json"

    def test_reversed_range_is_rejected(self, endpoint_config: EndpointConfig) -> None:
        with pytest.raises(ValueError, match="reversed"):
            mr.clamp_range("sleep", "2026-02-22", "2026-02-01", endpoint_config)

    def test_single_day_range_is_valid(self, endpoint_config: EndpointConfig) -> None:
        assert mr.clamp_range("spo2", "2026-02-22", "2026-02-22", endpoint_config) == (
            "2026-02-22",
            "2026-02-22",
        )


class TestPaging:
    @pytest.mark.parametrize(("limit", "expected"), [(500, 100), (0, 1), (-3, 1), (20, 20)])
    def test_limit_is_clamped(self, limit: int, expected: int, endpoint_config: EndpointConfig) -> None:
        assert mr.clamp_limit(limit, endpoint_config) == expected

    def test_sleep_list_defaults(self, endpoint_config: EndpointConfig) -> None:
        req = mr.sleep_list("2026-02-24", config=endpoint_config)
        assert req.params == {"beforeDate": "2026-02-24", "sort": "desc", "limit": "7", "offset": "0"}

    def test_activity_logs_defaults(self, endpoint_config: EndpointConfig) -> None:
        req = mr.activity_logs(date(2026, 2, 24), config=endpoint_config)
        assert req.path == "/1/user/-/activities/list.json"
        assert req.params["limit"] == "20"


class TestPaths:
    def test_activity_time_series(self, endpoint_config: EndpointConfig) -> None:
        req = mr.activity_time_series("steps", "2026-02-16", "2026-02-22", endpoint_config)
        assert req.path == "/1/user/-/activities/steps/date/2026-02-16/2026-02-22.json"

    def test_unknown_activity_resource(self, endpoint_config: EndpointConfig) -> None:
        with pytest.raises(ValueError, match="Unknown activity resource"):
            mr.activity_time_series("pushups", "2026-02-16", "2026-02-22", endpoint_config)

    def test_heart_rate_detail_level(self) -> None:
        assert mr.heart_rate_by_date("2026-02-23").path == (
            "/1/user/-/activities/heart/date/2026-02-23/1d/1min.json"
        )
        assert mr.heart_rate_by_date("2026-02-23", "15min").path.endswith("/1d/15min.json")
        with pytest.raises(ValueError):
            mr.heart_rate_by_date("2026-02-23", "2min")

    @pytest.mark.parametrize(
        ("family", "prefix"),
        [
            ("hrv", "/1/user/-/hrv/date"),
            ("spo2", "/1/user/-/spo2/date"),
            ("breathing_rate", "/1/user/-/br/date"),
            ("temperature", "/1/user/-/temp/skin/date"),
            ("cardio_fitness", "/1/user/-/cardioscore/date"),
        ],
    )
    def test_recovery_family_paths(self, family: str, prefix: str, endpoint_config: EndpointConfig) -> None:
        assert mr.family_by_date(family, "2026-02-23").path == f"{prefix}/2026-02-23.json"
        assert mr.family_range(family, "2026-02-16", "2026-02-22", endpoint_config).path == (
            f"{prefix}/2026-02-16/2026-02-22.json"
        )

    def test_active_zone_minutes_paths(self, endpoint_config: EndpointConfig) -> None:
        assert mr.active_zone_minutes_by_date("2026-02-22").path == (
            "/1/user/-/activities/active-zone-minutes/date/2026-02-22/1d.json"
        )
        assert mr.active_zone_minutes_range("2026-02-16", "2026-02-22", endpoint_config).family == (
            "active_zone_minutes"
        )

    def test_url_joins_base(self) -> None:
        req = mr.activity_by_date("2026-02-23")
        assert req.url("https://api.fitbit.com/") == (
            "https://api.fitbit.com/1/user/-/activities/date/2026-02-23.json"
        )
