"""Pure builders for provider requests, one per metric family endpoint.

A ``MetricRequest`` is the endpoint path plus query parameters for one call.
Builders apply the provider's request-shaping rules: date ranges longer than
a family's maximum span are shortened from the start, paged list limits are
clamped, and unknown resources or detail levels are rejected.

Endpoints (relative to https://api.fitbit.com):
    /1.2/user/-/sleep/date/{date}.json
    /1.2/user/-/sleep/date/{start}/{end}.json
    /1.2/user/-/sleep/list.json
    /1/user/-/activities/date/{date}.json
    /1/user/-/activities/{resource}/date/{start}/{end}.json
    /1/user/-/activities/list.json
    /1/user/-/activities/heart/date/{date}/1d/{detail}.json
    /1/user/-/activities/heart/date/{start}/{end}.json
    /1/user/-/hrv/date/...               /1/user/-/spo2/date/...
    /1/user/-/br/date/...                /1/user/-/temp/skin/date/...
    /1/user/-/cardioscore/date/...
    /1/user/-/activities/active-zone-minutes/date/...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from fitgate.fitbit.config_loader import EndpointConfig, get_endpoint_config
from fitgate.fitbit.dates import format_date

logger = logging.getLogger("fitgate.fitbit.requests")

ACTIVITY_RESOURCES: frozenset[str] = frozenset({
    "steps",
    "calories",
    "caloriesBMR",
    "distance",
    "floors",
    "elevation",
    "minutesSedentary",
    "minutesLightlyActive",
    "minutesFairlyActive",
    "minutesVeryActive",
    "activityCalories",
})

HEART_RATE_DETAIL_LEVELS: frozenset[str] = frozenset({"1sec", "1min", "5min", "15min"})

# Path prefix per recovery-style family: by-date and range share it
_FAMILY_PATHS: dict[str, str] = {
    "hrv": "/1/user/-/hrv/date",
    "spo2": "/1/user/-/spo2/date",
    "breathing_rate": "/1/user/-/br/date",
    "temperature": "/1/user/-/temp/skin/date",
    "cardio_fitness": "/1/user/-/cardioscore/date",
}


@dataclass(frozen=True)
class MetricRequest:
    """Endpoint path + query parameters for one provider call."""

    family: str
    path: str
    params: dict[str, str] = field(default_factory=dict)

    def url(self, base: str) -> str:
        return f"{base.rstrip('/')}{self.path}"


def _as_date(value: date | str) -> date:
    return value if isinstance(value, date) else date.fromisoformat(value)


def clamp_range(
    family: str,
    start: date | str,
    end: date | str,
    config: EndpointConfig | None = None,
) -> tuple[str, str]:
    """Validate a date range and shorten it to the family's provider span.

    Raises:
        ValueError: If ``start`` is after ``end`` or a date is malformed.
    """
    start_d, end_d = _as_date(start), _as_date(end)
    if start_d > end_d:
        raise ValueError(f"Date range for {family} is reversed: {start_d} > {end_d}")

    max_span = (config or get_endpoint_config()).max_span(family)
    if max_span is not None and (end_d - start_d).days + 1 > max_span:
        clamped = end_d - timedelta(days=max_span - 1)
        logger.debug(
            "Range %s..%s for %s exceeds %d days; starting at %s",
            start_d, end_d, family, max_span, clamped,
        )
        start_d = clamped
    return format_date(start_d), format_date(end_d)


def clamp_limit(limit: int, config: EndpointConfig | None = None) -> int:
    max_limit = (config or get_endpoint_config()).paging.max_limit
    return min(max(int(limit), 1), max_limit)


def _day(value: date | str) -> str:
    return format_date(_as_date(value))


# ---------------------------------------------------------------------------
# Sleep
# ---------------------------------------------------------------------------


def sleep_by_date(day: date | str) -> MetricRequest:
    return MetricRequest("sleep", f"/1.2/user/-/sleep/date/{_day(day)}.json")


def sleep_range(start: date | str, end: date | str, config: EndpointConfig | None = None) -> MetricRequest:
    s, e = clamp_range("sleep", start, end, config)
    return MetricRequest("sleep", f"/1.2/user/-/sleep/date/{s}/{e}.json")


def sleep_list(before: date | str, limit: int | None = None, config: EndpointConfig | None = None) -> MetricRequest:
    cfg = config or get_endpoint_config()
    size = clamp_limit(limit if limit is not None else cfg.paging.sleep_list_default, cfg)
    return MetricRequest(
        "sleep",
        "/1.2/user/-/sleep/list.json",
        {"beforeDate": _day(before), "sort": "desc", "limit": str(size), "offset": "0"},
    )


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------


def activity_by_date(day: date | str) -> MetricRequest:
    return MetricRequest("activity", f"/1/user/-/activities/date/{_day(day)}.json")


def activity_time_series(
    resource: str,
    start: date | str,
    end: date | str,
    config: EndpointConfig | None = None,
) -> MetricRequest:
    if resource not in ACTIVITY_RESOURCES:
        raise ValueError(
            f"Unknown activity resource '{resource}'. Available: {sorted(ACTIVITY_RESOURCES)}"
        )
    s, e = clamp_range("activity", start, end, config)
    return MetricRequest("activity", f"/1/user/-/activities/{resource}/date/{s}/{e}.json")


def activity_logs(before: date | str, limit: int | None = None, config: EndpointConfig | None = None) -> MetricRequest:
    cfg = config or get_endpoint_config()
    size = clamp_limit(limit if limit is not None else cfg.paging.activity_logs_default, cfg)
    return MetricRequest(
        "activity",
        "/1/user/-/activities/list.json",
        {"beforeDate": _day(before), "sort": "desc", "limit": str(size), "offset": "0"},
    )


def active_zone_minutes_by_date(day: date | str) -> MetricRequest:
    return MetricRequest(
        "active_zone_minutes",
        f"/1/user/-/activities/active-zone-minutes/date/{_day(day)}/1d.json",
    )


def active_zone_minutes_range(
    start: date | str, end: date | str, config: EndpointConfig | None = None
) -> MetricRequest:
    s, e = clamp_range("active_zone_minutes", start, end, config)
    return MetricRequest(
        "active_zone_minutes",
        f"/1/user/-/activities/active-zone-minutes/date/{s}/{e}.json",
    )


# ---------------------------------------------------------------------------
# Heart rate
# ---------------------------------------------------------------------------


def heart_rate_by_date(day: date | str, detail_level: str = "1min") -> MetricRequest:
    if detail_level not in HEART_RATE_DETAIL_LEVELS:
        raise ValueError(
            f"Unknown heart rate detail level '{detail_level}'. "
            f"Available: {sorted(HEART_RATE_DETAIL_LEVELS)}"
        )
    return MetricRequest(
        "heart_rate", f"/1/user/-/activities/heart/date/{_day(day)}/1d/{detail_level}.json"
    )


def heart_rate_range(start: date | str, end: date | str, config: EndpointConfig | None = None) -> MetricRequest:
    s, e = clamp_range("heart_rate", start, end, config)
    return MetricRequest("heart_rate", f"/1/user/-/activities/heart/date/{s}/{e}.json")


# ---------------------------------------------------------------------------
# Recovery families (HRV, SpO2, breathing rate, skin temperature, cardio fitness)
# ---------------------------------------------------------------------------


def family_by_date(family: str, day: date | str) -> MetricRequest:
    return MetricRequest(family, f"{_FAMILY_PATHS[family]}/{_day(day)}.json")


def family_range(
    family: str, start: date | str, end: date | str, config: EndpointConfig | None = None
) -> MetricRequest:
    s, e = clamp_range(family, start, end, config)
    return MetricRequest(family, f"{_FAMILY_PATHS[family]}/{s}/{e}.json")
