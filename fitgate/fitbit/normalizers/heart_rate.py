"""Heart rate normalization (``activities-heart``)."""

from __future__ import annotations

from typing import Any, Mapping

from fitgate.fitbit.models import HeartRateZone, RestingHeartRate
from fitgate.fitbit.normalizers import as_list, as_mapping, int_or_none, number_or_none, str_or_none


def heart_entries(payload: object) -> list[Mapping[str, Any]]:
    return [
        e for e in as_list(as_mapping(payload).get("activities-heart")) if isinstance(e, Mapping)
    ]


def resting_heart_rate(payload: object) -> int | None:
    """Resting heart rate of the first day in the payload."""
    entries = heart_entries(payload)
    if not entries:
        return None
    return int_or_none(as_mapping(entries[0].get("value")).get("restingHeartRate"))


def heart_rate_zones(payload: object) -> list[HeartRateZone]:
    entries = heart_entries(payload)
    if not entries:
        return []
    zones = as_list(as_mapping(entries[0].get("value")).get("heartRateZones"))
    return [
        HeartRateZone(
            name=str_or_none(z.get("name")) or "",
            minutes=z.get("minutes") if isinstance(z.get("minutes"), int) else None,
            calories_out=number_or_none(z.get("caloriesOut")),
            min_hr=int_or_none(z.get("min")),
            max_hr=int_or_none(z.get("max")),
        )
        for z in zones
        if isinstance(z, Mapping)
    ]


def resting_heart_rate_series(payload: object) -> list[RestingHeartRate]:
    """One record per day, resting value None where the day has none."""
    return [
        RestingHeartRate(
            date=str_or_none(e.get("dateTime")) or "",
            value=int_or_none(as_mapping(e.get("value")).get("restingHeartRate")),
        )
        for e in heart_entries(payload)
    ]
