"""Activity normalization: daily summary, step series, AZM, exercise logs."""

from __future__ import annotations

from typing import Any, Mapping

from fitgate.fitbit.models import ActiveZoneMinutes, ActivitySummary, DailySteps, ExerciseLog
from fitgate.fitbit.normalizers import (
    as_list,
    as_mapping,
    int_or_none,
    number_or_none,
    str_or_none,
)
from fitgate.fitbit.stats import round_half_up


def _total_distance(summary: Mapping[str, Any]) -> float | None:
    for item in as_list(summary.get("distances")):
        if isinstance(item, Mapping) and item.get("activity") == "total":
            distance = number_or_none(item.get("distance"))
            return float(distance) if distance is not None else None
    return None


def parse_activity_summary(payload: object, day: str) -> ActivitySummary:
    """Daily totals from ``/activities/date/{day}.json``."""
    summary = as_mapping(as_mapping(payload).get("summary"))
    return ActivitySummary(
        date=day,
        steps=int_or_none(summary.get("steps")),
        calories_out=int_or_none(summary.get("caloriesOut")),
        floors=int_or_none(summary.get("floors")),
        distance_km=_total_distance(summary),
        sedentary_minutes=int_or_none(summary.get("sedentaryMinutes")),
        lightly_active_minutes=int_or_none(summary.get("lightlyActiveMinutes")),
        fairly_active_minutes=int_or_none(summary.get("fairlyActiveMinutes")),
        very_active_minutes=int_or_none(summary.get("veryActiveMinutes")),
    )


def parse_step_series(payload: object) -> list[DailySteps]:
    """``activities-steps`` series; values arrive as strings, unparseable ones count as 0."""
    records = []
    for entry in as_list(as_mapping(payload).get("activities-steps")):
        if not isinstance(entry, Mapping):
            continue
        records.append(
            DailySteps(
                date=str_or_none(entry.get("dateTime")) or "",
                steps=int_or_none(entry.get("value")) or 0,
            )
        )
    return records


def _azm_entries(payload: object) -> list[Mapping[str, Any]]:
    return [
        e
        for e in as_list(as_mapping(payload).get("activities-active-zone-minutes"))
        if isinstance(e, Mapping)
    ]


def parse_azm_entry(entry: Mapping[str, Any], day: str | None = None) -> ActiveZoneMinutes:
    value = as_mapping(entry.get("value"))
    return ActiveZoneMinutes(
        date=str_or_none(entry.get("dateTime")) or day or "",
        total=int_or_none(value.get("activeZoneMinutes")),
        fat_burn=int_or_none(value.get("fatBurnActiveZoneMinutes")),
        cardio=int_or_none(value.get("cardioActiveZoneMinutes")),
        peak=int_or_none(value.get("peakActiveZoneMinutes")),
    )


def parse_active_zone_minutes(payload: object, day: str) -> ActiveZoneMinutes:
    """First-day AZM; every field None when the day has no entry."""
    entries = _azm_entries(payload)
    if not entries:
        return ActiveZoneMinutes(date=day, total=None, fat_burn=None, cardio=None, peak=None)
    return parse_azm_entry(entries[0], day)


def parse_azm_series(payload: object) -> list[ActiveZoneMinutes]:
    return [parse_azm_entry(e) for e in _azm_entries(payload)]


def parse_exercise_logs(payload: object) -> list[ExerciseLog]:
    """Logged exercises from ``/activities/list.json``; duration is reported in ms."""
    logs = []
    for entry in as_list(as_mapping(payload).get("activities")):
        if not isinstance(entry, Mapping):
            continue
        duration_ms = number_or_none(entry.get("activeDuration") or entry.get("duration"))
        azm = as_mapping(entry.get("activeZoneMinutes"))
        logs.append(
            ExerciseLog(
                log_id=int_or_none(entry.get("logId")),
                name=str_or_none(entry.get("activityName")),
                start_time=str_or_none(entry.get("startTime")),
                duration_minutes=round_half_up(duration_ms / 60000, 1) if duration_ms else None,
                calories=int_or_none(entry.get("calories")),
                steps=int_or_none(entry.get("steps")),
                average_heart_rate=int_or_none(entry.get("averageHeartRate")),
                active_zone_minutes=int_or_none(azm.get("totalMinutes")),
            )
        )
    return logs
