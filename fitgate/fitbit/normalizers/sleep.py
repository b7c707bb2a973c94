"""Sleep log normalization.

Payload shape (``/1.2/user/-/sleep/date/...``)::

    {"sleep": [{"dateOfSleep": "2026-02-23", "isMainSleep": true,
                "minutesAsleep": 450, "timeInBed": 480, "efficiency": 93,
                "levels": {"summary": {"deep": {"minutes": 90}, ...}}}],
     "summary": {...}}

Stage percentages are shares of deep+light+rem (wake excluded).
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from fitgate.fitbit.models import SleepRecord, SleepStageRow, SleepStages
from fitgate.fitbit.normalizers import as_list, as_mapping, int_or_none, str_or_none
from fitgate.fitbit.stats import ratio_percent, round_half_up


def sleep_entries(payload: object) -> list[Mapping[str, Any]]:
    """The ``sleep`` list of a payload, skipping non-object entries."""
    return [e for e in as_list(as_mapping(payload).get("sleep")) if isinstance(e, Mapping)]


def _stage_minutes(summary: Mapping[str, Any], stage: str) -> int | None:
    minutes = as_mapping(summary.get(stage)).get("minutes")
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        return None
    if isinstance(minutes, float) and not math.isfinite(minutes):
        return None
    return int(minutes)


def _stage_percent(minutes: int | None, total: int) -> float | None:
    if not minutes or not total:
        return None
    return ratio_percent(minutes, total)


def parse_stages(entry: Mapping[str, Any]) -> SleepStages | None:
    """Stage minutes and percentages; None when the entry has no stage summary."""
    summary = as_mapping(entry.get("levels")).get("summary")
    if not isinstance(summary, Mapping) or not summary:
        return None

    deep = _stage_minutes(summary, "deep")
    light = _stage_minutes(summary, "light")
    rem = _stage_minutes(summary, "rem")
    wake = _stage_minutes(summary, "wake")
    total_sleep = (deep or 0) + (light or 0) + (rem or 0)

    return SleepStages(
        deep=deep,
        deep_percent=_stage_percent(deep, total_sleep),
        light=light,
        light_percent=_stage_percent(light, total_sleep),
        rem=rem,
        rem_percent=_stage_percent(rem, total_sleep),
        wake=wake,
    )


def parse_sleep_record(entry: Mapping[str, Any]) -> SleepRecord:
    """Normalize one sleep log entry."""
    minutes_asleep = int_or_none(entry.get("minutesAsleep"))
    duration_hours = round_half_up(minutes_asleep / 60, 2) if minutes_asleep else None
    is_main = entry.get("isMainSleep")

    return SleepRecord(
        date=str_or_none(entry.get("dateOfSleep")) or "",
        start_time=str_or_none(entry.get("startTime")),
        end_time=str_or_none(entry.get("endTime")),
        duration_hours=duration_hours,
        time_in_bed_minutes=int_or_none(entry.get("timeInBed")),
        minutes_asleep=minutes_asleep,
        minutes_awake=int_or_none(entry.get("minutesAwake")),
        efficiency=int_or_none(entry.get("efficiency")),
        stages=parse_stages(entry),
        is_main_sleep=True if is_main is None else bool(is_main),
    )


def main_sleep(payload: object) -> SleepRecord | None:
    """The night's main sleep: the flagged entry, else the first entry, else None."""
    entries = sleep_entries(payload)
    for entry in entries:
        if entry.get("isMainSleep"):
            return parse_sleep_record(entry)
    if entries:
        return parse_sleep_record(entries[0])
    return None


def main_sleep_records(payload: object) -> list[SleepRecord]:
    """Every entry flagged as a main sleep, in payload order."""
    return [parse_sleep_record(e) for e in sleep_entries(payload) if e.get("isMainSleep")]


def parse_stage_row(entry: Mapping[str, Any]) -> SleepStageRow:
    """Flat stage minutes for charts; absent stages count as zero."""
    summary = as_mapping(as_mapping(entry.get("levels")).get("summary"))
    return SleepStageRow(
        date=str_or_none(entry.get("dateOfSleep")) or "",
        deep=_stage_minutes(summary, "deep") or 0,
        light=_stage_minutes(summary, "light") or 0,
        rem=_stage_minutes(summary, "rem") or 0,
        wake=_stage_minutes(summary, "wake") or 0,
        total_sleep=int_or_none(entry.get("minutesAsleep")) or 0,
        efficiency=int_or_none(entry.get("efficiency")),
    )


def main_sleep_stage_rows(payload: object) -> list[SleepStageRow]:
    return [parse_stage_row(e) for e in sleep_entries(payload) if e.get("isMainSleep")]
