"""Composite reports: morning report, weekly summary and the dashboard snapshot.

Every family fetch goes through ``fetch_or_none`` so a failed family yields
a None sub-section instead of failing the report.  Baselines come from the
seven days before today, with the current date excluded.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from typing import Any

from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.dates import DateWindow, days_ago, format_date, utc_today
from fitgate.fitbit.models import SleepRecord
from fitgate.fitbit.normalizers.activity import (
    parse_active_zone_minutes,
    parse_activity_summary,
    parse_azm_series,
    parse_step_series,
)
from fitgate.fitbit.normalizers.heart_rate import resting_heart_rate, resting_heart_rate_series
from fitgate.fitbit.normalizers.recovery import (
    parse_breathing_rate,
    parse_hrv,
    parse_hrv_series,
    parse_spo2,
    parse_temperature,
)
from fitgate.fitbit.normalizers.sleep import main_sleep, main_sleep_records
from fitgate.fitbit.reports import fetch_or_none
from fitgate.fitbit.reports.activity import average_steps
from fitgate.fitbit.reports.recovery import hrv_against_baseline
from fitgate.fitbit.reports.sleep import sleep_averages
from fitgate.fitbit.stats import (
    baseline_comparison,
    exclude_date,
    mean_or_none,
    present_values,
    round_half_up,
    sort_by_date,
    window_stats,
)

WEEK_DAYS = 7


def _sleep_comparison(last_night: SleepRecord | None, previous: list[SleepRecord]) -> dict[str, Any] | None:
    if last_night is None:
        return None
    durations = present_values(previous, lambda r: r.duration_hours)
    efficiencies = present_values(previous, lambda r: r.efficiency)
    if not durations and not efficiencies:
        return None

    avg_duration = mean_or_none(durations, None)
    avg_efficiency = mean_or_none(efficiencies, None)
    duration_diff = efficiency_diff = None
    if avg_duration is not None and last_night.duration_hours is not None:
        duration_diff = round_half_up(last_night.duration_hours - avg_duration, 2)
    if avg_efficiency is not None and last_night.efficiency is not None:
        efficiency_diff = round_half_up(last_night.efficiency - avg_efficiency, 1)
    return {
        "vs_7day_avg_duration_hours": round_half_up(avg_duration, 2) if avg_duration is not None else None,
        "vs_7day_avg_efficiency": round_half_up(avg_efficiency, 1) if avg_efficiency is not None else None,
        "duration_diff_hours": duration_diff,
        "efficiency_diff": efficiency_diff,
    }


def _night(record: SleepRecord | None) -> dict[str, Any] | None:
    if record is None:
        return None
    return {"date": record.date, "duration_hours": record.duration_hours}


async def morning_report(gw: FitbitGateway, now: datetime | None = None) -> dict[str, Any]:
    """Morning coaching report: last night, yesterday's activity, recovery vs baselines."""
    now = now or datetime.now(timezone.utc)
    today = now.date()
    day = format_date(today)
    yesterday = format_date(days_ago(1, today))
    week = DateWindow.ending_yesterday(WEEK_DAYS, today)

    (
        sleep_raw,
        sleep_week_raw,
        hrv_raw,
        hrv_week_raw,
        activity_raw,
        azm_raw,
        heart_raw,
        heart_week_raw,
    ) = await asyncio.gather(
        fetch_or_none("sleep", gw.get_sleep_by_date(day)),
        fetch_or_none("sleep history", gw.get_sleep_range(week.start, week.end)),
        fetch_or_none("hrv", gw.get_hrv_by_date(day)),
        fetch_or_none("hrv history", gw.get_hrv_range(week.start, week.end)),
        fetch_or_none("activity", gw.get_activity_by_date(yesterday)),
        fetch_or_none("active zone minutes", gw.get_active_zone_minutes_by_date(yesterday)),
        fetch_or_none("heart rate", gw.get_heart_rate_by_date(day)),
        fetch_or_none("heart rate history", gw.get_heart_rate_range(week.start, week.end)),
    )

    last_night = main_sleep(sleep_raw) if sleep_raw is not None else None
    sleep_week = main_sleep_records(sleep_week_raw) if sleep_week_raw is not None else []
    previous_nights = exclude_date(sleep_week, last_night.date if last_night else day, lambda r: r.date)

    yesterday_activity = None
    if activity_raw is not None:
        summary = parse_activity_summary(activity_raw, yesterday)
        azm = parse_active_zone_minutes(azm_raw, yesterday) if azm_raw is not None else None
        yesterday_activity = {
            "date": yesterday,
            "steps": summary.steps,
            "calories_out": summary.calories_out,
            "fairly_active_minutes": summary.fairly_active_minutes,
            "very_active_minutes": summary.very_active_minutes,
            "active_zone_minutes": (
                {"total": azm.total, "fat_burn": azm.fat_burn, "cardio": azm.cardio, "peak": azm.peak}
                if azm is not None
                else None
            ),
        }

    hrv, hrv_baseline = hrv_against_baseline(
        parse_hrv(hrv_raw, day) if hrv_raw is not None else None, hrv_week_raw
    )
    hrv_week = parse_hrv_series(hrv_week_raw) if hrv_week_raw is not None else []
    week_durations = present_values(sleep_week, lambda r: r.duration_hours)
    week_hrv = present_values(hrv_week, lambda r: r.daily_rmssd)

    resting = resting_heart_rate(heart_raw) if heart_raw is not None else None
    rhr_baseline = None
    if resting is not None and heart_week_raw is not None:
        rhr_window = exclude_date(resting_heart_rate_series(heart_week_raw), day, lambda r: r.date)
        rhr_baseline = baseline_comparison(resting, present_values(rhr_window, lambda r: r.value)).to_dict()

    sleep_baseline = None
    if last_night is not None and sleep_week_raw is not None:
        sleep_baseline = baseline_comparison(
            last_night.duration_hours,
            present_values(previous_nights, lambda r: r.duration_hours),
            digits=2,
        ).to_dict()

    return {
        "report_generated_at": now.isoformat(),
        "last_night_sleep": last_night.to_dict() if last_night else None,
        "sleep_comparison": _sleep_comparison(last_night, previous_nights),
        "yesterday_activity": yesterday_activity,
        "recovery": {"hrv": hrv.to_dict() if hrv else None},
        "resting_heart_rate": resting,
        "baselines": {
            "hrv": hrv_baseline,
            "resting_heart_rate": rhr_baseline,
            "sleep_duration": sleep_baseline,
        },
        "trends": {
            "days_of_data": max(len(week_durations), len(week_hrv), 1),
            "sleep_avg_duration_hours": mean_or_none(week_durations, 2),
            "hrv_avg": mean_or_none(week_hrv, 1),
        },
        "insights": [],
        "data_summary": {
            "day_of_week": today.strftime("%A"),
            "is_weekend": today.weekday() >= 5,
        },
    }


async def weekly_summary(gw: FitbitGateway, today: date | None = None) -> dict[str, Any]:
    """Seven days ending yesterday, every series oldest first for charting."""
    week = DateWindow.ending_yesterday(WEEK_DAYS, today)

    sleep_raw, hrv_raw, heart_raw, steps_raw, azm_raw = await asyncio.gather(
        fetch_or_none("sleep", gw.get_sleep_range(week.start, week.end)),
        fetch_or_none("hrv", gw.get_hrv_range(week.start, week.end)),
        fetch_or_none("heart rate", gw.get_heart_rate_range(week.start, week.end)),
        fetch_or_none("steps", gw.get_activity_time_series("steps", week.start, week.end)),
        fetch_or_none("active zone minutes", gw.get_active_zone_minutes_range(week.start, week.end)),
    )

    sleep = None
    if sleep_raw is not None:
        nights = sort_by_date(main_sleep_records(sleep_raw), descending=False)
        timed = [n for n in nights if n.duration_hours is not None]
        sleep = {
            "records": [n.to_dict() for n in nights],
            "averages": sleep_averages(nights),
            "best_night": _night(max(timed, key=lambda n: n.duration_hours, default=None)),
            "worst_night": _night(min(timed, key=lambda n: n.duration_hours, default=None)),
        }

    hrv = None
    if hrv_raw is not None:
        readings = sort_by_date(parse_hrv_series(hrv_raw), descending=False)
        hrv = {
            "records": [r.to_dict() for r in readings],
            "stats": window_stats(present_values(readings, lambda r: r.daily_rmssd)).to_dict(),
        }

    resting = None
    if heart_raw is not None:
        series = sort_by_date(resting_heart_rate_series(heart_raw), descending=False)
        resting = {
            "records": [r.to_dict() for r in series],
            "stats": window_stats(present_values(series, lambda r: r.value)).to_dict(),
        }

    activity = None
    if steps_raw is not None:
        steps = sort_by_date(parse_step_series(steps_raw), descending=False)
        activity = {
            "records": [s.to_dict() for s in steps],
            "average_steps": average_steps(steps),
            "total_steps": sum(s.steps for s in steps),
        }

    zone_minutes = None
    if azm_raw is not None:
        azm = sort_by_date(parse_azm_series(azm_raw), descending=False)
        zone_minutes = {
            "records": [a.to_dict() for a in azm],
            "total": sum(a.total or 0 for a in azm),
        }

    return {
        "start_date": week.start_str,
        "end_date": week.end_str,
        "sleep": sleep,
        "hrv": hrv,
        "resting_heart_rate": resting,
        "activity": activity,
        "active_zone_minutes": zone_minutes,
        "insights": [],
    }


async def snapshot(gw: FitbitGateway, today: date | None = None) -> dict[str, Any]:
    """Flat daily values for the dashboard; every key is present, missing ones are None."""
    today = today or utc_today()
    day = format_date(today)
    week = DateWindow.ending_yesterday(gw.config.baseline_window_days, today)

    sleep_raw, hrv_raw, hrv_week_raw, spo2_raw, br_raw, temp_raw, heart_raw = await asyncio.gather(
        fetch_or_none("sleep", gw.get_sleep_by_date(day)),
        fetch_or_none("hrv", gw.get_hrv_by_date(day)),
        fetch_or_none("hrv history", gw.get_hrv_range(week.start, week.end)),
        fetch_or_none("spo2", gw.get_spo2_by_date(day)),
        fetch_or_none("breathing_rate", gw.get_breathing_rate_by_date(day)),
        fetch_or_none("temperature", gw.get_temperature_by_date(day)),
        fetch_or_none("heart rate", gw.get_heart_rate_by_date(day)),
    )

    night = main_sleep(sleep_raw) if sleep_raw is not None else None
    stages = night.stages if night else None
    hrv, _ = hrv_against_baseline(
        parse_hrv(hrv_raw, day) if hrv_raw is not None else None, hrv_week_raw
    )
    spo2 = parse_spo2(spo2_raw, day) if spo2_raw is not None else None
    breathing = parse_breathing_rate(br_raw, day) if br_raw is not None else None
    temperature = parse_temperature(temp_raw, day) if temp_raw is not None else None

    return {
        "date": day,
        "sleep_hours": night.duration_hours if night else None,
        "sleep_efficiency": night.efficiency if night else None,
        "sleep_deep_min": stages.deep if stages else None,
        "sleep_light_min": stages.light if stages else None,
        "sleep_rem_min": stages.rem if stages else None,
        "sleep_wake_min": stages.wake if stages else None,
        "hrv_rmssd": hrv.daily_rmssd if hrv else None,
        "hrv_vs_baseline_pct": hrv.vs_baseline_percent if hrv else None,
        "spo2_avg": spo2.avg if spo2 else None,
        "breathing_rate": breathing.breathing_rate if breathing else None,
        "temp_deviation": temperature.nightly_relative if temperature else None,
        "resting_hr": resting_heart_rate(heart_raw) if heart_raw is not None else None,
    }
