"""Activity reports: today's totals, step history, logged exercises."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.dates import DateWindow, clamp_days, format_date, utc_today
from fitgate.fitbit.models import DailySteps
from fitgate.fitbit.normalizers.activity import (
    parse_activity_summary,
    parse_exercise_logs,
    parse_step_series,
)
from fitgate.fitbit.stats import mean_or_none, sort_by_date


def average_steps(records: list[DailySteps]) -> int | None:
    """Mean daily steps rounded to a whole step; days with 0 steps count."""
    mean = mean_or_none([r.steps for r in records], 0)
    return int(mean) if mean is not None else None


async def today(gw: FitbitGateway, today: date | None = None) -> dict[str, Any]:
    day = format_date(today or utc_today())
    raw = await gw.get_activity_by_date(day)
    return {
        **parse_activity_summary(raw, day).to_dict(),
        "raw_data": raw,
        "insights": [],
    }


async def history(gw: FitbitGateway, days: object = None, today: date | None = None) -> dict[str, Any]:
    """Daily steps before today, most recent first."""
    n = clamp_days(days, gw.config.history_range("activity_history"))
    window = DateWindow.ending_yesterday(n, today)
    raw = await gw.get_activity_time_series("steps", window.start, window.end)

    records = sort_by_date(parse_step_series(raw), descending=True)
    return {
        "days_requested": n,
        "records": [r.to_dict() for r in records],
        "averages": {"steps": average_steps(records)},
        "raw_data": raw,
        "insights": [],
    }


async def exercises(gw: FitbitGateway, limit: object = None, today: date | None = None) -> dict[str, Any]:
    """Most recent logged exercises, including today's."""
    n = clamp_days(limit, gw.config.history_range("exercises"))
    before = (today or utc_today()) + timedelta(days=1)
    raw = await gw.get_activity_logs(before, n)
    return {
        "limit": n,
        "records": [log.to_dict() for log in parse_exercise_logs(raw)],
        "raw_data": raw,
        "insights": [],
    }
