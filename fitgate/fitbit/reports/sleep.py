"""Sleep reports: last night, history, and stage history for charts."""

from __future__ import annotations

from datetime import date
from typing import Any

from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.dates import DateWindow, clamp_days, format_date, utc_today
from fitgate.fitbit.models import SleepRecord
from fitgate.fitbit.normalizers.sleep import main_sleep, main_sleep_records, main_sleep_stage_rows
from fitgate.fitbit.stats import mean_or_none, present_values, sort_by_date


def sleep_averages(records: list[SleepRecord]) -> dict[str, float | None]:
    """Mean duration (2dp) and efficiency (1dp) over nights that report them."""
    return {
        "duration_hours": mean_or_none(present_values(records, lambda r: r.duration_hours), 2),
        "efficiency": mean_or_none(present_values(records, lambda r: r.efficiency), 1),
    }


async def last_night(gw: FitbitGateway, today: date | None = None) -> dict[str, Any]:
    """Main sleep logged for today's date (the night that just ended)."""
    day = format_date(today or utc_today())
    raw = await gw.get_sleep_by_date(day)
    record = main_sleep(raw)
    return {
        "sleep": record.to_dict() if record else None,
        "raw_data": raw,
        "insights": [],
    }


async def history(gw: FitbitGateway, days: object = None, today: date | None = None) -> dict[str, Any]:
    """Main sleeps for the N days before today, most recent first."""
    n = clamp_days(days, gw.config.history_range("sleep_history"))
    window = DateWindow.ending_yesterday(n, today)
    raw = await gw.get_sleep_range(window.start, window.end)

    records = sort_by_date(main_sleep_records(raw), descending=True)
    return {
        "days_requested": n,
        "start_date": window.start_str,
        "end_date": window.end_str,
        "records": [r.to_dict() for r in records],
        "averages": sleep_averages(records),
        "raw_data": raw,
        "insights": [],
    }


async def stages_history(gw: FitbitGateway, days: object = None, today: date | None = None) -> dict[str, Any]:
    """Flat per-night stage minutes through last night, oldest first."""
    n = clamp_days(days, gw.config.history_range("sleep_stages_history"))
    window = DateWindow.ending_today(n, today)
    raw = await gw.get_sleep_range(window.start, window.end)

    rows = sort_by_date(main_sleep_stage_rows(raw), descending=False)
    return {
        "days_requested": n,
        "records": [r.to_dict() for r in rows],
    }
