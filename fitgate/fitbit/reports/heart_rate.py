"""Heart rate reports."""

from __future__ import annotations

from datetime import date
from typing import Any

from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.dates import DateWindow, clamp_days, format_date, utc_today
from fitgate.fitbit.normalizers.heart_rate import (
    heart_rate_zones,
    resting_heart_rate,
    resting_heart_rate_series,
)
from fitgate.fitbit.stats import present_values, sort_by_date, window_stats


async def today(gw: FitbitGateway, today: date | None = None) -> dict[str, Any]:
    day = format_date(today or utc_today())
    raw = await gw.get_heart_rate_by_date(day)
    return {
        "date": day,
        "resting_heart_rate": resting_heart_rate(raw),
        "zones": [z.to_dict() for z in heart_rate_zones(raw)],
        "raw_data": raw,
        "insights": [],
    }


async def resting_history(
    gw: FitbitGateway, days: object = None, today: date | None = None
) -> dict[str, Any]:
    """Resting heart rate per day before today, most recent first."""
    n = clamp_days(days, gw.config.history_range("resting_hr_history"))
    window = DateWindow.ending_yesterday(n, today)
    raw = await gw.get_heart_rate_range(window.start, window.end)

    records = sort_by_date(resting_heart_rate_series(raw), descending=True)
    stats = window_stats(present_values(records, lambda r: r.value), digits=1)
    return {
        "days_requested": n,
        "records": [r.to_dict() for r in records],
        "average": stats.average,
        "min_value": stats.min_value,
        "max_value": stats.max_value,
        "raw_data": raw,
        "insights": [],
    }
