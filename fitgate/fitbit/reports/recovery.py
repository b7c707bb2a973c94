"""Recovery reports: HRV, SpO2, breathing rate, skin temperature, cardio fitness.

``today`` tolerates any single family failing, since a night without a
reading is normal for these metrics.  ``history`` treats HRV as the
authoritative series: its failure fails the request, the others (cardio
fitness included) degrade to empty lists.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any

from fitgate.fitbit.client import FitbitGateway
from fitgate.fitbit.dates import DateWindow, clamp_days, format_date, utc_today
from fitgate.fitbit.models import HrvReading
from fitgate.fitbit.normalizers.recovery import (
    parse_breathing_rate,
    parse_breathing_rate_series,
    parse_cardio_fitness,
    parse_cardio_fitness_series,
    parse_hrv,
    parse_hrv_series,
    parse_spo2,
    parse_spo2_series,
    parse_temperature,
    parse_temperature_series,
)
from fitgate.fitbit.reports import fetch_or_none
from fitgate.fitbit.stats import (
    baseline_comparison,
    exclude_date,
    mean_or_none,
    present_values,
    sort_by_date,
)


def hrv_against_baseline(
    current: HrvReading | None, history_payload: object
) -> tuple[HrvReading | None, dict[str, Any] | None]:
    """Attach ``vs_baseline_percent`` to ``current`` using a trailing HRV window.

    Readings for the current date are dropped from the window first.
    """
    if current is None or history_payload is None:
        return current, None
    window = exclude_date(parse_hrv_series(history_payload), current.date, lambda r: r.date)
    comparison = baseline_comparison(
        current.daily_rmssd, present_values(window, lambda r: r.daily_rmssd)
    )
    current.vs_baseline_percent = comparison.percent_difference
    return current, comparison.to_dict()


async def today(gw: FitbitGateway, today: date | None = None) -> dict[str, Any]:
    day_date = today or utc_today()
    day = format_date(day_date)
    baseline = DateWindow.ending_yesterday(gw.config.baseline_window_days, day_date)

    hrv_raw, hrv_window_raw, spo2_raw, br_raw, temp_raw, cardio_raw = await asyncio.gather(
        fetch_or_none("hrv", gw.get_hrv_by_date(day)),
        fetch_or_none("hrv baseline", gw.get_hrv_range(baseline.start, baseline.end)),
        fetch_or_none("spo2", gw.get_spo2_by_date(day)),
        fetch_or_none("breathing_rate", gw.get_breathing_rate_by_date(day)),
        fetch_or_none("temperature", gw.get_temperature_by_date(day)),
        fetch_or_none("cardio_fitness", gw.get_cardio_fitness_by_date(day)),
    )

    hrv, _ = hrv_against_baseline(
        parse_hrv(hrv_raw, day) if hrv_raw is not None else None, hrv_window_raw
    )
    spo2 = parse_spo2(spo2_raw, day) if spo2_raw is not None else None
    breathing = parse_breathing_rate(br_raw, day) if br_raw is not None else None
    temperature = parse_temperature(temp_raw, day) if temp_raw is not None else None
    cardio = parse_cardio_fitness(cardio_raw, day) if cardio_raw is not None else None

    return {
        "date": day,
        "hrv": hrv.to_dict() if hrv else None,
        "spo2": spo2.to_dict() if spo2 else None,
        "breathing_rate": breathing.to_dict() if breathing else None,
        "temperature": temperature.to_dict() if temperature else None,
        "cardio_fitness": cardio.to_dict() if cardio else None,
        "raw_data": {
            "hrv": hrv_raw,
            "spo2": spo2_raw,
            "breathing_rate": br_raw,
            "temperature": temp_raw,
            "cardio_fitness": cardio_raw,
        },
        "insights": [],
    }


async def history(gw: FitbitGateway, days: object = None, today: date | None = None) -> dict[str, Any]:
    n = clamp_days(days, gw.config.history_range("recovery_history"))
    window = DateWindow.ending_yesterday(n, today)

    hrv_raw = await gw.get_hrv_range(window.start, window.end)
    spo2_raw, br_raw, temp_raw, cardio_raw = await asyncio.gather(
        fetch_or_none("spo2", gw.get_spo2_range(window.start, window.end)),
        fetch_or_none("breathing_rate", gw.get_breathing_rate_range(window.start, window.end)),
        fetch_or_none("temperature", gw.get_temperature_range(window.start, window.end)),
        fetch_or_none("cardio_fitness", gw.get_cardio_fitness_range(window.start, window.end)),
    )

    hrv = sort_by_date(parse_hrv_series(hrv_raw), descending=True)
    spo2 = sort_by_date(parse_spo2_series(spo2_raw), descending=True)
    breathing = sort_by_date(parse_breathing_rate_series(br_raw), descending=True)
    temperature = sort_by_date(parse_temperature_series(temp_raw), descending=True)
    cardio = sort_by_date(parse_cardio_fitness_series(cardio_raw), descending=True)

    return {
        "days_requested": n,
        "hrv_records": [r.to_dict() for r in hrv],
        "spo2_records": [r.to_dict() for r in spo2],
        "breathing_rate_records": [r.to_dict() for r in breathing],
        "temperature_records": [r.to_dict() for r in temperature],
        "cardio_fitness_records": [r.to_dict() for r in cardio],
        "averages": {
            "hrv_rmssd": mean_or_none(present_values(hrv, lambda r: r.daily_rmssd), 1),
            "spo2_avg": mean_or_none(present_values(spo2, lambda r: r.avg), 1),
            "breathing_rate": mean_or_none(present_values(breathing, lambda r: r.breathing_rate), 1),
        },
        "raw_data": {
            "hrv": hrv_raw,
            "spo2": spo2_raw,
            "breathing_rate": br_raw,
            "temperature": temp_raw,
            "cardio_fitness": cardio_raw,
        },
        "insights": [],
    }
