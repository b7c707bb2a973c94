"""Recovery metric normalization: HRV, SpO2, breathing rate, skin temperature,
cardio fitness.

SpO2 by date is a single object (``{"dateTime", "value": {"avg", ...}}``)
while SpO2 by range is a bare list of such objects; every other family wraps
its days in a named list (``hrv``, ``br``, ``tempSkin``, ``cardioScore``).
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from fitgate.fitbit.models import (
    BreathingRateReading,
    CardioFitnessReading,
    HrvReading,
    Spo2Reading,
    TemperatureReading,
)
from fitgate.fitbit.normalizers import as_list, as_mapping, number_or_none, str_or_none

_VO2_RANGE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*$")


def _entries(payload: object, key: str) -> list[Mapping[str, Any]]:
    return [e for e in as_list(as_mapping(payload).get(key)) if isinstance(e, Mapping)]


def _date(entry: Mapping[str, Any], fallback: str) -> str:
    return str_or_none(entry.get("dateTime")) or fallback


# ---------------------------------------------------------------------------
# HRV
# ---------------------------------------------------------------------------


def parse_hrv_entry(entry: Mapping[str, Any], day: str = "") -> HrvReading:
    value = as_mapping(entry.get("value"))
    return HrvReading(
        date=_date(entry, day),
        daily_rmssd=number_or_none(value.get("dailyRmssd")),
        deep_rmssd=number_or_none(value.get("deepRmssd")),
    )


def parse_hrv(payload: object, day: str) -> HrvReading | None:
    entries = _entries(payload, "hrv")
    return parse_hrv_entry(entries[0], day) if entries else None


def parse_hrv_series(payload: object) -> list[HrvReading]:
    return [parse_hrv_entry(e) for e in _entries(payload, "hrv")]


# ---------------------------------------------------------------------------
# SpO2
# ---------------------------------------------------------------------------


def parse_spo2_entry(entry: Mapping[str, Any], day: str = "") -> Spo2Reading:
    value = as_mapping(entry.get("value"))
    return Spo2Reading(
        date=_date(entry, day),
        avg=number_or_none(value.get("avg")),
        min=number_or_none(value.get("min")),
        max=number_or_none(value.get("max")),
    )


def parse_spo2(payload: object, day: str) -> Spo2Reading | None:
    payload = as_mapping(payload)
    if not isinstance(payload.get("value"), Mapping):
        return None
    return parse_spo2_entry(payload, day)


def parse_spo2_series(payload: object) -> list[Spo2Reading]:
    entries = payload if isinstance(payload, list) else []
    return [parse_spo2_entry(e) for e in entries if isinstance(e, Mapping)]


# ---------------------------------------------------------------------------
# Breathing rate
# ---------------------------------------------------------------------------


def parse_breathing_rate_entry(entry: Mapping[str, Any], day: str = "") -> BreathingRateReading:
    return BreathingRateReading(
        date=_date(entry, day),
        breathing_rate=number_or_none(as_mapping(entry.get("value")).get("breathingRate")),
    )


def parse_breathing_rate(payload: object, day: str) -> BreathingRateReading | None:
    entries = _entries(payload, "br")
    return parse_breathing_rate_entry(entries[0], day) if entries else None


def parse_breathing_rate_series(payload: object) -> list[BreathingRateReading]:
    return [parse_breathing_rate_entry(e) for e in _entries(payload, "br")]


# ---------------------------------------------------------------------------
# Skin temperature
# ---------------------------------------------------------------------------


def parse_temperature_entry(entry: Mapping[str, Any], day: str = "") -> TemperatureReading:
    return TemperatureReading(
        date=_date(entry, day),
        nightly_relative=number_or_none(as_mapping(entry.get("value")).get("nightlyRelative")),
    )


def parse_temperature(payload: object, day: str) -> TemperatureReading | None:
    entries = _entries(payload, "tempSkin")
    return parse_temperature_entry(entries[0], day) if entries else None


def parse_temperature_series(payload: object) -> list[TemperatureReading]:
    return [parse_temperature_entry(e) for e in _entries(payload, "tempSkin")]


# ---------------------------------------------------------------------------
# Cardio fitness
# ---------------------------------------------------------------------------


def parse_cardio_fitness_entry(entry: Mapping[str, Any], day: str = "") -> CardioFitnessReading:
    raw = as_mapping(entry.get("value")).get("vo2Max")
    low = high = None
    text: str | None = None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        number = number_or_none(raw)
        if number is not None:
            text = f"{number:g}"
            low = high = float(number)
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        match = _VO2_RANGE.match(text)
        if match:
            low, high = float(match.group(1)), float(match.group(2))
        else:
            number = number_or_none(text)
            if number is not None:
                low = high = float(number)
    return CardioFitnessReading(date=_date(entry, day), vo2_max=text, vo2_max_low=low, vo2_max_high=high)


def parse_cardio_fitness(payload: object, day: str) -> CardioFitnessReading | None:
    entries = _entries(payload, "cardioScore")
    return parse_cardio_fitness_entry(entries[0], day) if entries else None


def parse_cardio_fitness_series(payload: object) -> list[CardioFitnessReading]:
    return [parse_cardio_fitness_entry(e) for e in _entries(payload, "cardioScore")]
