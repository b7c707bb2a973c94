"""Pure parsers turning raw Fitbit payloads into canonical records.

One module per metric family:
    sleep      — sleep log entries, stage percentages, chart rows
    heart_rate — resting heart rate and heart rate zones
    activity   — daily summary, step series, active zone minutes, exercise logs
    recovery   — HRV, SpO2, breathing rate, skin temperature, cardio fitness

Parsers never raise on missing or ill-typed fields.  A value the provider
omits, or reports as zero, becomes ``None``.
"""

from __future__ import annotations

import math
from typing import Any, Mapping


def as_mapping(value: object) -> Mapping[str, Any]:
    """``value`` if it is a mapping, else an empty one."""
    return value if isinstance(value, Mapping) else {}


def as_list(value: object) -> list[Any]:
    return value if isinstance(value, list) else []


def number_or_none(value: object) -> float | int | None:
    """Numeric value, or None for missing, zero, non-finite, non-numeric, or boolean input.

    Numeric strings (the step series reports ``"8123"``) are converted.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value or None
    if isinstance(value, float):
        return value if value and math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return None
        if not parsed or not math.isfinite(parsed):
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


def int_or_none(value: object) -> int | None:
    number = number_or_none(value)
    return int(number) if number is not None else None


def str_or_none(value: object) -> str | None:
    return value if isinstance(value, str) and value else None
