"""Calendar helpers and the day-count clamping policy."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from fitgate.fitbit.config_loader import DayRange

logger = logging.getLogger("fitgate.fitbit.dates")


def format_date(d: date) -> str:
    """``YYYY-MM-DD`` as the provider expects it."""
    return d.isoformat()


def utc_today() -> date:
    """The current calendar day in UTC, the clock every report uses."""
    return datetime.now(timezone.utc).date()


def days_ago(n: int, today: date | None = None) -> date:
    return (today or utc_today()) - timedelta(days=n)


def _as_int(raw: object) -> int | None:
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    try:
        number = float(raw.strip() if isinstance(raw, str) else raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return int(number) if math.isfinite(number) else None


def clamp_days(raw: object, day_range: DayRange) -> int:
    """Clamp a caller-supplied day count into ``day_range``.

    Missing, non-numeric or zero input falls back to the range default;
    numbers are truncated towards zero before clamping (``"7.9"`` → 7).
    """
    value = _as_int(raw)
    if not value:
        logger.debug("Day count %r not usable; using default %d", raw, day_range.default)
        return day_range.default
    return min(max(value, day_range.min), day_range.max)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive calendar window."""

    start: date
    end: date

    @property
    def start_str(self) -> str:
        return format_date(self.start)

    @property
    def end_str(self) -> str:
        return format_date(self.end)

    @property
    def span_days(self) -> int:
        return (self.end - self.start).days + 1

    @classmethod
    def ending_yesterday(cls, days: int, today: date | None = None) -> DateWindow:
        """``[today - days, today - 1]`` — history views exclude today."""
        return cls(start=days_ago(days, today), end=days_ago(1, today))

    @classmethod
    def ending_today(cls, days: int, today: date | None = None) -> DateWindow:
        """``[today - days, today]`` — chart views include last night."""
        return cls(start=days_ago(days, today), end=today or utc_today())
