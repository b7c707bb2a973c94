"""Window statistics shared by every metric family.

Rounding follows the consumer contract: half-way values round towards
positive infinity (``round_half_up(0.25, 1) == 0.3``), not Python's
banker's rounding.  Sleep durations use two decimals, heart rate, HRV and
efficiency one, step counts none.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Sequence, TypeVar

from fitgate.fitbit.models import BaselineComparison, WindowStats

T = TypeVar("T")


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with half-way cases going up: ``round_half_up(2.5) == 3.0``, ``round_half_up(-0.25, 1) == -0.2``."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def mean_or_none(values: Sequence[float], digits: int | None = 1) -> float | None:
    """Arithmetic mean rounded to ``digits`` (unrounded when None); None when empty."""
    if not values:
        return None
    mean = sum(values) / len(values)
    return mean if digits is None else round_half_up(mean, digits)


def window_stats(values: Sequence[float], digits: int = 1) -> WindowStats:
    """Mean, min and max of a sample window; all None when the window is empty."""
    if not values:
        return WindowStats(average=None, min_value=None, max_value=None, count=0)
    return WindowStats(
        average=mean_or_none(values, digits),
        min_value=min(values),
        max_value=max(values),
        count=len(values),
    )


def percent_difference(current: float | None, average: float | None) -> float | None:
    """``(current - average) / average * 100`` rounded to one decimal.

    None when either side is missing or the average is zero.
    """
    if current is None or not average:
        return None
    return ratio_percent(current - average, average)


def ratio_percent(part: float, whole: float) -> float:
    """``part / whole`` as a percentage with one decimal."""
    return math.floor(part / whole * 1000 + 0.5) / 10


def baseline_comparison(
    current: float | None,
    window: Sequence[float],
    digits: int = 1,
) -> BaselineComparison:
    """Compare ``current`` to the mean of a trailing window.

    The window must not contain the current sample; callers build it from
    dates strictly before the current one (see ``exclude_date``).
    """
    raw_average = mean_or_none(window, None)
    return BaselineComparison(
        current_value=current,
        baseline_average=round_half_up(raw_average, digits) if raw_average is not None else None,
        percent_difference=percent_difference(current, raw_average),
    )


def present_values(records: Iterable[T], attr: Callable[[T], Any]) -> list[float]:
    """Truthy numeric values of ``attr(record)``, skipping None and zero."""
    values: list[float] = []
    for record in records:
        value = attr(record)
        if value:
            values.append(value)
    return values


def exclude_date(records: Iterable[T], current_date: str, date_of: Callable[[T], str]) -> list[T]:
    """Drop records belonging to ``current_date`` so a baseline never contains itself."""
    return [r for r in records if date_of(r) != current_date]


def sort_by_date(records: list[T], descending: bool, date_of: Callable[[T], str] | None = None) -> list[T]:
    """Sort records by their ``YYYY-MM-DD`` date string.

    History views are most-recent-first (descending); chart views ascending.
    """
    key = date_of or (lambda r: getattr(r, "date"))
    return sorted(records, key=key, reverse=descending)
