"""Generic helpers shared by every analytics engine.

All helpers are pure. Dates are normalized through `as_datetime`, so a
record with a missing or unparseable date is dropped from date-based
aggregates instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from src.domain.models.metrics import MetricChange, PeriodWindow
from src.domain.value_objects.trend import Trend
from src.utils.datetime_tz import (
    add_months,
    as_datetime,
    end_of_month,
    format_month_label,
    start_of_month,
    to_utc,
    utc_now,
)

T = TypeVar("T")

DateSelector = Callable[[T], Any]

# Percentage changes within this band are reported as stable
STABLE_BAND_PERCENT = 2


@dataclass(slots=True)
class MonthBucket(Generic[T]):
    start: datetime
    end: datetime
    label: str
    items: list[T] = field(default_factory=list)


def resolve_now(now: datetime | None) -> datetime:
    """Use the injected clock value when given, wall-clock UTC otherwise."""
    return to_utc(now) if now is not None else utc_now()


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves toward positive infinity, as browsers round for display."""
    factor = 10**ndigits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if ndigits == 0 else rounded


def safe_ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def compute_change(current: float, previous: float) -> MetricChange:
    change = current - previous
    # A zero baseline carries no trend signal
    percentage_change = (change / previous) * 100 if previous != 0 else 0.0

    trend = Trend.STABLE
    if abs(percentage_change) > STABLE_BAND_PERCENT:
        trend = Trend.UP if percentage_change > 0 else Trend.DOWN

    return MetricChange(
        current=current,
        previous=previous,
        change=change,
        percentage_change=percentage_change,
        trend=trend,
    )


def filter_by_date_range(
    collection: Iterable[T],
    date_selector: DateSelector,
    start: datetime,
    end: datetime,
) -> list[T]:
    """Keep records whose date falls within [start, end], both bounds inclusive."""
    result: list[T] = []
    for item in collection:
        dt = as_datetime(date_selector(item))
        if dt is None:
            continue
        if start <= dt <= end:
            result.append(item)
    return result


def filter_until(collection: Iterable[T], date_selector: DateSelector, end: datetime) -> list[T]:
    """Keep records dated on or before `end`."""
    result: list[T] = []
    for item in collection:
        dt = as_datetime(date_selector(item))
        if dt is not None and dt <= end:
            result.append(item)
    return result


def month_windows(months_back: int, now: datetime) -> list[PeriodWindow]:
    """`months_back + 1` contiguous calendar months, oldest first, ending at `now`'s month."""
    current = start_of_month(now)
    windows: list[PeriodWindow] = []
    for offset in range(months_back, -1, -1):
        month_start = add_months(current, -offset)
        windows.append(
            PeriodWindow(
                start=month_start,
                end=end_of_month(month_start),
                label=format_month_label(month_start),
            )
        )
    return windows


def bucket_by_month(
    records: Iterable[T],
    date_selector: DateSelector,
    months_back: int,
    now: datetime,
) -> list[MonthBucket[T]]:
    records = list(records)
    buckets = [
        MonthBucket(start=w.start, end=w.end, label=w.label)
        for w in month_windows(months_back, now)
    ]
    for item in records:
        dt = as_datetime(date_selector(item))
        if dt is None:
            continue
        for bucket in buckets:
            if bucket.start <= dt <= bucket.end:
                bucket.items.append(item)
                break
    return buckets


def sort_by_date(
    records: Iterable[T],
    date_selector: DateSelector,
    *,
    descending: bool = False,
) -> list[T]:
    """Stable sort by date; records without a usable date are dropped."""
    dated = [(as_datetime(date_selector(r)), r) for r in records]
    kept = [(dt, r) for dt, r in dated if dt is not None]
    kept.sort(key=lambda pair: pair[0], reverse=descending)
    return [r for _, r in kept]


def group_by(records: Iterable[T], key: Callable[[T], Any]) -> dict[Any, list[T]]:
    groups: dict[Any, list[T]] = {}
    for item in records:
        groups.setdefault(key(item), []).append(item)
    return groups
