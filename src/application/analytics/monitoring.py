"""Metric monitoring on top of the statistics report.

Real-time deltas compare the full dataset against the dataset as it stood
at the end of the previous calendar month. Period comparisons and the
12-month benchmark re-run the statistics report on date-filtered slices.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from collections.abc import Iterable, Sequence
from datetime import datetime
from uuid import uuid4

from src.application.analytics.aggregation import (
    compute_change,
    filter_by_date_range,
    filter_until,
    mean,
    month_windows,
    resolve_now,
    safe_ratio,
)
from src.application.analytics.statistics import generate_report
from src.domain.models.alert import AlertThreshold, MetricAlert, default_thresholds
from src.domain.models.animal import Animal
from src.domain.models.cage import Cage
from src.domain.models.herd import HerdSnapshot
from src.domain.models.litter import Litter
from src.domain.models.metrics import (
    Benchmark,
    MetricChange,
    PeriodComparison,
    PeriodWindow,
    RealTimeMetrics,
)
from src.domain.models.statistics_report import StatisticsReport
from src.domain.models.treatment import Treatment
from src.domain.models.weight_record import WeightRecord
from src.domain.value_objects.period_type import PeriodType
from src.domain.value_objects.severity import Severity
from src.utils.datetime_tz import (
    add_months,
    as_datetime,
    end_of_month,
    format_month_long,
    start_of_month,
)

logger = logging.getLogger(__name__)

BENCHMARK_MONTHS_BACK = 11  # twelve monthly snapshots including the current month


def calculate_real_time_metrics(
    animals: Sequence[Animal],
    litters: Sequence[Litter],
    weights: Sequence[WeightRecord],
    treatments: Sequence[Treatment],
    cages: Sequence[Cage] = (),
    *,
    now: datetime | None = None,
) -> RealTimeMetrics:
    now = resolve_now(now)
    previous_cutoff = end_of_month(add_months(now, -1))

    current = generate_report(animals, litters, weights, treatments, cages, now=now)
    previous = generate_report(
        filter_until(animals, lambda a: animal_reference_date(a, now), previous_cutoff),
        filter_until(litters, lambda litter: litter.kindling_date, previous_cutoff),
        filter_until(weights, lambda w: w.date, previous_cutoff),
        filter_until(treatments, lambda t: t.date, previous_cutoff),
        cages,
        now=now,
    )

    return RealTimeMetrics(
        total_animals=compute_change(
            current.overview.total_animals, previous.overview.total_animals
        ),
        reproduction_rate=compute_change(
            current.reproduction.reproduction_rate, previous.reproduction.reproduction_rate
        ),
        survival_rate=compute_change(
            current.reproduction.survival_rate, previous.reproduction.survival_rate
        ),
        average_weight=compute_change(
            current.overview.average_weight, previous.overview.average_weight
        ),
        treatment_count=compute_change(
            current.health.total_treatments, previous.health.total_treatments
        ),
        consumption_rate=compute_change(
            current.consumption.total_consumed, previous.consumption.total_consumed
        ),
        last_updated=now,
    )


def period_windows(
    period_type: PeriodType | str, now: datetime
) -> tuple[PeriodWindow, PeriodWindow]:
    """Current and immediately preceding window of the given granularity."""
    period_type = PeriodType(period_type)

    if period_type is PeriodType.MONTH:
        current_start = start_of_month(now)
        previous_start = add_months(current_start, -1)
        return (
            PeriodWindow(current_start, end_of_month(current_start), format_month_long(now)),
            PeriodWindow(
                previous_start, end_of_month(previous_start), format_month_long(previous_start)
            ),
        )

    if period_type is PeriodType.QUARTER:
        quarter = (now.month - 1) // 3
        current_start = start_of_month(now).replace(month=quarter * 3 + 1)
        previous_start = add_months(current_start, -3)
        previous_quarter = (previous_start.month - 1) // 3
        return (
            PeriodWindow(
                current_start,
                end_of_month(add_months(current_start, 2)),
                f"Q{quarter + 1} {current_start.year}",
            ),
            PeriodWindow(
                previous_start,
                end_of_month(add_months(previous_start, 2)),
                f"Q{previous_quarter + 1} {previous_start.year}",
            ),
        )

    current_start = start_of_month(now).replace(month=1)
    previous_start = current_start.replace(year=current_start.year - 1)
    return (
        PeriodWindow(
            current_start, end_of_month(current_start.replace(month=12)), str(current_start.year)
        ),
        PeriodWindow(
            previous_start,
            end_of_month(previous_start.replace(month=12)),
            str(previous_start.year),
        ),
    )


def generate_period_comparison(
    animals: Sequence[Animal],
    litters: Sequence[Litter],
    weights: Sequence[WeightRecord],
    treatments: Sequence[Treatment],
    period_type: PeriodType | str = PeriodType.MONTH,
    *,
    now: datetime | None = None,
) -> PeriodComparison:
    now = resolve_now(now)
    herd = HerdSnapshot(
        animals=list(animals),
        litters=list(litters),
        weights=list(weights),
        treatments=list(treatments),
    )
    current_window, previous_window = period_windows(period_type, now)

    current = _report_for_window(herd, current_window, now)
    previous = _report_for_window(herd, previous_window, now)

    metrics = {
        "totalAnimals": compute_change(
            current.overview.total_animals, previous.overview.total_animals
        ),
        "reproductionRate": compute_change(
            current.reproduction.reproduction_rate, previous.reproduction.reproduction_rate
        ),
        "survivalRate": compute_change(
            current.reproduction.survival_rate, previous.reproduction.survival_rate
        ),
        "averageWeight": compute_change(
            current.overview.average_weight, previous.overview.average_weight
        ),
        "totalLitters": compute_change(
            current.reproduction.total_litters, previous.reproduction.total_litters
        ),
        "treatmentCount": compute_change(
            current.health.total_treatments, previous.health.total_treatments
        ),
    }

    return PeriodComparison(
        current_period=current_window,
        previous_period=previous_window,
        metrics=metrics,
    )


def merge_thresholds(custom_thresholds: Iterable[AlertThreshold] = ()) -> list[AlertThreshold]:
    """Default thresholds followed by caller thresholds.

    A caller threshold with the same condition as a default replaces it in
    place, so callers can disable or re-word a default.
    """
    merged = {t.condition_key(): t for t in default_thresholds()}
    for threshold in custom_thresholds:
        merged[threshold.condition_key()] = threshold
    return list(merged.values())


def check_alerts(
    metrics: RealTimeMetrics,
    custom_thresholds: Iterable[AlertThreshold] = (),
    *,
    now: datetime | None = None,
) -> list[MetricAlert]:
    now = resolve_now(now)
    alerts: list[MetricAlert] = []

    for threshold in merge_thresholds(custom_thresholds):
        if not threshold.enabled:
            continue

        change = metrics.get(threshold.metric)
        if change is None:
            logger.debug("Skipping threshold for unknown metric %s", threshold.metric)
            continue
        value = change.current

        if threshold.min_value is not None and value < threshold.min_value:
            severity = _bound_severity(threshold.min_value - value, threshold.min_value)
            alerts.append(_build_alert(threshold, value, threshold.min_value, severity, now))

        if threshold.max_value is not None and value > threshold.max_value:
            severity = _bound_severity(value - threshold.max_value, threshold.max_value)
            alerts.append(_build_alert(threshold, value, threshold.max_value, severity, now))

        if threshold.change_threshold is not None and _change_breached(change, threshold):
            excess = abs(change.percentage_change) - abs(threshold.change_threshold)
            alerts.append(
                _build_alert(
                    threshold, value, threshold.change_threshold, _change_severity(excess), now
                )
            )

    return alerts


def calculate_benchmarks(
    animals: Sequence[Animal],
    litters: Sequence[Litter],
    weights: Sequence[WeightRecord],
    treatments: Sequence[Treatment],
    *,
    now: datetime | None = None,
) -> dict[str, Benchmark]:
    now = resolve_now(now)
    herd = HerdSnapshot(
        animals=list(animals),
        litters=list(litters),
        weights=list(weights),
        treatments=list(treatments),
    )

    snapshots = [
        _report_for_window(herd, window, now, as_of=window.end)
        for window in month_windows(BENCHMARK_MONTHS_BACK, now)
    ]
    current = snapshots[-1]

    return {
        "reproductionRate": calculate_benchmark(
            current.reproduction.reproduction_rate,
            [s.reproduction.reproduction_rate for s in snapshots],
        ),
        "survivalRate": calculate_benchmark(
            current.reproduction.survival_rate,
            [s.reproduction.survival_rate for s in snapshots],
        ),
        "averageWeight": calculate_benchmark(
            current.overview.average_weight,
            [s.overview.average_weight for s in snapshots],
        ),
    }


def calculate_benchmark(current: float, history: Sequence[float]) -> Benchmark:
    valid = sorted(v for v in history if v > 0)
    if not valid:
        return Benchmark(current=current, best=current, average=current, percentile=50)

    rank = bisect_left(valid, current)
    return Benchmark(
        current=current,
        best=valid[-1],
        average=mean(valid),
        percentile=rank / len(valid) * 100,
    )


def animal_reference_date(animal: Animal, now: datetime) -> object:
    """Birth date when usable, then the record's creation date, then `now`."""
    if as_datetime(animal.birth_date) is not None:
        return animal.birth_date
    if as_datetime(animal.created_at) is not None:
        return animal.created_at
    return now


def filter_herd_by_period(
    herd: HerdSnapshot, start: datetime, end: datetime, now: datetime
) -> HerdSnapshot:
    return HerdSnapshot(
        animals=filter_by_date_range(
            herd.animals, lambda a: animal_reference_date(a, now), start, end
        ),
        litters=filter_by_date_range(herd.litters, lambda litter: litter.kindling_date, start, end),
        weights=filter_by_date_range(herd.weights, lambda w: w.date, start, end),
        treatments=filter_by_date_range(herd.treatments, lambda t: t.date, start, end),
    )


def _report_for_window(
    herd: HerdSnapshot, window: PeriodWindow, now: datetime, *, as_of: datetime | None = None
) -> StatisticsReport:
    sliced = filter_herd_by_period(herd, window.start, window.end, now)
    return generate_report(
        sliced.animals, sliced.litters, sliced.weights, sliced.treatments, [], now=as_of or now
    )


def _change_breached(change: MetricChange, threshold: AlertThreshold) -> bool:
    return abs(change.percentage_change) > abs(threshold.change_threshold)


def _bound_severity(breach: float, bound: float) -> Severity:
    relative = safe_ratio(breach, abs(bound)) * 100
    if relative > 20:
        return Severity.HIGH
    if relative > 10:
        return Severity.MEDIUM
    return Severity.LOW


def _change_severity(excess_points: float) -> Severity:
    if excess_points > 30:
        return Severity.HIGH
    if excess_points > 15:
        return Severity.MEDIUM
    return Severity.LOW


def _build_alert(
    threshold: AlertThreshold,
    value: float,
    breached: float,
    severity: Severity,
    now: datetime,
) -> MetricAlert:
    return MetricAlert(
        id=f"{threshold.metric}-{int(now.timestamp() * 1000)}-{uuid4().hex[:9]}",
        metric=threshold.metric,
        message=threshold.message,
        severity=severity,
        timestamp=now,
        acknowledged=False,
        current_value=value,
        threshold=breached,
    )
