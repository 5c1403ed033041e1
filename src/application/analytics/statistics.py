"""Herd-wide statistics report.

`generate_report` folds the five entity collections into the overview,
reproduction, growth, consumption and health sections. Empty inputs give
an all-zero report whose trend and distribution lists keep their fixed
lengths.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime

from src.application.analytics.aggregation import (
    bucket_by_month,
    group_by,
    mean,
    resolve_now,
    round_half_up,
    safe_ratio,
    sort_by_date,
)
from src.domain.models.animal import Animal
from src.domain.models.cage import Cage
from src.domain.models.litter import Litter
from src.domain.models.statistics_report import (
    ConsumptionStats,
    GrowthStats,
    HealthStats,
    MonthlyConsumption,
    MonthlyCount,
    MonthlyWeight,
    OverviewStats,
    ProductCount,
    ReproductionStats,
    StatisticsReport,
    WeightBucket,
)
from src.domain.models.treatment import Treatment
from src.domain.models.weight_record import WeightRecord
from src.domain.value_objects.animal_status import AnimalStatus
from src.domain.value_objects.sex import Sex
from src.utils.datetime_tz import as_datetime, days_between, end_of_month, start_of_month

TREND_MONTHS_BACK = 5  # six monthly points including the current month
COMMON_TREATMENTS_LIMIT = 5

# (label, lower bound inclusive, upper bound exclusive)
WEIGHT_BUCKETS: tuple[tuple[str, float, float], ...] = (
    ("0-500g", 0, 500),
    ("500-1000g", 500, 1000),
    ("1000-1500g", 1000, 1500),
    ("1500-2000g", 1500, 2000),
    ("2000g+", 2000, float("inf")),
)


def generate_report(
    animals: Sequence[Animal],
    litters: Sequence[Litter],
    weights: Sequence[WeightRecord],
    treatments: Sequence[Treatment],
    cages: Sequence[Cage],
    *,
    now: datetime | None = None,
) -> StatisticsReport:
    now = resolve_now(now)
    return StatisticsReport(
        overview=calculate_overview(animals, weights, cages, now=now),
        reproduction=calculate_reproduction(animals, litters, now=now),
        growth=calculate_growth(animals, weights, now=now),
        consumption=calculate_consumption(animals, now=now),
        health=calculate_health(treatments, now=now),
        generated_at=now,
    )


def calculate_overview(
    animals: Sequence[Animal],
    weights: Sequence[WeightRecord],
    cages: Sequence[Cage],
    *,
    now: datetime,
) -> OverviewStats:
    active = [a for a in animals if a.is_active]
    by_status = Counter(a.status for a in animals)

    ages: list[int] = []
    for animal in animals:
        birth = as_datetime(animal.birth_date)
        if birth is not None:
            ages.append(days_between(birth, now))

    weights_by_animal = group_by(weights, lambda w: w.animal_id)
    latest_weights = [
        w for w in (_latest_weight(weights_by_animal.get(a.id, [])) for a in active) if w > 0
    ]

    occupied = {a.cage_id for a in active if a.cage_id}
    occupancy = safe_ratio(len(occupied), len(cages)) * 100

    return OverviewStats(
        total_animals=len(animals),
        active_animals=len(active),
        breeders=by_status[AnimalStatus.BREEDER],
        growing=by_status[AnimalStatus.GROWING],
        retired=by_status[AnimalStatus.RETIRED],
        consumed=by_status[AnimalStatus.CONSUMED],
        deceased=by_status[AnimalStatus.DECEASED],
        average_age=round_half_up(mean(ages)),
        average_weight=round_half_up(mean(latest_weights)),
        cage_occupancy=round_half_up(occupancy),
    )


def calculate_reproduction(
    animals: Sequence[Animal],
    litters: Sequence[Litter],
    *,
    now: datetime,
) -> ReproductionStats:
    breeding_females = [
        a for a in animals if a.sex == Sex.FEMALE and a.status == AnimalStatus.BREEDER
    ]
    month_start, month_end = start_of_month(now), end_of_month(now)

    total_offspring = sum(litter.born_alive for litter in litters)
    total_weaned = sum(litter.weaned_count or 0 for litter in litters)
    survival_rate = safe_ratio(total_weaned, total_offspring) * 100

    kindlings_this_month = 0
    expected_kindlings = 0
    for litter in litters:
        kindled = as_datetime(litter.kindling_date)
        if kindled is not None and month_start <= kindled <= month_end:
            kindlings_this_month += 1
        if litter.kindling_date is None and as_datetime(litter.breeding_date) is not None:
            expected_kindlings += 1

    reproduction_rate = safe_ratio(len(litters), len(breeding_females)) * 12

    return ReproductionStats(
        total_litters=len(litters),
        total_offspring=total_offspring,
        average_litter_size=safe_ratio(total_offspring, len(litters)),
        survival_rate=round_half_up(survival_rate),
        reproduction_rate=round_half_up(reproduction_rate, 2),
        kindlings_this_month=kindlings_this_month,
        expected_kindlings=expected_kindlings,
    )


def calculate_growth(
    animals: Sequence[Animal],
    weights: Sequence[WeightRecord],
    *,
    now: datetime,
) -> GrowthStats:
    growing = [a for a in animals if a.status == AnimalStatus.GROWING]
    weights_by_animal = group_by(weights, lambda w: w.animal_id)

    gains: list[tuple[Animal, float]] = []
    for animal in growing:
        gain = daily_gain(weights_by_animal.get(animal.id, []))
        if gain is not None:
            gains.append((animal, gain))

    ranked = sorted(gains, key=lambda pair: pair[1], reverse=True)
    fastest = ranked[0][0] if ranked else None
    slowest = ranked[-1][0] if ranked else None

    current_weights = [
        w
        for w in (_latest_weight(weights_by_animal.get(a.id, [])) for a in growing)
        if w > 0
    ]
    distribution = [
        WeightBucket(range=label, count=sum(1 for w in current_weights if low <= w < high))
        for label, low, high in WEIGHT_BUCKETS
    ]

    trends = [
        MonthlyWeight(
            month=bucket.label,
            average_weight=round_half_up(mean(w.weight_grams for w in bucket.items)),
        )
        for bucket in bucket_by_month(weights, lambda w: w.date, TREND_MONTHS_BACK, now)
    ]

    return GrowthStats(
        average_weight_gain=round_half_up(mean(g for _, g in gains), 2),
        fastest_growing=fastest,
        slowest_growing=slowest,
        weight_distribution=distribution,
        growth_trends=trends,
    )


def calculate_consumption(animals: Sequence[Animal], *, now: datetime) -> ConsumptionStats:
    consumed = [a for a in animals if a.status == AnimalStatus.CONSUMED]
    month_start, month_end = start_of_month(now), end_of_month(now)

    total_weight = sum(a.consumed_weight or 0 for a in consumed)
    consumed_this_month = 0
    for animal in consumed:
        consumed_at = as_datetime(animal.consumed_date)
        if consumed_at is not None and month_start <= consumed_at <= month_end:
            consumed_this_month += 1

    trends = [
        MonthlyConsumption(
            month=bucket.label,
            count=len(bucket.items),
            weight=round_half_up(sum(a.consumed_weight or 0 for a in bucket.items)),
        )
        for bucket in bucket_by_month(consumed, lambda a: a.consumed_date, TREND_MONTHS_BACK, now)
    ]

    return ConsumptionStats(
        total_consumed=len(consumed),
        total_weight=round_half_up(total_weight),
        average_consumption_weight=round_half_up(safe_ratio(total_weight, len(consumed))),
        consumed_this_month=consumed_this_month,
        consumption_trends=trends,
    )


def calculate_health(treatments: Sequence[Treatment], *, now: datetime) -> HealthStats:
    active_withdrawals = 0
    for treatment in treatments:
        until = as_datetime(treatment.withdrawal_until)
        if until is not None and until > now:
            active_withdrawals += 1

    # most_common keeps first-encountered order among equal counts
    counts = Counter(t.product for t in treatments)
    common = [
        ProductCount(product=product, count=count)
        for product, count in counts.most_common(COMMON_TREATMENTS_LIMIT)
    ]

    trends = [
        MonthlyCount(month=bucket.label, count=len(bucket.items))
        for bucket in bucket_by_month(treatments, lambda t: t.date, TREND_MONTHS_BACK, now)
    ]

    return HealthStats(
        total_treatments=len(treatments),
        active_withdrawals=active_withdrawals,
        common_treatments=common,
        treatment_trends=trends,
    )


def daily_gain(records: Sequence[WeightRecord]) -> float | None:
    """Grams per day between the first and last weighing, None if not measurable."""
    ordered = sort_by_date(records, lambda w: w.date)
    if len(ordered) < 2:
        return None
    first, last = ordered[0], ordered[-1]
    days = days_between(as_datetime(first.date), as_datetime(last.date))
    if days <= 0:
        return None
    return (last.weight_grams - first.weight_grams) / days


def _latest_weight(records: Sequence[WeightRecord]) -> float:
    ordered = sort_by_date(records, lambda w: w.date, descending=True)
    return ordered[0].weight_grams if ordered else 0
