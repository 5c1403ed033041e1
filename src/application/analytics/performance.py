"""Individual animal performance reports.

An animal's report combines a health score with reproduction and growth
sub-scores (each only where it applies), then compares the animal against
peers of the same sex and status.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from src.application.analytics.aggregation import (
    group_by,
    mean,
    resolve_now,
    round_half_up,
    safe_ratio,
    sort_by_date,
)
from src.application.analytics.statistics import daily_gain
from src.domain.models.animal import Animal
from src.domain.models.litter import Litter
from src.domain.models.performance_report import (
    BasicInfo,
    ComparedToAverage,
    ComparedToPeers,
    GrowthPerformance,
    GrowthRate,
    HealthStatus,
    IndividualPerformanceReport,
    LitterPoint,
    OverallPerformance,
    PerformanceComparisons,
    PerformanceReportOptions,
    PerformanceTrends,
    Ranking,
    ReproductionPerformance,
    WeightPoint,
)
from src.domain.models.treatment import Treatment
from src.domain.models.weight_record import WeightRecord
from src.domain.value_objects.animal_status import AnimalStatus
from src.domain.value_objects.sex import Sex
from src.utils.datetime_tz import add_months, as_datetime, days_between

HEALTH_WEIGHT = 0.4
REPRODUCTION_WEIGHT = 0.3
GROWTH_WEIGHT = 0.3
RECENT_TREATMENT_DAYS = 30
# Placeholder until breeding outcome records are available
PREGNANCY_SUCCESS_PLACEHOLDER = 85


def generate_individual_report(
    animal: Animal,
    all_animals: Sequence[Animal],
    litters: Sequence[Litter],
    weights: Sequence[WeightRecord],
    treatments: Sequence[Treatment],
    options: PerformanceReportOptions | None = None,
    *,
    now: datetime | None = None,
) -> IndividualPerformanceReport:
    options = options or PerformanceReportOptions()
    now = resolve_now(now)

    animal_litters = [litter for litter in litters if litter.involves(animal.id)]
    animal_weights = [w for w in weights if w.animal_id == animal.id]
    animal_treatments = [t for t in treatments if t.animal_id == animal.id]

    basic_info = calculate_basic_info(animal, animal_weights, now=now)

    reproduction = None
    if animal.sex == Sex.FEMALE or animal.status == AnimalStatus.BREEDER:
        reproduction = calculate_reproduction_performance(animal, animal_litters, now=now)

    growth = None
    if animal.status == AnimalStatus.GROWING:
        growth = calculate_growth_performance(animal_weights, options.target_weight)

    health = calculate_health_status(animal_treatments, now=now)
    performance = calculate_overall_performance(reproduction, growth, health, options)

    if options.include_trends:
        trends = calculate_trends(
            animal, animal_weights, animal_litters, options.period_months, now=now
        )
    else:
        trends = PerformanceTrends()

    if options.include_comparisons:
        comparisons = calculate_comparisons(
            animal, all_animals, litters, weights, basic_info, reproduction, growth
        )
    else:
        comparisons = PerformanceComparisons()

    return IndividualPerformanceReport(
        animal=animal,
        basic_info=basic_info,
        reproduction_performance=reproduction,
        growth_performance=growth,
        health_status=health,
        performance=performance,
        trends=trends,
        comparisons=comparisons,
    )


def generate_batch_reports(
    animals: Sequence[Animal],
    litters: Sequence[Litter],
    weights: Sequence[WeightRecord],
    treatments: Sequence[Treatment],
    options: PerformanceReportOptions | None = None,
    *,
    now: datetime | None = None,
) -> list[IndividualPerformanceReport]:
    now = resolve_now(now)
    return [
        generate_individual_report(animal, animals, litters, weights, treatments, options, now=now)
        for animal in animals
    ]


def describe_age(age_days: int) -> str:
    if age_days <= 0:
        return "Unknown age"
    if age_days < 30:
        return f"{age_days} days old"
    if age_days < 365:
        months = age_days // 30
        return f"{months} month{'s' if months > 1 else ''} old"
    years = age_days // 365
    remaining_months = (age_days % 365) // 30
    text = f"{years} year{'s' if years > 1 else ''}"
    if remaining_months > 0:
        text += f" {remaining_months} month{'s' if remaining_months > 1 else ''}"
    return f"{text} old"


def calculate_basic_info(
    animal: Animal, weights: Sequence[WeightRecord], *, now: datetime
) -> BasicInfo:
    birth = as_datetime(animal.birth_date)
    age = days_between(birth, now) if birth is not None else 0
    ordered = sort_by_date(weights, lambda w: w.date)
    return BasicInfo(
        age=age,
        age_description=describe_age(age),
        status=animal.status,
        current_weight=ordered[-1].weight_grams if ordered else None,
        breed=animal.breed,
        cage_id=animal.cage_id,
    )


def calculate_reproduction_performance(
    animal: Animal, litters: Sequence[Litter], *, now: datetime
) -> ReproductionPerformance:
    total_litters = len(litters)
    total_offspring = sum(litter.born_alive for litter in litters)

    kindled = sort_by_date(litters, lambda litter: litter.kindling_date, descending=True)
    last_litter_date = as_datetime(kindled[0].kindling_date) if kindled else None

    efficiency = 0.0
    birth = as_datetime(animal.birth_date)
    if birth is not None and total_offspring > 0:
        age_years = days_between(birth, now) / 365
        efficiency = total_offspring / max(age_years, 0.1)

    return ReproductionPerformance(
        total_litters=total_litters,
        total_offspring=total_offspring,
        average_litter_size=safe_ratio(total_offspring, total_litters),
        reproduction_efficiency=efficiency,
        pregnancy_success=PREGNANCY_SUCCESS_PLACEHOLDER if total_litters > 0 else 0,
        last_litter_date=last_litter_date,
    )


def classify_growth_rate(daily_weight_gain: float) -> GrowthRate:
    if daily_weight_gain > 30:
        return "excellent"
    if daily_weight_gain > 20:
        return "good"
    if daily_weight_gain < 10:
        return "poor"
    return "average"


def calculate_growth_performance(
    weights: Sequence[WeightRecord], target_weight: float
) -> GrowthPerformance:
    ordered = sort_by_date(weights, lambda w: w.date)
    if not ordered:
        return GrowthPerformance(
            current_weight=0,
            weight_gain=0,
            daily_weight_gain=0,
            growth_rate="average",
            target_weight=target_weight,
            days_to_target=0,
        )

    current_weight = ordered[-1].weight_grams
    weight_gain = current_weight - ordered[0].weight_grams
    daily = daily_gain(ordered) or 0.0

    days_to_target = 0
    if daily > 0:
        days_to_target = max(0, math.ceil((target_weight - current_weight) / daily))

    return GrowthPerformance(
        current_weight=current_weight,
        weight_gain=weight_gain,
        daily_weight_gain=daily,
        growth_rate=classify_growth_rate(daily),
        target_weight=target_weight,
        days_to_target=days_to_target,
    )


def calculate_health_status(treatments: Sequence[Treatment], *, now: datetime) -> HealthStatus:
    recent_cutoff = now - timedelta(days=RECENT_TREATMENT_DAYS)
    recent = 0
    for treatment in treatments:
        treated_at = as_datetime(treatment.date)
        if treated_at is not None and treated_at >= recent_cutoff:
            recent += 1

    withdrawal_ends = [
        end for end in (as_datetime(t.withdrawal_until) for t in treatments) if end is not None
    ]
    active_ends = [end for end in withdrawal_ends if end > now]

    if active_ends:
        withdrawal_status = "active"
    elif withdrawal_ends:
        withdrawal_status = "expired"
    else:
        withdrawal_status = "none"

    score = 100
    score -= min(len(treatments) * 5, 30)
    score -= recent * 10
    if active_ends:
        score -= 20

    return HealthStatus(
        total_treatments=len(treatments),
        recent_treatments=recent,
        withdrawal_status=withdrawal_status,
        health_score=max(0, score),
        withdrawal_ends_at=max(active_ends) if active_ends else None,
    )


def calculate_overall_performance(
    reproduction: ReproductionPerformance | None,
    growth: GrowthPerformance | None,
    health: HealthStatus,
    options: PerformanceReportOptions,
) -> OverallPerformance:
    strengths: list[str] = []
    recommendations: list[str] = []

    weighted = health.health_score * HEALTH_WEIGHT
    applied_weight = HEALTH_WEIGHT
    if health.health_score > 90:
        strengths.append("Excellent health record")
    elif health.health_score < 70:
        recommendations.append("Monitor health closely and consider preventive care")

    if reproduction is not None:
        repro_score = 50
        if reproduction.average_litter_size > 8:
            repro_score += 30
            strengths.append("High litter size productivity")
        elif reproduction.average_litter_size < 6:
            repro_score -= 20
            recommendations.append("Consider improving breeding conditions or nutrition")
        if reproduction.reproduction_efficiency > 40:
            repro_score += 20
            strengths.append("High reproduction efficiency")
        weighted += min(100, repro_score) * REPRODUCTION_WEIGHT
        applied_weight += REPRODUCTION_WEIGHT

    if growth is not None:
        growth_score = 50
        if growth.growth_rate == "excellent":
            growth_score += 40
            strengths.append("Excellent growth rate")
        elif growth.growth_rate == "good":
            growth_score += 20
            strengths.append("Good growth performance")
        elif growth.growth_rate == "poor":
            growth_score -= 30
            recommendations.append("Review nutrition and feeding schedule")
        weighted += min(100, growth_score) * GROWTH_WEIGHT
        applied_weight += GROWTH_WEIGHT

    if options.renormalize_score:
        weighted = weighted / applied_weight

    ranking = classify_ranking(weighted)
    if ranking == "needs_improvement":
        recommendations.append("Consider comprehensive health and nutrition review")

    return OverallPerformance(
        overall_score=round_half_up(weighted),
        ranking=ranking,
        strengths=strengths,
        recommendations=recommendations if options.include_recommendations else [],
    )


def classify_ranking(score: float) -> Ranking:
    if score >= 90:
        return "excellent"
    if score >= 75:
        return "good"
    if score < 60:
        return "needs_improvement"
    return "average"


def calculate_trends(
    animal: Animal,
    weights: Sequence[WeightRecord],
    litters: Sequence[Litter],
    period_months: int,
    *,
    now: datetime,
) -> PerformanceTrends:
    cutoff = add_months(now, -period_months)

    weight_trend = [
        WeightPoint(date=as_datetime(w.date), weight=w.weight_grams)
        for w in sort_by_date(weights, lambda w: w.date)
        if as_datetime(w.date) >= cutoff
    ]

    reproduction_trend = None
    if animal.sex == Sex.FEMALE:
        reproduction_trend = [
            LitterPoint(date=as_datetime(litter.kindling_date), litter_size=litter.born_alive)
            for litter in sort_by_date(litters, lambda litter: litter.kindling_date)
            if as_datetime(litter.kindling_date) >= cutoff
        ]

    return PerformanceTrends(weight_trend=weight_trend, reproduction_trend=reproduction_trend)


def calculate_comparisons(
    animal: Animal,
    all_animals: Sequence[Animal],
    all_litters: Sequence[Litter],
    all_weights: Sequence[WeightRecord],
    basic_info: BasicInfo,
    reproduction: ReproductionPerformance | None,
    growth: GrowthPerformance | None,
) -> PerformanceComparisons:
    peers = [
        a
        for a in all_animals
        if a.id != animal.id and a.sex == animal.sex and a.status == animal.status
    ]
    weights_by_animal = group_by(all_weights, lambda w: w.animal_id)

    peer_latest = [_latest_weight(weights_by_animal.get(p.id, [])) for p in peers]
    current_weight = basic_info.current_weight or 0
    weight_delta = _percent_difference(current_weight, [w for w in peer_latest if w > 0])

    reproduction_delta = None
    if reproduction is not None:
        peer_sizes = []
        for peer in peers:
            peer_litters = [litter for litter in all_litters if litter.involves(peer.id)]
            size = safe_ratio(sum(litter.born_alive for litter in peer_litters), len(peer_litters))
            if size > 0:
                peer_sizes.append(size)
        reproduction_delta = round_half_up(
            _percent_difference(reproduction.average_litter_size, peer_sizes)
        )

    growth_delta = None
    if growth is not None:
        peer_gains = [
            gain
            for gain in (daily_gain(weights_by_animal.get(p.id, [])) for p in peers)
            if gain is not None and gain > 0
        ]
        growth_delta = round_half_up(_percent_difference(growth.daily_weight_gain, peer_gains))

    ranked = sorted([*peer_latest, current_weight], reverse=True)
    rank = ranked.index(current_weight) + 1
    total = len(ranked)

    return PerformanceComparisons(
        compared_to_average=ComparedToAverage(
            weight=round_half_up(weight_delta) if current_weight else 0,
            reproduction=reproduction_delta,
            growth=growth_delta,
        ),
        compared_to_peers=ComparedToPeers(
            rank=rank,
            total_peers=total,
            percentile=round_half_up((total - rank) / total * 100),
        ),
    )


def format_report_as_text(report: IndividualPerformanceReport) -> str:
    animal = report.animal
    info = report.basic_info
    lines = [
        f"PERFORMANCE REPORT - {animal.label}",
        "=" * 47,
        "",
        "BASIC INFORMATION",
        "-" * 17,
        f"ID: {animal.id}",
        f"Name: {animal.name or 'N/A'}",
        f"Sex: {animal.sex.value}",
        f"Age: {info.age_description}",
        f"Status: {animal.status.value}",
        f"Cage: {animal.cage_id or 'N/A'}",
        f"Breed: {animal.breed or 'N/A'}",
        "",
    ]

    repro = report.reproduction_performance
    if repro is not None:
        lines += [
            "REPRODUCTION PERFORMANCE",
            "-" * 24,
            f"Total Litters: {repro.total_litters}",
            f"Total Offspring: {repro.total_offspring}",
            f"Average Litter Size: {repro.average_litter_size:.1f}",
            f"Reproduction Efficiency: {repro.reproduction_efficiency:.1f} offspring/year",
            "",
        ]

    growth = report.growth_performance
    if growth is not None:
        lines += [
            "GROWTH PERFORMANCE",
            "-" * 18,
            f"Current Weight: {growth.current_weight:g}g",
            f"Weight Gain: {growth.weight_gain:g}g",
            f"Daily Weight Gain: {growth.daily_weight_gain:.1f}g/day",
            f"Growth Rate: {growth.growth_rate}",
            f"Days to Target Weight: {growth.days_to_target}",
            "",
        ]

    health = report.health_status
    perf = report.performance
    lines += [
        "HEALTH STATUS",
        "-" * 13,
        f"Total Treatments: {health.total_treatments}",
        f"Recent Treatments: {health.recent_treatments}",
        f"Withdrawal Status: {health.withdrawal_status}",
        f"Health Score: {health.health_score:g}/100",
        "",
        "OVERALL PERFORMANCE",
        "-" * 19,
        f"Overall Score: {perf.overall_score}/100",
        f"Ranking: {perf.ranking}",
        f"Strengths: {', '.join(perf.strengths) or 'None identified'}",
        f"Recommendations: {', '.join(perf.recommendations) or 'None'}",
    ]
    return "\n".join(lines) + "\n"


def _latest_weight(records: Sequence[WeightRecord]) -> float:
    ordered = sort_by_date(records, lambda w: w.date)
    return ordered[-1].weight_grams if ordered else 0


def _percent_difference(value: float, peer_values: Sequence[float]) -> float:
    peer_mean = mean(peer_values)
    if peer_mean <= 0:
        return 0.0
    return (value - peer_mean) / peer_mean * 100
