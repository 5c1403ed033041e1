from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.application.analytics.aggregation import compute_change
from src.application.analytics.monitoring import (
    calculate_benchmark,
    calculate_benchmarks,
    calculate_real_time_metrics,
    check_alerts,
    generate_period_comparison,
    merge_thresholds,
    period_windows,
)
from src.domain.models.alert import AlertThreshold
from src.domain.models.animal import Animal
from src.domain.models.litter import Litter
from src.domain.models.metrics import RealTimeMetrics
from src.domain.value_objects.severity import Severity
from src.domain.value_objects.trend import Trend

UTC = timezone.utc


def make_metrics(now: datetime, **overrides) -> RealTimeMetrics:
    """Healthy baseline metrics; override any metric with a (current, previous) pair."""
    values = {
        "total_animals": (10, 10),
        "reproduction_rate": (12, 12),
        "survival_rate": (90, 90),
        "average_weight": (2000, 2000),
        "treatment_count": (2, 2),
        "consumption_rate": (1, 1),
    }
    values.update(overrides)
    changes = {name: compute_change(*pair) for name, pair in values.items()}
    return RealTimeMetrics(**changes, last_updated=now)


def test_healthy_metrics_raise_no_alerts(now):
    assert check_alerts(make_metrics(now), now=now) == []


def test_survival_threshold_matching_default_fires_once(now):
    metrics = make_metrics(now, survival_rate=(70, 90))
    threshold = AlertThreshold(
        metric="survivalRate", min_value=80, enabled=True, message="Survival too low"
    )

    alerts = check_alerts(metrics, [threshold], now=now)

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.metric == "survivalRate"
    assert alert.severity == Severity.MEDIUM
    assert alert.message == "Survival too low"
    assert alert.current_value == 70
    assert alert.threshold == 80
    assert alert.timestamp == now
    assert alert.id.startswith("survivalRate-")


def test_disabled_caller_threshold_silences_default(now):
    metrics = make_metrics(now, survival_rate=(70, 90))
    threshold = AlertThreshold(metric="survivalRate", min_value=80, enabled=False, message="off")
    assert check_alerts(metrics, [threshold], now=now) == []


def test_distinct_thresholds_on_same_metric_fire_independently(now):
    metrics = make_metrics(now, survival_rate=(70, 90))
    stricter = AlertThreshold(metric="survivalRate", min_value=90, message="Below 90")

    alerts = check_alerts(metrics, [stricter], now=now)

    assert sorted(a.threshold for a in alerts) == [80, 90]
    by_threshold = {a.threshold: a.severity for a in alerts}
    assert by_threshold[80] == Severity.MEDIUM
    assert by_threshold[90] == Severity.HIGH


def test_small_bound_breach_is_low_severity(now):
    alerts = check_alerts(make_metrics(now, survival_rate=(75, 90)), now=now)
    assert [a.severity for a in alerts] == [Severity.LOW]


def test_max_value_threshold(now):
    threshold = AlertThreshold(metric="totalAnimals", max_value=8, message="Too many animals")
    alerts = check_alerts(make_metrics(now), [threshold], now=now)
    assert len(alerts) == 1
    assert alerts[0].threshold == 8
    assert alerts[0].severity == Severity.HIGH


def test_change_threshold_severity_by_excess_points(now):
    slight = check_alerts(make_metrics(now, average_weight=(800, 1000)), now=now)
    assert [(a.metric, a.severity) for a in slight] == [("averageWeight", Severity.LOW)]

    steep = check_alerts(make_metrics(now, average_weight=(500, 1000)), now=now)
    assert [(a.metric, a.severity) for a in steep] == [("averageWeight", Severity.HIGH)]


def test_change_threshold_compares_magnitudes(now):
    # A 20% rise also breaches the -15% weight threshold
    alerts = check_alerts(make_metrics(now, average_weight=(1200, 1000)), now=now)
    assert [a.metric for a in alerts] == ["averageWeight"]


def test_unknown_metric_is_ignored(now):
    threshold = AlertThreshold(metric="milkYield", min_value=1, message="n/a")
    assert check_alerts(make_metrics(now), [threshold], now=now) == []


def test_merge_thresholds_keeps_defaults_first():
    extra = AlertThreshold(metric="totalAnimals", min_value=5, message="Herd too small")
    merged = merge_thresholds([extra])
    assert len(merged) == 5
    assert merged[-1] is extra


def test_period_windows_quarter_crosses_year():
    current, previous = period_windows("quarter", datetime(2026, 1, 15, tzinfo=UTC))
    assert current.label == "Q1 2026"
    assert current.start == datetime(2026, 1, 1, tzinfo=UTC)
    assert current.end.month == 3 and current.end.day == 31
    assert previous.label == "Q4 2025"
    assert previous.start == datetime(2025, 10, 1, tzinfo=UTC)
    assert previous.end.year == 2025 and previous.end.month == 12


def test_period_windows_month_and_year_labels():
    now = datetime(2026, 1, 15, tzinfo=UTC)
    current, previous = period_windows("month", now)
    assert (current.label, previous.label) == ("January 2026", "December 2025")
    current, previous = period_windows("year", now)
    assert (current.label, previous.label) == ("2026", "2025")
    assert previous.end.month == 12 and previous.end.day == 31


def test_period_comparison_counts_litters_per_window(now):
    litters = [
        Litter.create(mother_id="doe", kindling_date=datetime(2026, 10, 5, tzinfo=UTC)),
        Litter.create(mother_id="doe", kindling_date=datetime(2026, 9, 3, tzinfo=UTC)),
        Litter.create(mother_id="doe", kindling_date=datetime(2026, 9, 25, tzinfo=UTC)),
    ]

    comparison = generate_period_comparison([], litters, [], [], "month", now=now)

    assert set(comparison.metrics) == {
        "totalAnimals",
        "reproductionRate",
        "survivalRate",
        "averageWeight",
        "totalLitters",
        "treatmentCount",
    }
    litters_change = comparison.metrics["totalLitters"]
    assert (litters_change.current, litters_change.previous) == (1, 2)
    assert litters_change.percentage_change == -50
    assert litters_change.trend == Trend.DOWN
    assert comparison.current_period.label == "October 2026"


def test_undated_animals_follow_the_given_clock():
    now = datetime(2025, 3, 15, 9, 0, tzinfo=UTC)
    undated = Animal.create("female", "breeder", id="undated")
    registered = Animal.create(
        "male", "breeder", created_at=datetime(2025, 2, 10, tzinfo=UTC), id="registered"
    )
    assert undated.created_at is None

    comparison = generate_period_comparison([undated, registered], [], [], [], "month", now=now)
    animals = comparison.metrics["totalAnimals"]
    assert (animals.current, animals.previous) == (1, 1)
    assert comparison.current_period.label == "March 2025"

    metrics = calculate_real_time_metrics([undated, registered], [], [], [], now=now)
    assert (metrics.total_animals.current, metrics.total_animals.previous) == (2, 1)


def test_real_time_metrics_compare_against_end_of_last_month(breeding_herd, now):
    metrics = calculate_real_time_metrics(
        breeding_herd.animals,
        breeding_herd.litters,
        breeding_herd.weights,
        breeding_herd.treatments,
        now=now,
    )

    assert metrics.total_animals.current == 3
    assert metrics.total_animals.previous == 3
    assert metrics.treatment_count.current == 1
    assert metrics.treatment_count.previous == 0
    assert metrics.treatment_count.trend == Trend.STABLE
    assert metrics.average_weight.current == 2800
    assert metrics.average_weight.previous == 500
    assert metrics.average_weight.trend == Trend.UP
    assert metrics.last_updated == now
    for change in (
        metrics.total_animals,
        metrics.reproduction_rate,
        metrics.survival_rate,
        metrics.average_weight,
        metrics.treatment_count,
        metrics.consumption_rate,
    ):
        assert change.change == change.current - change.previous
        if change.previous == 0:
            assert change.percentage_change == 0
            assert change.trend == Trend.STABLE


def test_benchmarks_on_empty_history_are_neutral(now):
    benchmarks = calculate_benchmarks([], [], [], [], now=now)
    assert set(benchmarks) == {"reproductionRate", "survivalRate", "averageWeight"}
    for benchmark in benchmarks.values():
        assert benchmark.percentile == 50
        assert benchmark.best == benchmark.current
        assert benchmark.average == benchmark.current


def test_benchmark_percentile_rank():
    assert calculate_benchmark(2, [1, 2, 3, 4, 0]).percentile == 25
    top = calculate_benchmark(5, [1, 2, 3, 4])
    assert top.percentile == 100
    assert top.best == 4
    assert top.average == 2.5


def test_benchmarks_read_monthly_snapshots(now):
    litters = [
        Litter.create(
            mother_id="doe",
            kindling_date=now - timedelta(days=offset),
            born_alive=10,
            weaned_count=weaned,
        )
        for offset, weaned in [(2, 9), (35, 5)]
    ]
    benchmarks = calculate_benchmarks([], litters, [], [], now=now)
    survival = benchmarks["survivalRate"]
    assert survival.current == 90
    assert survival.best == 90
    assert survival.average == 70
    assert survival.percentile == 50
