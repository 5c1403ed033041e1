from __future__ import annotations

from datetime import timedelta

from src.application.analytics.statistics import daily_gain, generate_report
from src.domain.models.animal import Animal
from src.domain.models.cage import Cage
from src.domain.models.litter import Litter
from src.domain.models.treatment import Treatment
from src.domain.models.weight_record import WeightRecord


def test_empty_inputs_produce_zero_report_with_fixed_shapes(now):
    report = generate_report([], [], [], [], [], now=now)

    assert report.overview.total_animals == 0
    assert report.overview.average_weight == 0
    assert report.overview.cage_occupancy == 0
    assert report.reproduction.survival_rate == 0
    assert report.reproduction.reproduction_rate == 0
    assert report.reproduction.average_litter_size == 0
    assert report.growth.average_weight_gain == 0
    assert report.growth.fastest_growing is None
    assert len(report.growth.growth_trends) == 6
    assert len(report.growth.weight_distribution) == 5
    assert len(report.consumption.consumption_trends) == 6
    assert len(report.health.treatment_trends) == 6
    assert all(b.count == 0 for b in report.growth.weight_distribution)
    assert report.health.common_treatments == []
    assert report.generated_at == now


def test_single_litter_survival_rate(now):
    doe = Animal.create("female", "breeder", birth_date=now - timedelta(days=365), id="doe")
    litter = Litter.create(mother_id="doe", born_alive=8, weaned_count=7)

    report = generate_report([doe], [litter], [], [], [], now=now)

    assert report.reproduction.total_litters == 1
    assert report.reproduction.total_offspring == 8
    assert report.reproduction.survival_rate == 88
    assert report.reproduction.reproduction_rate == 12


def test_status_counts_add_up_to_total(breeding_herd, now):
    retired = Animal.create("male", "retired", id="old")
    deceased = Animal.create("female", "deceased", id="gone")
    animals = [*breeding_herd.animals, retired, deceased]

    overview = generate_report(animals, [], [], [], [], now=now).overview

    assert overview.total_animals == 5
    assert (
        overview.breeders
        + overview.growing
        + overview.retired
        + overview.consumed
        + overview.deceased
        == overview.total_animals
    )
    assert overview.active_animals == 3
    assert overview.total_animals == (
        overview.active_animals + overview.deceased + overview.consumed
    )


def test_overview_uses_latest_weight_of_active_animals(breeding_herd, now):
    cages = [Cage(id="cage-1"), Cage(id="cage-2")]
    report = generate_report(
        breeding_herd.animals,
        breeding_herd.litters,
        breeding_herd.weights,
        breeding_herd.treatments,
        cages,
        now=now,
    )

    assert report.overview.average_weight == 2800
    assert report.overview.cage_occupancy == 50
    assert report.overview.consumed == 1


def test_growth_section(breeding_herd, now):
    growth = generate_report(
        breeding_herd.animals, [], breeding_herd.weights, [], [], now=now
    ).growth

    assert growth.average_weight_gain == 30
    assert growth.fastest_growing.id == "kit-1"
    bucket = next(b for b in growth.weight_distribution if b.range == "1000-1500g")
    assert bucket.count == 1
    assert growth.growth_trends[-1].month == "Oct 2026"
    assert growth.growth_trends[-1].average_weight == 2800
    assert growth.growth_trends[-2].average_weight == 500


def test_consumption_section(breeding_herd, now):
    consumption = generate_report(breeding_herd.animals, [], [], [], [], now=now).consumption

    assert consumption.total_consumed == 1
    assert consumption.total_weight == 2400
    assert consumption.average_consumption_weight == 2400
    assert consumption.consumed_this_month == 1
    assert consumption.consumption_trends[-1].count == 1
    assert consumption.consumption_trends[-1].weight == 2400


def test_health_section_counts_active_withdrawals(breeding_herd, now):
    expired = Treatment.create(
        "doe-1", now - timedelta(days=60), "Oxytetracycline", withdrawal_days=7
    )
    health = generate_report(
        [], [], [], [*breeding_herd.treatments, expired], [], now=now
    ).health

    assert health.total_treatments == 2
    assert health.active_withdrawals == 1
    assert health.treatment_trends[-1].count == 1


def test_common_treatments_keep_first_seen_order_on_ties(now):
    products = ["B", "A", "B", "A", "C", "D", "E", "F", "G"]
    treatments = [Treatment.create("x", now, p) for p in products]

    common = generate_report([], [], [], treatments, [], now=now).health.common_treatments

    assert [(c.product, c.count) for c in common] == [
        ("B", 2),
        ("A", 2),
        ("C", 1),
        ("D", 1),
        ("E", 1),
    ]


def test_kindlings_this_month_and_expected(now):
    litters = [
        Litter.create(mother_id="doe", kindling_date=now - timedelta(days=2), born_alive=5),
        Litter.create(mother_id="doe", breeding_date=now - timedelta(days=10)),
        Litter.create(mother_id="doe", kindling_date="garbage", born_alive=4),
    ]
    reproduction = generate_report([], litters, [], [], [], now=now).reproduction

    assert reproduction.kindlings_this_month == 1
    assert reproduction.expected_kindlings == 1
    assert reproduction.total_offspring == 9


def test_invalid_weight_dates_are_excluded_from_trends(now):
    weights = [
        WeightRecord.create("kit", "not-a-date", 900),
        WeightRecord.create("kit", now, 1000),
    ]
    growth = generate_report([], [], weights, [], [], now=now).growth
    assert growth.growth_trends[-1].average_weight == 1000


def test_daily_gain_needs_two_dated_records(now):
    assert daily_gain([WeightRecord.create("kit", now, 100)]) is None
    same_day = [WeightRecord.create("kit", now, 100), WeightRecord.create("kit", now, 200)]
    assert daily_gain(same_day) is None
