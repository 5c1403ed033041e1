from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.domain.models.animal import Animal


@dataclass(slots=True)
class OverviewStats:
    total_animals: int = 0
    active_animals: int = 0
    breeders: int = 0
    growing: int = 0
    retired: int = 0
    consumed: int = 0
    deceased: int = 0
    average_age: int = 0  # days
    average_weight: int = 0  # grams
    cage_occupancy: int = 0  # percentage


@dataclass(slots=True)
class ReproductionStats:
    total_litters: int = 0
    total_offspring: int = 0
    average_litter_size: float = 0.0
    survival_rate: int = 0  # percentage
    reproduction_rate: float = 0.0  # litters per breeding female per year
    kindlings_this_month: int = 0
    expected_kindlings: int = 0


@dataclass(slots=True)
class WeightBucket:
    range: str
    count: int


@dataclass(slots=True)
class MonthlyWeight:
    month: str
    average_weight: int


@dataclass(slots=True)
class GrowthStats:
    average_weight_gain: float = 0.0  # grams per day
    fastest_growing: Animal | None = None
    slowest_growing: Animal | None = None
    weight_distribution: list[WeightBucket] = field(default_factory=list)
    growth_trends: list[MonthlyWeight] = field(default_factory=list)


@dataclass(slots=True)
class MonthlyConsumption:
    month: str
    count: int
    weight: int


@dataclass(slots=True)
class ConsumptionStats:
    total_consumed: int = 0
    total_weight: int = 0
    average_consumption_weight: int = 0
    consumed_this_month: int = 0
    consumption_trends: list[MonthlyConsumption] = field(default_factory=list)


@dataclass(slots=True)
class ProductCount:
    product: str
    count: int


@dataclass(slots=True)
class MonthlyCount:
    month: str
    count: int


@dataclass(slots=True)
class HealthStats:
    total_treatments: int = 0
    active_withdrawals: int = 0
    common_treatments: list[ProductCount] = field(default_factory=list)
    treatment_trends: list[MonthlyCount] = field(default_factory=list)


@dataclass(slots=True)
class StatisticsReport:
    overview: OverviewStats
    reproduction: ReproductionStats
    growth: GrowthStats
    consumption: ConsumptionStats
    health: HealthStats
    generated_at: datetime
