from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from src.domain.models.animal import Animal
from src.domain.value_objects.animal_status import AnimalStatus

GrowthRate = Literal["excellent", "good", "average", "poor"]
Ranking = Literal["excellent", "good", "average", "needs_improvement"]
WithdrawalStatus = Literal["none", "active", "expired"]


@dataclass(slots=True)
class PerformanceReportOptions:
    include_comparisons: bool = True
    include_trends: bool = True
    include_recommendations: bool = True
    period_months: int = 12
    # Spread the score weights over the sections that apply instead of
    # capping health-only animals at 40
    renormalize_score: bool = False
    target_weight: float = 2500


@dataclass(slots=True)
class BasicInfo:
    age: int  # days
    age_description: str
    status: AnimalStatus
    current_weight: float | None = None
    breed: str | None = None
    cage_id: str | None = None


@dataclass(slots=True)
class ReproductionPerformance:
    total_litters: int
    total_offspring: int
    average_litter_size: float
    reproduction_efficiency: float  # offspring per year
    pregnancy_success: float  # percentage, placeholder until breeding outcomes exist
    last_litter_date: datetime | None = None


@dataclass(slots=True)
class GrowthPerformance:
    current_weight: float
    weight_gain: float
    daily_weight_gain: float
    growth_rate: GrowthRate
    target_weight: float
    days_to_target: int


@dataclass(slots=True)
class HealthStatus:
    total_treatments: int
    recent_treatments: int  # last 30 days
    withdrawal_status: WithdrawalStatus
    health_score: float
    withdrawal_ends_at: datetime | None = None


@dataclass(slots=True)
class OverallPerformance:
    overall_score: int
    ranking: Ranking
    strengths: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass(slots=True)
class WeightPoint:
    date: datetime
    weight: float


@dataclass(slots=True)
class LitterPoint:
    date: datetime
    litter_size: int


@dataclass(slots=True)
class PerformanceTrends:
    weight_trend: list[WeightPoint] = field(default_factory=list)
    reproduction_trend: list[LitterPoint] | None = None


@dataclass(slots=True)
class ComparedToAverage:
    weight: int = 0
    reproduction: int | None = None
    growth: int | None = None


@dataclass(slots=True)
class ComparedToPeers:
    rank: int = 1
    total_peers: int = 1
    percentile: int = 50


@dataclass(slots=True)
class PerformanceComparisons:
    compared_to_average: ComparedToAverage = field(default_factory=ComparedToAverage)
    compared_to_peers: ComparedToPeers = field(default_factory=ComparedToPeers)


@dataclass(slots=True)
class IndividualPerformanceReport:
    animal: Animal
    basic_info: BasicInfo
    health_status: HealthStatus
    performance: OverallPerformance
    trends: PerformanceTrends
    comparisons: PerformanceComparisons
    # Present only for females and breeders
    reproduction_performance: ReproductionPerformance | None = None
    # Present only for growing animals
    growth_performance: GrowthPerformance | None = None
