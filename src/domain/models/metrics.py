from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.domain.value_objects.trend import Trend

# Metric names understood by threshold evaluation
TRACKED_METRICS = (
    "totalAnimals",
    "reproductionRate",
    "survivalRate",
    "averageWeight",
    "treatmentCount",
    "consumptionRate",
)


@dataclass(slots=True)
class MetricChange:
    current: float
    previous: float
    change: float
    percentage_change: float
    trend: Trend


@dataclass(slots=True)
class PeriodWindow:
    start: datetime
    end: datetime
    label: str


@dataclass(slots=True)
class PeriodComparison:
    current_period: PeriodWindow
    previous_period: PeriodWindow
    metrics: dict[str, MetricChange] = field(default_factory=dict)


@dataclass(slots=True)
class RealTimeMetrics:
    total_animals: MetricChange
    reproduction_rate: MetricChange
    survival_rate: MetricChange
    average_weight: MetricChange
    treatment_count: MetricChange
    consumption_rate: MetricChange
    last_updated: datetime

    def get(self, metric: str) -> MetricChange | None:
        """Look up a metric by its external (camelCase) name."""
        attr = _METRIC_ATTRIBUTES.get(metric)
        if attr is None:
            return None
        return getattr(self, attr)


@dataclass(slots=True)
class Benchmark:
    current: float
    best: float
    average: float
    percentile: float


_METRIC_ATTRIBUTES = {
    "totalAnimals": "total_animals",
    "reproductionRate": "reproduction_rate",
    "survivalRate": "survival_rate",
    "averageWeight": "average_weight",
    "treatmentCount": "treatment_count",
    "consumptionRate": "consumption_rate",
}
