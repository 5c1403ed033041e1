from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.domain.value_objects.severity import Severity


@dataclass(slots=True)
class AlertThreshold:
    metric: str
    message: str
    enabled: bool = True
    min_value: float | None = None
    max_value: float | None = None
    # Percentage change that triggers an alert; compared by magnitude
    change_threshold: float | None = None

    def condition_key(self) -> tuple[str, float | None, float | None, float | None]:
        return (self.metric, self.min_value, self.max_value, self.change_threshold)


@dataclass(slots=True)
class MetricAlert:
    id: str
    metric: str
    message: str
    severity: Severity
    timestamp: datetime
    current_value: float
    threshold: float
    acknowledged: bool = False


@dataclass(slots=True)
class AlertAction:
    label: str
    action: str
    color: str | None = None


@dataclass(slots=True)
class AlertNotification:
    id: str
    title: str
    message: str
    severity: Severity
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    acknowledged: bool = False
    actions: list[AlertAction] | None = None
    metadata: dict[str, Any] | None = None

    @property
    def metric(self) -> str | None:
        if not self.metadata:
            return None
        return self.metadata.get("metric")

    def acknowledge(self) -> None:
        self.acknowledged = True


def default_thresholds() -> list[AlertThreshold]:
    return [
        AlertThreshold(
            metric="survivalRate",
            min_value=80,
            message="Survival rate below 80%",
        ),
        AlertThreshold(
            metric="reproductionRate",
            min_value=6,
            message="Reproduction rate below 6 litters/year",
        ),
        AlertThreshold(
            metric="averageWeight",
            change_threshold=-15,
            message="Average weight dropped by more than 15%",
        ),
        AlertThreshold(
            metric="treatmentCount",
            change_threshold=50,
            message="Treatments increased by more than 50%",
        ),
    ]


@dataclass(slots=True)
class AlertSettings:
    thresholds: list[AlertThreshold] = field(default_factory=lambda: default_thresholds()[:3])
    notification_enabled: bool = True
    email_notifications: bool = False
    sound_enabled: bool = True
    check_interval: int = 30  # minutes
