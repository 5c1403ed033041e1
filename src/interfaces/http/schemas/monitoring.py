from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from src.domain.models.alert import AlertThreshold
from src.domain.models.metrics import TRACKED_METRICS
from src.interfaces.http.schemas.herd import HerdPayload


class ThresholdIn(BaseModel):
    metric: str
    message: str = ""
    enabled: bool = True
    min_value: float | None = None
    max_value: float | None = None
    change_threshold: float | None = None

    @field_validator("metric")
    @classmethod
    def validate_metric(cls, v: str) -> str:
        if v not in TRACKED_METRICS:
            raise ValueError(f"metric must be one of: {', '.join(TRACKED_METRICS)}")
        return v

    def to_domain(self) -> AlertThreshold:
        return AlertThreshold(
            metric=self.metric,
            message=self.message or f"{self.metric} threshold breached",
            enabled=self.enabled,
            min_value=self.min_value,
            max_value=self.max_value,
            change_threshold=self.change_threshold,
        )


class AlertCheckRequest(HerdPayload):
    thresholds: list[ThresholdIn] = Field(default_factory=list)
