from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.application.alerts.types import ALL_ACTIONS
from src.domain.models.alert import AlertAction
from src.domain.value_objects.severity import Severity
from src.interfaces.http.schemas.monitoring import ThresholdIn


class AlertActionIn(BaseModel):
    label: str
    action: str
    color: str | None = None

    @field_validator("action")
    @classmethod
    def validate_action(cls, v: str) -> str:
        if v not in ALL_ACTIONS:
            raise ValueError(f"action must be one of: {', '.join(sorted(ALL_ACTIONS))}")
        return v

    def to_domain(self) -> AlertAction:
        return AlertAction(label=self.label, action=self.action, color=self.color)


class CustomAlertCreate(BaseModel):
    title: str = Field(min_length=1)
    message: str
    severity: Severity = Severity.MEDIUM
    actions: list[AlertActionIn] | None = None
    metadata: dict[str, Any] | None = None


class HealthAlertCreate(BaseModel):
    animal_name: str
    condition: str
    severity: Severity = Severity.MEDIUM
    animal_id: str | None = None


class ReproductionAlertCreate(BaseModel):
    message: str
    severity: Severity = Severity.MEDIUM
    animal_id: str | None = None


class PerformanceAlertCreate(BaseModel):
    metric_name: str
    current_value: float
    threshold: float


class AlertCreatedResponse(BaseModel):
    id: str


class AlertSettingsUpdate(BaseModel):
    thresholds: list[ThresholdIn] | None = None
    notification_enabled: bool | None = None
    email_notifications: bool | None = None
    sound_enabled: bool | None = None
    check_interval: int | None = Field(default=None, gt=0)

    def to_changes(self) -> dict[str, Any]:
        changes = self.model_dump(exclude_none=True, exclude={"thresholds"})
        if self.thresholds is not None:
            changes["thresholds"] = [t.to_domain() for t in self.thresholds]
        return changes
