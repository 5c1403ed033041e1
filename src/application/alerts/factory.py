from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from src.application.analytics.aggregation import safe_ratio
from src.domain.models.alert import AlertAction, AlertNotification, MetricAlert
from src.domain.value_objects.severity import Severity

from .types import AlertActionType

METRIC_ALERT_TITLE = "Metric alert"
HEALTH_ALERT_TITLE = "Health alert"
REPRODUCTION_ALERT_TITLE = "Reproduction alert"
PERFORMANCE_ALERT_TITLE = "Performance alert"


def new_alert_id(prefix: str, now: datetime) -> str:
    """Millisecond timestamp plus a random suffix, e.g. 'custom-1760000000000-3f9a1c2b7'."""
    return f"{prefix}-{int(now.timestamp() * 1000)}-{uuid4().hex[:9]}"


def build_metric_notification(alert: MetricAlert) -> AlertNotification:
    """Wrap a threshold breach with the default view/adjust actions."""
    return AlertNotification(
        id=alert.id,
        title=METRIC_ALERT_TITLE,
        message=alert.message,
        severity=alert.severity,
        timestamp=alert.timestamp,
        acknowledged=alert.acknowledged,
        actions=[
            AlertAction("View details", AlertActionType.VIEW_DETAILS, "primary"),
            AlertAction("Adjust threshold", AlertActionType.ADJUST_THRESHOLD, "secondary"),
        ],
        metadata={
            "metric": alert.metric,
            "currentValue": alert.current_value,
            "threshold": alert.threshold,
        },
    )


def build_custom_notification(
    title: str,
    message: str,
    severity: Severity | str,
    now: datetime,
    *,
    actions: list[AlertAction] | None = None,
    metadata: dict[str, Any] | None = None,
) -> AlertNotification:
    return AlertNotification(
        id=new_alert_id("custom", now),
        title=title,
        message=message,
        severity=Severity(severity),
        timestamp=now,
        actions=actions,
        metadata=metadata,
    )


def health_actions() -> list[AlertAction]:
    return [
        AlertAction("View animal", AlertActionType.VIEW_ANIMAL, "primary"),
        AlertAction("Add treatment", AlertActionType.ADD_TREATMENT, "secondary"),
    ]


def reproduction_actions(animal_id: str | None = None) -> list[AlertAction]:
    actions = [AlertAction("Plan reproduction", AlertActionType.PLAN_REPRODUCTION, "primary")]
    if animal_id:
        actions.insert(0, AlertAction("View animal", AlertActionType.VIEW_ANIMAL, "info"))
    return actions


def performance_actions() -> list[AlertAction]:
    return [
        AlertAction("View statistics", AlertActionType.VIEW_STATISTICS, "primary"),
        AlertAction("Adjust thresholds", AlertActionType.ADJUST_THRESHOLD, "secondary"),
    ]


def performance_severity(current_value: float, threshold: float) -> Severity:
    relative = safe_ratio(abs(current_value - threshold), abs(threshold)) * 100
    if relative > 30:
        return Severity.HIGH
    if relative > 15:
        return Severity.MEDIUM
    return Severity.LOW


def format_performance_message(metric_name: str, current_value: float, threshold: float) -> str:
    return f"{metric_name}: {current_value:.1f} (threshold: {threshold:.1f})"
