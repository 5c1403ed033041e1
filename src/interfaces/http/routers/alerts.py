from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, Response, status

from src.application.alerts.manager import AlertManager
from src.domain.models.alert import AlertNotification, AlertSettings
from src.domain.value_objects.severity import Severity
from src.infrastructure.repos.herd_memory import InMemoryHerdDataSource
from src.interfaces.http.deps import get_alert_manager, get_herd_source
from src.interfaces.http.schemas.alerts import (
    AlertCreatedResponse,
    AlertSettingsUpdate,
    CustomAlertCreate,
    HealthAlertCreate,
    PerformanceAlertCreate,
    ReproductionAlertCreate,
)
from src.interfaces.http.schemas.herd import HerdPayload

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=None)
async def list_alerts(
    unacknowledged: bool = Query(default=False),
    severity: Severity | None = Query(default=None),
    manager: AlertManager = Depends(get_alert_manager),
) -> list[AlertNotification]:
    if unacknowledged:
        alerts = manager.get_unacknowledged_alerts()
    else:
        alerts = manager.get_alerts()
    if severity is not None:
        alerts = [a for a in alerts if a.severity == severity]
    return alerts


@router.post("/check", response_model=None)
async def manual_check(
    payload: HerdPayload | None = Body(default=None),
    manager: AlertManager = Depends(get_alert_manager),
    source: InMemoryHerdDataSource = Depends(get_herd_source),
) -> list[AlertNotification]:
    # A posted herd becomes the data scheduled checks run against
    if payload is not None:
        source.replace(payload.to_domain())
    return await manager.trigger_manual_check()


@router.post("/custom", response_model=AlertCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_custom_alert(
    payload: CustomAlertCreate,
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertCreatedResponse:
    alert_id = await manager.add_custom_alert(
        payload.title,
        payload.message,
        payload.severity,
        actions=[a.to_domain() for a in payload.actions] if payload.actions else None,
        metadata=payload.metadata,
    )
    return AlertCreatedResponse(id=alert_id)


@router.post("/health", response_model=AlertCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_health_alert(
    payload: HealthAlertCreate,
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertCreatedResponse:
    alert_id = await manager.add_health_alert(
        payload.animal_name, payload.condition, payload.severity, animal_id=payload.animal_id
    )
    return AlertCreatedResponse(id=alert_id)


@router.post(
    "/reproduction", response_model=AlertCreatedResponse, status_code=status.HTTP_201_CREATED
)
async def create_reproduction_alert(
    payload: ReproductionAlertCreate,
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertCreatedResponse:
    alert_id = await manager.add_reproduction_alert(
        payload.message, payload.severity, animal_id=payload.animal_id
    )
    return AlertCreatedResponse(id=alert_id)


@router.post(
    "/performance", response_model=AlertCreatedResponse, status_code=status.HTTP_201_CREATED
)
async def create_performance_alert(
    payload: PerformanceAlertCreate,
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertCreatedResponse:
    alert_id = await manager.add_performance_alert(
        payload.metric_name, payload.current_value, payload.threshold
    )
    return AlertCreatedResponse(id=alert_id)


@router.get("/settings", response_model=None)
async def get_alert_settings(
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertSettings:
    return manager.get_settings()


@router.patch("/settings", response_model=None)
async def update_alert_settings(
    payload: AlertSettingsUpdate,
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertSettings:
    return await manager.update_settings(**payload.to_changes())


@router.post("/{alert_id}/acknowledge", status_code=status.HTTP_204_NO_CONTENT)
async def acknowledge_alert(
    alert_id: str,
    manager: AlertManager = Depends(get_alert_manager),
) -> Response:
    await manager.acknowledge_alert(alert_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_alert(
    alert_id: str,
    manager: AlertManager = Depends(get_alert_manager),
) -> Response:
    await manager.dismiss_alert(alert_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_all_alerts(
    manager: AlertManager = Depends(get_alert_manager),
) -> Response:
    await manager.dismiss_all_alerts()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
