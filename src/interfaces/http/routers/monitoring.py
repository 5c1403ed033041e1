from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from src.application.analytics.monitoring import (
    calculate_benchmarks,
    calculate_real_time_metrics,
    check_alerts,
    generate_period_comparison,
)
from src.application.errors import ValidationError
from src.domain.models.alert import MetricAlert
from src.domain.models.metrics import Benchmark, PeriodComparison, RealTimeMetrics
from src.domain.value_objects.period_type import PeriodType
from src.interfaces.http.deps import get_now
from src.interfaces.http.schemas.herd import HerdPayload
from src.interfaces.http.schemas.monitoring import AlertCheckRequest

router = APIRouter(prefix="/monitoring", tags=["monitoring"])


@router.post("/real-time", response_model=None)
async def real_time_metrics(
    payload: HerdPayload,
    now: datetime = Depends(get_now),
) -> RealTimeMetrics:
    herd = payload.to_domain()
    return calculate_real_time_metrics(
        herd.animals, herd.litters, herd.weights, herd.treatments, herd.cages, now=now
    )


@router.post("/comparison", response_model=None)
async def period_comparison(
    payload: HerdPayload,
    period_type: str = Query(default=PeriodType.MONTH.value),
    now: datetime = Depends(get_now),
) -> PeriodComparison:
    try:
        period = PeriodType(period_type)
    except ValueError as exc:
        allowed = [p.value for p in PeriodType]
        raise ValidationError(
            f"Unknown period type {period_type!r}", details={"allowed": allowed}
        ) from exc
    herd = payload.to_domain()
    return generate_period_comparison(
        herd.animals, herd.litters, herd.weights, herd.treatments, period, now=now
    )


@router.post("/benchmarks", response_model=None)
async def benchmarks(
    payload: HerdPayload,
    now: datetime = Depends(get_now),
) -> dict[str, Benchmark]:
    herd = payload.to_domain()
    return calculate_benchmarks(herd.animals, herd.litters, herd.weights, herd.treatments, now=now)


@router.post("/alerts", response_model=None)
async def evaluate_alerts(
    payload: AlertCheckRequest,
    now: datetime = Depends(get_now),
) -> list[MetricAlert]:
    herd = payload.to_domain()
    metrics = calculate_real_time_metrics(
        herd.animals, herd.litters, herd.weights, herd.treatments, herd.cages, now=now
    )
    return check_alerts(metrics, [t.to_domain() for t in payload.thresholds], now=now)
