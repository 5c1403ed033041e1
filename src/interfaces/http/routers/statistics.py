from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends

from src.application.analytics.statistics import generate_report
from src.domain.models.statistics_report import StatisticsReport
from src.interfaces.http.deps import get_now
from src.interfaces.http.schemas.herd import HerdPayload

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.post("/report", response_model=None)
async def statistics_report(
    payload: HerdPayload,
    now: datetime = Depends(get_now),
) -> StatisticsReport:
    herd = payload.to_domain()
    return generate_report(
        herd.animals, herd.litters, herd.weights, herd.treatments, herd.cages, now=now
    )
