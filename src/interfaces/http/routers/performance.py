from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from src.application.analytics.performance import (
    format_report_as_text,
    generate_batch_reports,
    generate_individual_report,
)
from src.application.errors import NotFound
from src.config.settings import Settings
from src.domain.models.herd import HerdSnapshot
from src.domain.models.performance_report import IndividualPerformanceReport
from src.interfaces.http.deps import get_app_settings, get_now
from src.interfaces.http.schemas.performance import PerformanceRequest

router = APIRouter(prefix="/performance", tags=["performance"])


def _animal_report(
    herd: HerdSnapshot,
    animal_id: str,
    payload: PerformanceRequest,
    settings: Settings,
    now: datetime,
) -> IndividualPerformanceReport:
    animal = next((a for a in herd.animals if a.id == animal_id), None)
    if animal is None:
        raise NotFound("Animal not found", details={"animal_id": animal_id})
    options = payload.options.to_domain(settings.growth_target_weight_grams)
    return generate_individual_report(
        animal, herd.animals, herd.litters, herd.weights, herd.treatments, options, now=now
    )


@router.post("/animals/{animal_id}", response_model=None)
async def animal_performance(
    animal_id: str,
    payload: PerformanceRequest,
    settings: Settings = Depends(get_app_settings),
    now: datetime = Depends(get_now),
) -> IndividualPerformanceReport:
    return _animal_report(payload.to_domain(), animal_id, payload, settings, now)


@router.post("/animals/{animal_id}/text", response_class=PlainTextResponse)
async def animal_performance_text(
    animal_id: str,
    payload: PerformanceRequest,
    settings: Settings = Depends(get_app_settings),
    now: datetime = Depends(get_now),
) -> str:
    report = _animal_report(payload.to_domain(), animal_id, payload, settings, now)
    return format_report_as_text(report)


@router.post("/batch", response_model=None)
async def batch_performance(
    payload: PerformanceRequest,
    settings: Settings = Depends(get_app_settings),
    now: datetime = Depends(get_now),
) -> list[IndividualPerformanceReport]:
    herd = payload.to_domain()
    options = payload.options.to_domain(settings.growth_target_weight_grams)
    return generate_batch_reports(
        herd.animals, herd.litters, herd.weights, herd.treatments, options, now=now
    )
