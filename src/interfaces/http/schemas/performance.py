from __future__ import annotations

from pydantic import BaseModel, Field

from src.domain.models.performance_report import PerformanceReportOptions
from src.interfaces.http.schemas.herd import HerdPayload


class PerformanceOptionsIn(BaseModel):
    include_comparisons: bool = True
    include_trends: bool = True
    include_recommendations: bool = True
    period_months: int = Field(default=12, ge=1, le=120)
    renormalize_score: bool = False
    target_weight: float | None = Field(default=None, gt=0)

    def to_domain(self, default_target_weight: float) -> PerformanceReportOptions:
        data = self.model_dump()
        data["target_weight"] = self.target_weight or default_target_weight
        return PerformanceReportOptions(**data)


class PerformanceRequest(HerdPayload):
    options: PerformanceOptionsIn = Field(default_factory=PerformanceOptionsIn)
