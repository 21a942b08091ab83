"""Wellness metrics and stored analytics insights."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ..domain import AnalyticsService
from ..schemas import AnalyticsInsightResponse, WellnessMetricResponse
from .dependencies import CurrentUser, get_analytics_service

router = APIRouter(prefix="/analytics", tags=["Analytics"])

AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]


@router.get("/metrics", response_model=list[WellnessMetricResponse])
async def wellness_metrics(user_id: CurrentUser, analytics: AnalyticsServiceDep) -> list[WellnessMetricResponse]:
    return [WellnessMetricResponse.model_validate(m) for m in await analytics.metrics(user_id)]


@router.get("/insights", response_model=list[AnalyticsInsightResponse])
async def analytics_insights(user_id: CurrentUser, analytics: AnalyticsServiceDep) -> list[AnalyticsInsightResponse]:
    """Regenerate insights from current data, highest confidence first."""
    return [AnalyticsInsightResponse.model_validate(i) for i in await analytics.insights(user_id)]
