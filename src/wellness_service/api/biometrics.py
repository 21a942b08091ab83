"""Biometric readings, health insights and mood correlations."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from ..domain import BiometricService
from ..schemas import (
    BiometricDataResponse,
    BiometricEntryCreate,
    BiometricRecordResponse,
    HealthInsightResponse,
    MoodCorrelationResponse,
    StoredCorrelationResponse,
)
from .dependencies import CurrentUser, get_biometric_service

router = APIRouter(prefix="/biometrics", tags=["Biometrics"])

BiometricServiceDep = Annotated[BiometricService, Depends(get_biometric_service)]


@router.post("", response_model=BiometricRecordResponse, status_code=status.HTTP_201_CREATED)
async def record_biometrics(
    body: BiometricEntryCreate,
    request: Request,
    user_id: CurrentUser,
    biometric_service: BiometricServiceDep,
) -> BiometricRecordResponse:
    """Store a reading; at least one measurement must be present."""
    result = await biometric_service.record(user_id, body.model_dump(exclude_none=True))
    request.app.state.service.increment_stat("biometric_entries")
    return BiometricRecordResponse(
        entry=BiometricDataResponse.model_validate(result["entry"]),
        insights=[HealthInsightResponse.model_validate(i) for i in result["insights"]],
        correlations=[MoodCorrelationResponse.model_validate(c) for c in result["correlations"]],
    )


@router.get("/recent", response_model=list[BiometricDataResponse])
async def recent_biometrics(
    user_id: CurrentUser,
    biometric_service: BiometricServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 7,
) -> list[BiometricDataResponse]:
    return [BiometricDataResponse.model_validate(r) for r in await biometric_service.recent(user_id, limit)]


@router.get("/insights", response_model=list[HealthInsightResponse])
async def health_insights(user_id: CurrentUser, biometric_service: BiometricServiceDep) -> list[HealthInsightResponse]:
    return [HealthInsightResponse.model_validate(i) for i in await biometric_service.active_insights(user_id)]


@router.get("/mood-correlations", response_model=list[StoredCorrelationResponse])
async def mood_correlations(user_id: CurrentUser,
                            biometric_service: BiometricServiceDep) -> list[StoredCorrelationResponse]:
    correlations = await biometric_service.mood_correlations(user_id)
    return [StoredCorrelationResponse.model_validate(c) for c in correlations]
