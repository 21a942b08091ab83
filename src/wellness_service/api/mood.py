"""Mood tracking endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, status

from ..domain import MoodService
from ..schemas import MoodEntryCreate, MoodEntryResponse, MoodInsightsResponse, MoodTrendPoint
from .dependencies import CurrentUser, get_mood_service

router = APIRouter(prefix="/mood", tags=["Mood"])

MoodServiceDep = Annotated[MoodService, Depends(get_mood_service)]


@router.post("", response_model=MoodEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_mood_entry(
    body: MoodEntryCreate,
    request: Request,
    user_id: CurrentUser,
    mood_service: MoodServiceDep,
) -> MoodEntryResponse:
    entry = await mood_service.create_entry(user_id, body.mood, body.notes, body.timestamp)
    request.app.state.service.increment_stat("mood_entries")
    return MoodEntryResponse.model_validate(entry)


@router.get("", response_model=list[MoodEntryResponse])
async def list_mood_entries(
    user_id: CurrentUser,
    mood_service: MoodServiceDep,
    start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
) -> list[MoodEntryResponse]:
    """Entries newest first; the range applies only when both bounds are given."""
    entries = await mood_service.list_entries(user_id, start_date, end_date)
    return [MoodEntryResponse.model_validate(entry) for entry in entries]


@router.get("/trends", response_model=list[MoodTrendPoint])
async def mood_trends_week(user_id: CurrentUser, mood_service: MoodServiceDep) -> list[MoodTrendPoint]:
    return await mood_trends(7, user_id, mood_service)


@router.get("/trends/{days}", response_model=list[MoodTrendPoint])
async def mood_trends(
    days: Annotated[int, Path(ge=1, le=365)],
    user_id: CurrentUser,
    mood_service: MoodServiceDep,
) -> list[MoodTrendPoint]:
    points = await mood_service.trends(user_id, days)
    return [MoodTrendPoint.model_validate(point) for point in points]


@router.get("/current", response_model=MoodEntryResponse | None)
async def current_mood(user_id: CurrentUser, mood_service: MoodServiceDep) -> MoodEntryResponse | None:
    entry = await mood_service.current(user_id)
    return MoodEntryResponse.model_validate(entry) if entry else None


@router.get("/insights", response_model=MoodInsightsResponse)
async def mood_insights(user_id: CurrentUser, mood_service: MoodServiceDep) -> MoodInsightsResponse:
    return MoodInsightsResponse.model_validate(await mood_service.insights(user_id))
