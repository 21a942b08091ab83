"""Daily actions and evening reflections."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ..domain import DailyPracticeService
from ..schemas import (
    DailyActionCreate,
    DailyActionResponse,
    DailyActionUpdate,
    ReflectionCreate,
    ReflectionResponse,
)
from .dependencies import CurrentUser, get_daily_service

router = APIRouter(tags=["Daily Practice"])

DailyServiceDep = Annotated[DailyPracticeService, Depends(get_daily_service)]


@router.post("/actions", response_model=DailyActionResponse, status_code=status.HTTP_201_CREATED)
async def create_action(body: DailyActionCreate, user_id: CurrentUser,
                        daily_service: DailyServiceDep) -> DailyActionResponse:
    action = await daily_service.create_action(user_id, body.model_dump())
    return DailyActionResponse.model_validate(action)


@router.get("/actions/{day}", response_model=list[DailyActionResponse])
async def actions_for_day(day: str, user_id: CurrentUser, daily_service: DailyServiceDep) -> list[DailyActionResponse]:
    return [DailyActionResponse.model_validate(a) for a in await daily_service.actions_for(user_id, day)]


@router.patch("/actions/{action_id}", response_model=DailyActionResponse)
async def update_action(action_id: str, body: DailyActionUpdate, user_id: CurrentUser,
                        daily_service: DailyServiceDep) -> DailyActionResponse:
    action = await daily_service.set_completed(user_id, action_id, body.completed)
    return DailyActionResponse.model_validate(action)


@router.post("/reflections", response_model=ReflectionResponse, status_code=status.HTTP_201_CREATED)
async def create_reflection(body: ReflectionCreate, user_id: CurrentUser,
                            daily_service: DailyServiceDep) -> ReflectionResponse:
    reflection = await daily_service.create_reflection(user_id, body.model_dump())
    return ReflectionResponse.model_validate(reflection)


@router.get("/reflections/{day}", response_model=ReflectionResponse | None)
async def reflection_for_day(day: str, user_id: CurrentUser,
                             daily_service: DailyServiceDep) -> ReflectionResponse | None:
    reflection = await daily_service.reflection_for(user_id, day)
    return ReflectionResponse.model_validate(reflection) if reflection else None
