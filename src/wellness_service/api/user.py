"""Onboarding preferences and coaching prompt endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ..domain import PreferencesService
from ..schemas import (
    CoachingPromptsResponse,
    OnboardingStatusResponse,
    PreferencesRequest,
    PreferencesResponse,
)
from .dependencies import CurrentUser, get_preferences_service

router = APIRouter(prefix="/user", tags=["User"])

PreferencesServiceDep = Annotated[PreferencesService, Depends(get_preferences_service)]


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(user_id: CurrentUser, preferences: PreferencesServiceDep) -> PreferencesResponse:
    return PreferencesResponse.model_validate(await preferences.get_or_raise(user_id))


@router.post("/preferences", response_model=PreferencesResponse)
async def save_preferences(body: PreferencesRequest, user_id: CurrentUser,
                           preferences: PreferencesServiceDep) -> PreferencesResponse:
    """Store completed onboarding; replaces any earlier answers."""
    saved = await preferences.save(user_id, body.model_dump(exclude_none=True))
    return PreferencesResponse.model_validate(saved)


@router.patch("/preferences", response_model=PreferencesResponse)
async def update_preferences(body: PreferencesRequest, user_id: CurrentUser,
                             preferences: PreferencesServiceDep) -> PreferencesResponse:
    updated = await preferences.update(user_id, body.model_dump(exclude_unset=True))
    return PreferencesResponse.model_validate(updated)


@router.get("/onboarding", response_model=OnboardingStatusResponse)
async def onboarding_status(user_id: CurrentUser, preferences: PreferencesServiceDep) -> OnboardingStatusResponse:
    return OnboardingStatusResponse.model_validate(await preferences.onboarding_status(user_id))


@router.post("/onboarding/skip", response_model=PreferencesResponse)
async def skip_onboarding(user_id: CurrentUser, preferences: PreferencesServiceDep) -> PreferencesResponse:
    return PreferencesResponse.model_validate(await preferences.skip(user_id))


@router.get("/coaching-prompts", response_model=CoachingPromptsResponse)
async def coaching_prompts(user_id: CurrentUser, preferences: PreferencesServiceDep) -> CoachingPromptsResponse:
    return CoachingPromptsResponse.model_validate(await preferences.coaching_prompts(user_id))
