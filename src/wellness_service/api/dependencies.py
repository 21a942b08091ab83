"""
SIANI Wellness Service - API dependencies.

Service getters read from ``app.state.service`` and answer 503 while the
service is still starting. The current user comes from the ``X-User-Id``
header and is provisioned on first use.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
import structlog

from ..domain import (
    AnalyticsService,
    BiometricService,
    CareService,
    DailyPracticeService,
    FamilyService,
    GoalIntakeService,
    IntakeService,
    MoodService,
    PreferencesService,
    PulseService,
    VoiceService,
)
from ..infrastructure import QueryCache, WellnessRepository

logger = structlog.get_logger(__name__)

USER_ID_HEADER = "X-User-Id"


def _unavailable(name: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"{name} not available",
    )


def get_repository(request: Request) -> WellnessRepository:
    """Get the repository from app state."""
    state = request.app.state.service
    if not state.repository:
        raise _unavailable("Repository")
    return state.repository


def get_query_cache(request: Request) -> QueryCache:
    state = request.app.state.service
    if not state.query_cache:
        raise _unavailable("Query cache")
    return state.query_cache


def get_mood_service(request: Request) -> MoodService:
    state = request.app.state.service
    if not state.mood_service:
        raise _unavailable("Mood service")
    return state.mood_service


def get_daily_service(request: Request) -> DailyPracticeService:
    state = request.app.state.service
    if not state.daily_service:
        raise _unavailable("Daily practice service")
    return state.daily_service


def get_care_service(request: Request) -> CareService:
    state = request.app.state.service
    if not state.care_service:
        raise _unavailable("Care service")
    return state.care_service


def get_family_service(request: Request) -> FamilyService:
    state = request.app.state.service
    if not state.family_service:
        raise _unavailable("Family service")
    return state.family_service


def get_voice_service(request: Request) -> VoiceService:
    state = request.app.state.service
    if not state.voice_service:
        raise _unavailable("Voice service")
    return state.voice_service


def get_preferences_service(request: Request) -> PreferencesService:
    state = request.app.state.service
    if not state.preferences_service:
        raise _unavailable("Preferences service")
    return state.preferences_service


def get_biometric_service(request: Request) -> BiometricService:
    state = request.app.state.service
    if not state.biometric_service:
        raise _unavailable("Biometric service")
    return state.biometric_service


def get_pulse_service(request: Request) -> PulseService:
    state = request.app.state.service
    if not state.pulse_service:
        raise _unavailable("Pulse service")
    return state.pulse_service


def get_analytics_service(request: Request) -> AnalyticsService:
    state = request.app.state.service
    if not state.analytics_service:
        raise _unavailable("Analytics service")
    return state.analytics_service


def get_intake_service(request: Request) -> IntakeService:
    state = request.app.state.service
    if not state.intake_service:
        raise _unavailable("Intake service")
    return state.intake_service


def get_goal_intake_service(request: Request) -> GoalIntakeService:
    state = request.app.state.service
    if not state.goal_intake_service:
        raise _unavailable("Goal intake service")
    return state.goal_intake_service


async def get_current_user_id(
    request: Request,
    repository: Annotated[WellnessRepository, Depends(get_repository)],
    x_user_id: Annotated[str | None, Header(alias=USER_ID_HEADER)] = None,
) -> str:
    """Resolve the acting user, falling back to the configured default user."""
    user_id = (x_user_id or "").strip() or request.app.state.service.settings.service.default_user_id
    await repository.ensure_user(user_id)
    return user_id


CurrentUser = Annotated[str, Depends(get_current_user_id)]
