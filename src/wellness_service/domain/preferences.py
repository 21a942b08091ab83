"""
SIANI Wellness Service - Stored onboarding preferences.

One preferences row per user. Saving replaces it, patching merges into it,
and skipping onboarding stores the defaults.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from siani_common.exceptions import EntityNotFoundError, ValidationError
from siani_infrastructure.database.entities import UserPreferences
from ..infrastructure.repository import WellnessRepository
from .onboarding import (
    DEFAULT_PROMPTS,
    DEFAULT_STYLE,
    coaching_prompts,
    default_preferences,
    priority_domains,
    validate_style,
    welcome_message,
)

logger = structlog.get_logger(__name__)

INVALID_PREFERENCES_MESSAGE = "Invalid preferences data"
NO_PREFERENCES_MESSAGE = "No preferences found"

EDITABLE_FIELDS = ("preferred_name", "primary_goals", "support_areas", "communication_style",
                   "has_completed_before")


@dataclass
class OnboardingStatus:
    has_completed_onboarding: bool
    skipped: bool
    welcome_message: str
    coaching_style: str
    priority_domains: list[str] = field(default_factory=list)
    preferred_name: str | None = None


@dataclass
class CoachingPrompts:
    prompts: list[str]
    based_on: dict[str, Any] | None = None


def validate_preferences(values: Mapping[str, Any]) -> None:
    """A full save needs a communication style and a list of goals."""
    if not values.get("communication_style") or not isinstance(values.get("primary_goals"), list):
        raise ValidationError(
            "Preferences need communicationStyle and a primaryGoals list",
            field="communicationStyle" if not values.get("communication_style") else "primaryGoals",
            user_message=INVALID_PREFERENCES_MESSAGE,
        )
    try:
        validate_style(values["communication_style"])
    except ValidationError as e:
        raise ValidationError(e.message, field="communicationStyle",
                              user_message=INVALID_PREFERENCES_MESSAGE) from e


class PreferencesService:
    def __init__(self, repository: WellnessRepository) -> None:
        self._repository = repository
        logger.info("preferences_service_initialized")

    async def get(self, user_id: str) -> UserPreferences | None:
        return await self._repository.first(UserPreferences, user_id=user_id)

    async def get_or_raise(self, user_id: str) -> UserPreferences:
        preferences = await self.get(user_id)
        if preferences is None:
            raise EntityNotFoundError("UserPreferences", user_id, user_message=NO_PREFERENCES_MESSAGE)
        return preferences

    async def save(self, user_id: str, values: Mapping[str, Any]) -> UserPreferences:
        """Validate and store completed onboarding preferences."""
        validate_preferences(values)
        data = {name: values[name] for name in EDITABLE_FIELDS if name in values}
        data.update(skipped=False, completed_at=datetime.now(timezone.utc))
        preferences = await self._upsert(user_id, data)
        logger.info("preferences_saved", user_id=user_id, goals=len(preferences.primary_goals),
                    communication_style=preferences.communication_style)
        return preferences

    async def update(self, user_id: str, changes: Mapping[str, Any]) -> UserPreferences:
        current = await self.get_or_raise(user_id)
        data = {name: changes[name] for name in EDITABLE_FIELDS if name in changes}
        if "communication_style" in data:
            try:
                validate_style(data["communication_style"])
            except ValidationError as e:
                raise ValidationError(e.message, field="communicationStyle",
                                      user_message=INVALID_PREFERENCES_MESSAGE) from e
        if "primary_goals" in data and not isinstance(data["primary_goals"], list):
            raise ValidationError("primaryGoals must be a list", field="primaryGoals",
                                  user_message=INVALID_PREFERENCES_MESSAGE)
        return await self._repository.update(UserPreferences, current.id, data, user_id=user_id)

    async def skip(self, user_id: str) -> UserPreferences:
        data = default_preferences().to_values()
        data["skipped"] = True
        preferences = await self._upsert(user_id, data)
        logger.info("onboarding_skipped", user_id=user_id)
        return preferences

    async def onboarding_status(self, user_id: str) -> OnboardingStatus:
        preferences = await self.get(user_id)
        if preferences is None:
            return OnboardingStatus(
                has_completed_onboarding=False,
                skipped=False,
                welcome_message=welcome_message(None, None),
                coaching_style=DEFAULT_STYLE,
            )
        return OnboardingStatus(
            has_completed_onboarding=preferences.completed_at is not None,
            skipped=preferences.skipped,
            welcome_message=welcome_message(preferences.preferred_name, preferences.communication_style),
            coaching_style=preferences.communication_style,
            priority_domains=priority_domains(preferences.primary_goals),
            preferred_name=preferences.preferred_name or None,
        )

    async def coaching_prompts(self, user_id: str) -> CoachingPrompts:
        preferences = await self.get(user_id)
        if preferences is None:
            return CoachingPrompts(prompts=list(DEFAULT_PROMPTS))
        return CoachingPrompts(
            prompts=coaching_prompts(preferences.primary_goals, preferences.communication_style),
            based_on={
                "goals": list(preferences.primary_goals),
                "communicationStyle": preferences.communication_style,
            },
        )

    async def _upsert(self, user_id: str, data: dict[str, Any]) -> UserPreferences:
        current = await self.get(user_id)
        if current is None:
            return await self._repository.create(UserPreferences, user_id=user_id, **data)
        return await self._repository.update(UserPreferences, current.id, data, user_id=user_id)
