"""
Tests for stored onboarding preferences.
"""
import pytest

from siani_common.exceptions import EntityNotFoundError, ValidationError
from wellness_service.domain.onboarding import DEFAULT_PROMPTS, GENERIC_WELCOME
from wellness_service.domain.preferences import (
    INVALID_PREFERENCES_MESSAGE,
    PreferencesService,
    validate_preferences,
)

PREFERENCES = {
    "preferred_name": "Jay",
    "primary_goals": ["Stable Housing", "Mental Health"],
    "support_areas": ["Housing assistance"],
    "communication_style": "direct",
}


class TestValidatePreferences:
    def test_requires_goal_list(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_preferences({"communication_style": "direct", "primary_goals": "housing"})
        assert exc_info.value.field == "primaryGoals"
        assert exc_info.value.user_message == INVALID_PREFERENCES_MESSAGE

    def test_requires_known_style(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_preferences({"communication_style": "loud", "primary_goals": []})
        assert exc_info.value.field == "communicationStyle"


class TestPreferencesService:
    """Save, patch, skip and derived onboarding status."""

    @pytest.mark.asyncio
    async def test_missing_preferences(self, repository) -> None:
        service = PreferencesService(repository)

        with pytest.raises(EntityNotFoundError):
            await service.get_or_raise("user-1")
        status = await service.onboarding_status("user-1")
        assert not status.has_completed_onboarding
        assert status.welcome_message == GENERIC_WELCOME
        prompts = await service.coaching_prompts("user-1")
        assert prompts.prompts == list(DEFAULT_PROMPTS)
        assert prompts.based_on is None

    @pytest.mark.asyncio
    async def test_save_replaces_existing_row(self, repository) -> None:
        service = PreferencesService(repository)
        first = await service.save("user-1", PREFERENCES)
        second = await service.save("user-1", {**PREFERENCES, "communication_style": "gentle"})

        assert first.id == second.id
        assert second.communication_style == "gentle"
        assert second.completed_at is not None
        assert not second.skipped

    @pytest.mark.asyncio
    async def test_update_merges(self, repository) -> None:
        service = PreferencesService(repository)
        await service.save("user-1", PREFERENCES)
        updated = await service.update("user-1", {"preferred_name": "J"})

        assert updated.preferred_name == "J"
        assert updated.primary_goals == PREFERENCES["primary_goals"]

    @pytest.mark.asyncio
    async def test_update_rejects_bad_style(self, repository) -> None:
        service = PreferencesService(repository)
        await service.save("user-1", PREFERENCES)
        with pytest.raises(ValidationError):
            await service.update("user-1", {"communication_style": "loud"})

    @pytest.mark.asyncio
    async def test_skip_stores_defaults(self, repository) -> None:
        service = PreferencesService(repository)
        preferences = await service.skip("user-1")

        assert preferences.skipped
        assert preferences.primary_goals == []
        status = await service.onboarding_status("user-1")
        assert status.skipped
        assert status.has_completed_onboarding

    @pytest.mark.asyncio
    async def test_status_and_prompts_follow_preferences(self, repository) -> None:
        service = PreferencesService(repository)
        await service.save("user-1", PREFERENCES)

        status = await service.onboarding_status("user-1")
        assert status.welcome_message == "Welcome back, Jay. Ready to work on your goals?"
        assert status.priority_domains == ["housing", "mental_health"]
        prompts = await service.coaching_prompts("user-1")
        assert prompts.based_on == {"goals": PREFERENCES["primary_goals"], "communicationStyle": "direct"}
        assert 3 <= len(prompts.prompts) <= 5
