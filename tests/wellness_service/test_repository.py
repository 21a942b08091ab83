"""
Tests for the wellness repository.
"""
from datetime import datetime, timezone

import pytest

from siani_common.exceptions import EntityConflictError, EntityNotFoundError
from siani_infrastructure.database.entities import (
    Appointment,
    CareTeamMember,
    PulseAnswer,
    PulseQuestion,
    Resource,
    User,
)
from wellness_service.infrastructure.repository import RESOURCE_PROVIDER_ROLE

WHEN = datetime(2025, 3, 12, 10, tzinfo=timezone.utc)


async def make_resource(repository, title: str = "Mindful Mornings") -> Resource:
    return await repository.create(
        Resource, title=title, description="Guided breathing", category="meditation",
        organization="Calm Co", provider="Dr. Rivera",
    )


class TestUsers:
    """Provisioning users on first use."""

    @pytest.mark.asyncio
    async def test_ensure_user_is_idempotent(self, repository) -> None:
        first = await repository.ensure_user("user-2")
        second = await repository.ensure_user("user-2")

        assert first.id == second.id == "user-2"
        assert await repository.count(User) == 2


class TestCrud:
    """Generic create, read, update and delete."""

    @pytest.mark.asyncio
    async def test_get_scoped_to_owner(self, repository) -> None:
        await repository.ensure_user("user-2")
        appointment = await repository.create(
            Appointment, user_id="user-1", title="Checkup", provider="Dr. Lee", datetime=WHEN,
        )

        assert (await repository.get(Appointment, appointment.id, user_id="user-1")).title == "Checkup"
        assert await repository.get(Appointment, appointment.id, user_id="user-2") is None
        with pytest.raises(EntityNotFoundError) as exc_info:
            await repository.get_or_raise(Appointment, appointment.id, user_id="user-2")
        assert exc_info.value.context.operation == "get_appointments"
        assert exc_info.value.context.user_id == "user-2"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, repository) -> None:
        appointment = await repository.create(
            Appointment, user_id="user-1", title="Checkup", provider="Dr. Lee", datetime=WHEN,
        )
        updated = await repository.update(Appointment, appointment.id, {"notes": "Bring ID"}, user_id="user-1")
        assert updated.notes == "Bring ID"
        assert updated.version == 2

        await repository.delete(Appointment, appointment.id, user_id="user-1")
        assert await repository.get(Appointment, appointment.id) is None
        with pytest.raises(EntityNotFoundError) as exc_info:
            await repository.delete(Appointment, appointment.id)
        assert exc_info.value.context.operation == "delete_appointments"

    @pytest.mark.asyncio
    async def test_list_filters_and_orders(self, repository) -> None:
        for hour in (9, 14, 11):
            await repository.create(
                Appointment, user_id="user-1", title=f"at {hour}", provider="Dr. Lee",
                datetime=WHEN.replace(hour=hour),
            )
        rows = await repository.list(
            Appointment, user_id="user-1", order_by=[Appointment.datetime.asc()], limit=2,
        )

        assert [row.title for row in rows] == ["at 9", "at 11"]
        assert await repository.count(Appointment, user_id="user-1") == 3

    @pytest.mark.asyncio
    async def test_unique_violation_is_conflict(self, repository) -> None:
        await make_resource(repository)
        with pytest.raises(EntityConflictError):
            await make_resource(repository)


class TestResourceRating:
    """Ratings refresh the aggregate and link the provider."""

    @pytest.mark.asyncio
    async def test_rating_updates_average_and_adds_provider_once(self, repository) -> None:
        resource = await make_resource(repository)

        _, updated, member = await repository.rate_resource("user-1", resource.id, 5, "Helpful")
        assert updated.average_rating == 5.0
        assert member is not None and member.role == RESOURCE_PROVIDER_ROLE

        _, updated, member = await repository.rate_resource("user-1", resource.id, 2)
        assert updated.average_rating == 3.5
        assert updated.rating_count == 2
        assert member is None
        assert await repository.count(CareTeamMember, user_id="user-1") == 1

    @pytest.mark.asyncio
    async def test_unknown_resource(self, repository) -> None:
        with pytest.raises(EntityNotFoundError):
            await repository.rate_resource("user-1", "missing", 4)


class TestPulseSummary:
    """Answer counts and distributions."""

    @pytest.mark.asyncio
    async def test_summary_skips_empty_options(self, repository) -> None:
        await repository.ensure_user("user-2")
        await repository.ensure_user("user-3")
        question = await repository.create(
            PulseQuestion, question_text="How are you?", question_type="multiple_choice", options=["Good", "Bad"],
        )
        await repository.create(PulseAnswer, user_id="user-1", question_id=question.id, selected_option="Good")
        await repository.create(PulseAnswer, user_id="user-2", question_id=question.id, selected_option="Good")
        await repository.create(PulseAnswer, user_id="user-3", question_id=question.id, explanation_text="meh")

        summary = await repository.pulse_answer_summary(question.id, "user-1")
        assert summary == {"answer_count": 3, "user_has_answered": True, "distribution": {"Good": 2}}
        assert not (await repository.pulse_answer_summary(question.id, "user-9"))["user_has_answered"]
