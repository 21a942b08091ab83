"""
Tests for family members, invites, insights and notifications.
"""
import pytest

from siani_common.exceptions import EntityNotFoundError, ValidationError
from wellness_service.domain.family import FamilyService

MEMBER = {"name": "Rosa", "relationship": "sister", "email": "rosa@example.com"}


class TestInvites:
    """Invite codes identify members across users."""

    @pytest.mark.asyncio
    async def test_new_member_is_pending_with_code(self, repository) -> None:
        service = FamilyService(repository)
        member = await service.add_member("user-1", MEMBER)

        assert member.invite_status == "pending"
        assert member.invite_code.startswith("invite-")
        assert member.permission_level == "view_only"
        assert [m.id for m in await service.members("user-1")] == [member.id]

    @pytest.mark.asyncio
    async def test_accept_invite(self, repository) -> None:
        service = FamilyService(repository)
        member = await service.add_member("user-1", MEMBER)

        accepted = await service.respond_to_invite(member.invite_code, "accepted")
        assert accepted.invite_status == "accepted"
        assert accepted.last_active_at is not None
        assert service.stats == {"invites_sent": 1, "invites_answered": 1}

    @pytest.mark.asyncio
    async def test_invalid_response_and_unknown_code(self, repository) -> None:
        service = FamilyService(repository)
        member = await service.add_member("user-1", MEMBER)

        with pytest.raises(ValidationError):
            await service.respond_to_invite(member.invite_code, "maybe")
        with pytest.raises(EntityNotFoundError):
            await service.respond_to_invite("invite-0-missing", "accepted")


class TestSharingAndNotifications:
    """Shared insights, messages and notifications."""

    @pytest.mark.asyncio
    async def test_insight_filter_and_view(self, repository) -> None:
        service = FamilyService(repository)
        member = await service.add_member("user-1", MEMBER)
        shared = await service.share_insight("user-1", {
            "family_member_id": member.id, "insight_type": "mood", "title": "Good week", "content": "Mostly calm",
        })
        await service.share_insight("user-1", {"insight_type": "goal", "title": "Job", "content": "Interview"})

        assert [i.id for i in await service.shared_insights("user-1", member.id)] == [shared.id]
        assert len(await service.shared_insights("user-1")) == 2

        viewed = await service.mark_insight_viewed("user-1", shared.id, viewer_id=member.id)
        viewed = await service.mark_insight_viewed("user-1", shared.id, viewer_id=member.id)
        assert viewed.viewed_at is not None
        assert viewed.viewed_by == [member.id]

    @pytest.mark.asyncio
    async def test_communication_defaults_sender(self, repository) -> None:
        service = FamilyService(repository)
        message = await service.send_communication("user-1", {"content": "Dinner Sunday?"})

        assert message.sender_id == "user-1"
        assert message.sender_type == "user"
        assert message.message_type == "text"

    @pytest.mark.asyncio
    async def test_unread_notifications(self, repository) -> None:
        service = FamilyService(repository)
        member = await service.add_member("user-1", MEMBER)
        first = await service.notify("user-1", {
            "family_member_id": member.id, "title": "Check-in", "message": "Doing well", "notification_type": "update",
        })
        await service.notify("user-1", {
            "family_member_id": member.id, "title": "Goal", "message": "New goal", "notification_type": "goal",
        })
        assert first.sent_at is not None

        read = await service.mark_notification_read("user-1", first.id)
        assert read.read_at is not None
        unread = await service.notifications("user-1", unread_only=True)
        assert [n.title for n in unread] == ["Goal"]
        assert len(await service.notifications("user-1")) == 2

    @pytest.mark.asyncio
    async def test_notify_requires_own_member(self, repository) -> None:
        with pytest.raises(EntityNotFoundError):
            await FamilyService(repository).notify("user-1", {
                "family_member_id": "missing", "title": "x", "message": "y", "notification_type": "update",
            })

    @pytest.mark.asyncio
    async def test_goals(self, repository) -> None:
        service = FamilyService(repository)
        goal = await service.create_goal("user-1", {"title": "Sunday dinners", "collaborators": ["Rosa"]})

        assert goal.progress == 0
        assert [g.title for g in await service.goals("user-1")] == ["Sunday dinners"]
