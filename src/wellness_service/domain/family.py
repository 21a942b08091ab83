"""
SIANI Wellness Service - Family and social collaboration.

Family members join through invite codes, then take part through shared
wellness insights, family goals, notifications and a family message thread.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from siani_common.exceptions import EntityNotFoundError, ValidationError
from siani_infrastructure.database.entities import (
    FamilyCommunication,
    FamilyGoal,
    FamilyMember,
    FamilyNotification,
    InviteStatus,
    SharedWellnessInsight,
)
from ..infrastructure.repository import WellnessRepository
from .identifiers import new_invite_code

logger = structlog.get_logger(__name__)

INVITE_RESPONSES = frozenset({InviteStatus.ACCEPTED.value, InviteStatus.DECLINED.value})


class FamilyService:
    def __init__(self, repository: WellnessRepository) -> None:
        self._repository = repository
        self._stats = {"invites_sent": 0, "invites_answered": 0}
        logger.info("family_service_initialized")

    # --- Members and invites ---

    async def members(self, user_id: str) -> list[FamilyMember]:
        return await self._repository.list(
            FamilyMember, user_id=user_id, order_by=[FamilyMember.created_at.desc()],
        )

    async def add_member(self, user_id: str, values: dict[str, Any]) -> FamilyMember:
        member = await self._repository.create(
            FamilyMember,
            user_id=user_id,
            invite_code=new_invite_code(),
            invite_status=InviteStatus.PENDING.value,
            **values,
        )
        self._stats["invites_sent"] += 1
        logger.info("family_member_invited", user_id=user_id, member_id=member.id,
                    permission_level=member.permission_level)
        return member

    async def respond_to_invite(self, invite_code: str, status: str) -> FamilyMember:
        """Accept or decline an invite; the code itself identifies the member."""
        if status not in INVITE_RESPONSES:
            raise ValidationError(
                f"Invalid invite response: {status}",
                field="status",
                value=status,
                constraint="accepted or declined",
                user_message="Status must be accepted or declined",
            )
        member = await self._repository.first(FamilyMember, filters={"invite_code": invite_code})
        if member is None:
            raise EntityNotFoundError("FamilyInvite", invite_code, user_message="Invite not found")
        member = await self._repository.update(
            FamilyMember, member.id, {"invite_status": status, "last_active_at": datetime.now(timezone.utc)},
        )
        self._stats["invites_answered"] += 1
        logger.info("family_invite_answered", member_id=member.id, status=status)
        return member

    # --- Communication ---

    async def communications(self, user_id: str) -> list[FamilyCommunication]:
        return await self._repository.list(
            FamilyCommunication, user_id=user_id, order_by=[FamilyCommunication.created_at.desc()],
        )

    async def send_communication(self, user_id: str, values: dict[str, Any]) -> FamilyCommunication:
        values = {"sender_id": user_id, "sender_type": "user", **values}
        return await self._repository.create(FamilyCommunication, user_id=user_id, **values)

    # --- Shared insights ---

    async def shared_insights(self, user_id: str, family_member_id: str | None = None) -> list[SharedWellnessInsight]:
        return await self._repository.list(
            SharedWellnessInsight,
            user_id=user_id,
            filters={"family_member_id": family_member_id} if family_member_id else None,
            order_by=[SharedWellnessInsight.created_at.desc()],
        )

    async def share_insight(self, user_id: str, values: dict[str, Any]) -> SharedWellnessInsight:
        return await self._repository.create(SharedWellnessInsight, user_id=user_id, **values)

    async def mark_insight_viewed(self, user_id: str, insight_id: str,
                                  viewer_id: str | None = None) -> SharedWellnessInsight:
        insight = await self._repository.get_or_raise(SharedWellnessInsight, insight_id, user_id=user_id)
        viewed_by = list(insight.viewed_by or [])
        if viewer_id and viewer_id not in viewed_by:
            viewed_by.append(viewer_id)
        return await self._repository.update(
            SharedWellnessInsight, insight_id,
            {"viewed_at": datetime.now(timezone.utc), "viewed_by": viewed_by},
            user_id=user_id,
        )

    # --- Goals and notifications ---

    async def goals(self, user_id: str) -> list[FamilyGoal]:
        return await self._repository.list(FamilyGoal, user_id=user_id, order_by=[FamilyGoal.created_at.desc()])

    async def create_goal(self, user_id: str, values: dict[str, Any]) -> FamilyGoal:
        return await self._repository.create(FamilyGoal, user_id=user_id, **values)

    async def notifications(self, user_id: str, unread_only: bool = False) -> list[FamilyNotification]:
        return await self._repository.list(
            FamilyNotification,
            user_id=user_id,
            conditions=[FamilyNotification.read_at.is_(None)] if unread_only else (),
            order_by=[FamilyNotification.created_at.desc()],
        )

    async def notify(self, user_id: str, values: dict[str, Any]) -> FamilyNotification:
        await self._repository.get_or_raise(FamilyMember, values["family_member_id"], user_id=user_id)
        values = {"sent_at": datetime.now(timezone.utc), **values}
        return await self._repository.create(FamilyNotification, user_id=user_id, **values)

    async def mark_notification_read(self, user_id: str, notification_id: str) -> FamilyNotification:
        return await self._repository.update(
            FamilyNotification, notification_id, {"read_at": datetime.now(timezone.utc)}, user_id=user_id,
        )

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
