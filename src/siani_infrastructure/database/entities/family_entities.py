"""Family and social support entities."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import JSONType, UTCDateTime, UserOwnedModel
from ..schema_registry import SchemaRegistry


class PermissionLevel(str, Enum):
    VIEW_ONLY = "view_only"
    LIMITED = "limited"
    FULL = "full"
    EMERGENCY_ONLY = "emergency_only"


class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


def _family_member_fk(nullable: bool) -> Any:
    return mapped_column(
        String(64), ForeignKey("family_members.id", ondelete="CASCADE"),
        nullable=nullable, index=True,
    )


@SchemaRegistry.register
class FamilyMember(UserOwnedModel):
    """A person the user invited into their support circle."""

    __tablename__ = "family_members"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    relationship: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_emergency_contact: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    permission_level: Mapped[str] = mapped_column(
        String(32), nullable=False, default=PermissionLevel.VIEW_ONLY.value,
    )
    invite_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=InviteStatus.PENDING.value,
    )
    invite_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    notification_preferences: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    last_active_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)


@SchemaRegistry.register
class SharedWellnessInsight(UserOwnedModel):
    __tablename__ = "shared_wellness_insights"

    family_member_id: Mapped[str | None] = _family_member_fk(nullable=True)
    insight_type: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    share_level: Mapped[str] = mapped_column(String(32), nullable=False, default="summary")
    shared_with: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    viewed_by: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    auto_shared: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    viewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)


@SchemaRegistry.register
class FamilyGoal(UserOwnedModel):
    __tablename__ = "family_goals"

    created_by_member_id: Mapped[str | None] = _family_member_fk(nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    collaborators: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    milestones: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    celebration_message: Mapped[str | None] = mapped_column(Text, nullable=True)


@SchemaRegistry.register
class FamilyNotification(UserOwnedModel):
    __tablename__ = "family_notifications"

    family_member_id: Mapped[str] = _family_member_fk(nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    notification_type: Mapped[str] = mapped_column(String(32), nullable=False)
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="normal")
    delivery_method: Mapped[str] = mapped_column(String(16), nullable=False, default="in_app")
    sent_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    action_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    action_url: Mapped[str | None] = mapped_column(Text, nullable=True)


@SchemaRegistry.register
class FamilyCommunication(UserOwnedModel):
    __tablename__ = "family_communication"

    family_member_id: Mapped[str | None] = _family_member_fk(nullable=True)
    sender_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sender_type: Mapped[str] = mapped_column(String(16), nullable=False)
    message_type: Mapped[str] = mapped_column(String(32), nullable=False, default="text")
    content: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
