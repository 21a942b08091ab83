"""Care coordination entities: care team, CHW messages, appointments, goals and events."""
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import JSONType, UTCDateTime, UserOwnedModel, utc_now
from ..schema_registry import SchemaRegistry


class SenderType(str, Enum):
    USER = "user"
    CHW = "chw"


class CareEventSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


FAMILY_ALERT_SEVERITIES = frozenset({CareEventSeverity.HIGH.value, CareEventSeverity.URGENT.value})


@SchemaRegistry.register
class CareTeamMember(UserOwnedModel):
    __tablename__ = "care_team_members"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(128), nullable=False)
    organization: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_added: Mapped[dt.datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now, index=True)


@SchemaRegistry.register
class Message(UserOwnedModel):
    """Message thread between a user and their community health worker."""

    __tablename__ = "messages"

    sender_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sender_type: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[dt.datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now, index=True)


@SchemaRegistry.register
class Appointment(UserOwnedModel):
    __tablename__ = "appointments"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(255), nullable=False)
    datetime: Mapped[dt.datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


@SchemaRegistry.register
class CollaborativeCareGoal(UserOwnedModel):
    """A goal shared between the user, family and care team."""

    __tablename__ = "collaborative_care_goals"
    __table_args__ = (CheckConstraint("progress BETWEEN 0 AND 100", name="ck_care_goals_progress"),)

    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    creator_type: Mapped[str] = mapped_column(String(16), nullable=False, default="user")
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    target_date: Mapped[dt.datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active")
    family_support: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    milestones: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)


@SchemaRegistry.register
class CareEvent(UserOwnedModel):
    __tablename__ = "care_events"

    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default="low", index=True)
    family_notified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    follow_up_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    related_goal_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("collaborative_care_goals.id", ondelete="SET NULL"), nullable=True,
    )
    # "metadata" is reserved on declarative classes
    event_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSONType, nullable=False, default=dict)
    resolved_at: Mapped[dt.datetime | None] = mapped_column(UTCDateTime(), nullable=True)
