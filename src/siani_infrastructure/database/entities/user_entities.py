"""
User entities for the SIANI wellness service.

The users table is the anchor for every user-owned foreign key. Onboarding
preferences hang off it one-to-one.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import BaseModel, JSONType, UTCDateTime, UserOwnedModel
from ..schema_registry import SchemaRegistry


class CommunicationStyle(str, Enum):
    GENTLE = "gentle"
    DIRECT = "direct"
    FLEXIBLE = "flexible"


@SchemaRegistry.register
class User(BaseModel):
    """User entity - anchor table for all user-owned rows."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(128), nullable=False, unique=True, index=True,
    )
    password_hash: Mapped[str | None] = mapped_column(
        String(512), nullable=True,
    )


@SchemaRegistry.register
class UserPreferences(UserOwnedModel):
    """Onboarding choices that personalise coaching."""

    __tablename__ = "user_preferences"
    __table_args__ = (UniqueConstraint("user_id", name="uq_user_preferences_user_id"),)

    preferred_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    primary_goals: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    support_areas: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    communication_style: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CommunicationStyle.GENTLE.value,
    )
    has_completed_before: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    skipped: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
