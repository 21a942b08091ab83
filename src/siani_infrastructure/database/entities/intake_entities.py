"""Intake answers and the partner referrals they trigger."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import JSONType, UTCDateTime, UserOwnedModel
from ..schema_registry import SchemaRegistry


class ReferralStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    ACCEPTED = "accepted"
    COMPLETED = "completed"
    DECLINED = "declined"


@SchemaRegistry.register
class IntakeResponse(UserOwnedModel):
    __tablename__ = "intake_responses"

    domain: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    field: Mapped[str] = mapped_column(String(128), nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    referral_tags: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default="low")


@SchemaRegistry.register
class Referral(UserOwnedModel):
    __tablename__ = "referrals"

    referral_type: Mapped[str] = mapped_column(String(64), nullable=False)
    partner_organization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ReferralStatus.PENDING.value, index=True)
    date_sent: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    urgency: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
