"""Community pulse: short polls shown on the home base and in pop-ups."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import BaseModel, JSONType, UTCDateTime, UserOwnedModel, utc_now
from ..schema_registry import SchemaRegistry


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    EMOJI_SCALE = "emoji_scale"
    OPEN_TEXT = "open_text"


@SchemaRegistry.register
class PulseQuestion(BaseModel):
    __tablename__ = "pulse_questions"

    question_text: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    question_type: Mapped[str] = mapped_column(String(32), nullable=False)
    options: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    topic: Mapped[str | None] = mapped_column(String(64), nullable=True)
    tags: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    start_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    show_in_popup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_in_homebase: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_comparison: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


@SchemaRegistry.register
class PulseAnswer(UserOwnedModel):
    __tablename__ = "pulse_answers"
    __table_args__ = (UniqueConstraint("user_id", "question_id", name="uq_pulse_answers_user_question"),)

    question_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("pulse_questions.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    selected_option: Mapped[str | None] = mapped_column(String(255), nullable=True)
    explanation_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    answered_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now, index=True)
    user_snapshot: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
