"""Daily wellness entities: mood entries, daily action steps and reflections."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import UTCDateTime, UserOwnedModel, utc_now
from ..schema_registry import SchemaRegistry


class Mood(str, Enum):
    HAPPY = "happy"
    CALM = "calm"
    ENERGETIC = "energetic"
    SAD = "sad"
    ANXIOUS = "anxious"
    GRATEFUL = "grateful"


POSITIVE_MOODS = frozenset({Mood.HAPPY.value, Mood.GRATEFUL.value, Mood.CALM.value, Mood.ENERGETIC.value})


@SchemaRegistry.register
class MoodEntry(UserOwnedModel):
    """A single mood check-in, typed or derived from a voice conversation."""

    __tablename__ = "mood_entries"

    mood: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


@SchemaRegistry.register
class DailyAction(UserOwnedModel):
    """One small step planned for a calendar day (YYYY-MM-DD)."""

    __tablename__ = "daily_actions"

    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    step_text: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=5)


@SchemaRegistry.register
class Reflection(UserOwnedModel):
    __tablename__ = "reflections"

    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    gratitude: Mapped[str | None] = mapped_column(Text, nullable=True)
    success: Mapped[str | None] = mapped_column(Text, nullable=True)
    improvement: Mapped[str | None] = mapped_column(Text, nullable=True)
