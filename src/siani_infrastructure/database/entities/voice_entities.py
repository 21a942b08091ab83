"""Voice coaching transcripts and conversational memory."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import JSONType, UTCDateTime, UserOwnedModel, utc_now
from ..schema_registry import SchemaRegistry

MAX_USER_MESSAGE_LENGTH = 1000
MAX_AI_RESPONSE_LENGTH = 2000


@SchemaRegistry.register
class VoiceInteraction(UserOwnedModel):
    __tablename__ = "voice_interactions"

    transcript: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    session_type: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    discovery_phase: Mapped[str | None] = mapped_column(String(32), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now, index=True)


@SchemaRegistry.register
class VoiceConversation(UserOwnedModel):
    """One user/assistant exchange inside a voice session."""

    __tablename__ = "voice_conversations"

    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_message: Mapped[str] = mapped_column(String(MAX_USER_MESSAGE_LENGTH), nullable=False)
    ai_response: Mapped[str] = mapped_column(String(MAX_AI_RESPONSE_LENGTH), nullable=False)
    mood: Mapped[str | None] = mapped_column(String(32), nullable=True)
    emotional_tone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    conversation_context: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now, index=True)
