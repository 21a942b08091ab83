"""
SIANI Wellness Service - Voice conversation processing.

Turns a user's spoken transcript into a short coaching reply, keeps the
conversation grouped into sessions and records the detected mood alongside
each exchange. Speech synthesis is delegated to ElevenLabs.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog

from siani_common.exceptions import LLMServiceError, ValidationError
from siani_infrastructure.database.entities import (
    MAX_AI_RESPONSE_LENGTH,
    MAX_USER_MESSAGE_LENGTH,
    VoiceConversation,
    VoiceInteraction,
)
from ..infrastructure.clients import ElevenLabsClient, OpenAIChatClient
from ..infrastructure.repository import WellnessRepository
from .coaching import CoachingResult, coach
from .identifiers import new_session_id
from .mood import MoodAnalysis, MoodService

logger = structlog.get_logger(__name__)

SESSION_TIMEOUT = timedelta(minutes=30)
HISTORY_EXCHANGES = 5
MOOD_CONTEXT_EXCHANGES = 3
SESSION_HISTORY_LIMIT = 20
RECENT_CONVERSATIONS_LIMIT = 10
TOPIC_WORDS = 5

EMPTY_REPLY = "Tell me what's going on with you."
FALLBACK_REPLY = "I'm having trouble connecting right now, but I'm still here with you. Try again in a moment."
NEW_SESSION_CONTEXT = "This is the start of a new conversation session."

COACH_PROMPT = """You are SIANI, a trauma-informed coach who helps people remember their inner strength. You're warm, grounded, and speak naturally - like talking to a trusted friend.

YOUR CONVERSATION STYLE:
- Sound human and natural, not robotic or clinical
- Use their name sparingly (maybe once every 3-4 exchanges, not every response)
- Vary your language - don't repeat the same phrases
- Keep responses short and conversational (10-20 words typically)
- Ask questions that feel genuine, not scripted

NATURAL SPEECH PATTERNS:
- Use contractions (I'm, you're, can't, won't)
- Include natural pauses with commas
- Vary sentence structure and length
- Sound like you're really listening, not following a script

WHAT TO AVOID:
- Overusing their name (sounds robotic)
- Therapy speak or clinical language
- Repetitive response patterns
- Long, formal sentences
- Sounding like an AI assistant

BE REAL with them. Sound human.

"""

REPLY_PARAMS: dict[str, Any] = {
    "max_tokens": 60,
    "temperature": 0.9,
    "frequency_penalty": 0.3,
    "presence_penalty": 0.2,
}


@dataclass
class VoiceReply:
    response: str
    session_id: str
    mood: MoodAnalysis
    coaching: CoachingResult | None = None


def history_context(history: Sequence[VoiceConversation]) -> str:
    """Describe prior exchanges, newest first, for the system prompt."""
    if not history:
        return NEW_SESSION_CONTEXT
    lines = []
    for i, conv in enumerate(history):
        label = "Most recent" if i == 0 else f"{i + 1} exchanges ago"
        lines.append(f'{label}: User said "{conv.user_message}" - You responded "{conv.ai_response}"')
    return "Recent conversation context (newest first):\n" + "\n".join(lines)


def build_messages(history: Sequence[VoiceConversation], transcript: str) -> list[dict[str, str]]:
    """Chat turns oldest first, ending with the new transcript."""
    messages = []
    for conv in reversed(history):
        messages.append({"role": "user", "content": conv.user_message})
        messages.append({"role": "assistant", "content": conv.ai_response})
    messages.append({"role": "user", "content": transcript})
    return messages


def mood_context(history: Sequence[VoiceConversation]) -> str:
    return "\n".join(
        f"{conv.user_message} → {conv.ai_response}" for conv in history[-MOOD_CONTEXT_EXCHANGES:]
    )


class VoiceService:
    """Voice conversation sessions, replies and text-to-speech."""

    def __init__(
        self,
        repository: WellnessRepository,
        llm: OpenAIChatClient,
        tts: ElevenLabsClient,
        mood_service: MoodService,
    ) -> None:
        self._repository = repository
        self._llm = llm
        self._tts = tts
        self._mood_service = mood_service
        self._stats = {"processed": 0, "reply_fallbacks": 0, "tts_requests": 0}
        logger.info("voice_service_initialized", llm_enabled=llm.enabled, tts_enabled=tts.enabled)

    async def current_session_id(self, user_id: str, now: datetime | None = None) -> str:
        """Reuse the latest session if it was active in the last 30 minutes."""
        now = now or datetime.now(timezone.utc)
        latest = await self._repository.latest_voice_conversation(user_id)
        if latest is not None and now - latest.timestamp < SESSION_TIMEOUT:
            return latest.session_id
        return new_session_id()

    async def conversation_history(
        self, user_id: str, session_id: str, limit: int = SESSION_HISTORY_LIMIT,
    ) -> list[VoiceConversation]:
        return await self._repository.list(
            VoiceConversation,
            user_id=user_id,
            filters={"session_id": session_id},
            order_by=[VoiceConversation.timestamp.desc()],
            limit=limit,
        )

    async def recent_conversations(self, user_id: str, limit: int = RECENT_CONVERSATIONS_LIMIT) -> list[VoiceConversation]:
        return await self._repository.list(
            VoiceConversation, user_id=user_id, order_by=[VoiceConversation.timestamp.desc()], limit=limit,
        )

    async def process(self, user_id: str, transcript: str) -> VoiceReply:
        transcript = (transcript or "").strip()
        if not transcript:
            raise ValidationError(
                "Empty transcript", field="transcript", user_message="Transcript is required",
            )
        self._stats["processed"] += 1
        session_id = await self.current_session_id(user_id)
        history = await self.conversation_history(user_id, session_id, limit=HISTORY_EXCHANGES)
        logger.debug("voice_session_resolved", user_id=user_id, session_id=session_id, exchanges=len(history))

        reply = await self._reply(history, transcript)
        analysis = await self._mood_service.analyze_voice(user_id, transcript, mood_context(history))
        coaching = coach(transcript)

        await self._repository.create(
            VoiceConversation,
            user_id=user_id,
            session_id=session_id,
            user_message=transcript[:MAX_USER_MESSAGE_LENGTH],
            ai_response=reply[:MAX_AI_RESPONSE_LENGTH],
            mood=analysis.primary_mood,
            emotional_tone=analysis.emotional_tone or "neutral",
            conversation_context={
                "intensity": analysis.intensity,
                "topics": transcript.split()[:TOPIC_WORDS],
                "sessionLength": len(history) + 1,
                "energy": analysis.energy_level,
                **coaching.to_context(),
            },
        )
        await self._repository.create(VoiceInteraction, user_id=user_id, transcript=transcript, response=reply)
        logger.info("voice_input_processed", user_id=user_id, session_id=session_id, mood=analysis.primary_mood,
                    domain=coaching.domain, sccs_points=coaching.sccs_points)
        return VoiceReply(response=reply, session_id=session_id, mood=analysis, coaching=coaching)

    async def synthesize(self, text: str | None) -> bytes:
        if not text or not text.strip():
            raise ValidationError("Empty text", field="text", user_message="Text is required")
        self._stats["tts_requests"] += 1
        return await self._tts.synthesize(text)

    async def voices(self) -> list[dict[str, Any]]:
        return await self._tts.list_voices()

    async def _reply(self, history: Sequence[VoiceConversation], transcript: str) -> str:
        try:
            reply = await self._llm.complete(
                build_messages(history, transcript),
                system_prompt=COACH_PROMPT + history_context(history),
                **REPLY_PARAMS,
            )
        except LLMServiceError as e:
            self._stats["reply_fallbacks"] += 1
            logger.warning("voice_reply_fallback", error=e.message, retryable=e.retryable)
            return FALLBACK_REPLY
        return reply or EMPTY_REPLY

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
