"""
SIANI Wellness Service - Mood tracking and voice mood analysis.

Mood entries are typed by the user or derived from voice conversations.
Voice-derived moods combine a language-model reading of the transcript
with simple speech-pattern heuristics.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog

from siani_common.exceptions import LLMServiceError
from siani_infrastructure.database.entities import MoodEntry
from ..infrastructure.cache import CacheView, QueryCache
from ..infrastructure.clients import OpenAIChatClient, safe_number, string_list
from ..infrastructure.repository import WellnessRepository

logger = structlog.get_logger(__name__)

NEUTRAL_MOOD = "neutral"
INSIGHT_WINDOW_DAYS = 30
WEEKS_PER_MONTH = 4.3

MOOD_ANALYSIS_PROMPT = """You are an expert trauma-informed emotional wellness coach analyzing voice input for mood tracking.

Analyze the following transcript for:
1. Primary mood state (happy, calm, energetic, sad, anxious, grateful, frustrated, hopeful, overwhelmed, determined)
2. Emotional intensity (1-10 scale)
3. Stress indicators
4. Energy levels
5. Social connection needs
6. Potential triggers mentioned
7. Whether they need immediate support

Consider:
- Word choice and emotional language
- Topics discussed and their emotional weight
- Expression of needs, fears, or hopes
- Mentions of relationships, challenges, or victories
- Signs of resilience or struggle

Respond with JSON only in this exact format:
{
  "primaryMood": "mood_name",
  "intensity": number,
  "confidence": number,
  "emotionalTone": "description",
  "stressLevel": "low|moderate|high",
  "energyLevel": "low|moderate|high",
  "socialConnection": "isolated|neutral|connected",
  "triggers": ["trigger1", "trigger2"],
  "needsSupport": boolean
}"""

_HIGH_ENERGY = re.compile(r"really|super|amazing|excited|can't wait|love|awesome")
_LOW_ENERGY = re.compile(r"tired|exhausted|drained|can't|struggling|hard|difficult")
_STRESS = re.compile(r"stressed|worried|anxious|overwhelmed|pressure|deadline")
_POSITIVE = re.compile(r"grateful|thankful|proud|accomplished|happy|good|better")

POSITIVE_AGREEMENT = frozenset({"happy", "grateful", "hopeful", "energetic"})
STRESS_AGREEMENT = frozenset({"anxious", "overwhelmed", "frustrated"})
SUPPORT_MOODS = frozenset({"anxious", "sad", "overwhelmed"})

MOOD_RECOMMENDATIONS: dict[str, tuple[str, ...]] = {
    "anxious": (
        "Try a 5-minute breathing exercise",
        "Take a short walk outside",
        "Write down 3 things you can control right now",
    ),
    "sad": (
        "Reach out to someone who cares about you",
        "Do something kind for yourself",
        "Remember: this feeling will pass",
    ),
    "happy": (
        "Share this positive energy with someone",
        "Write down what you're grateful for",
        "Plan something to look forward to",
    ),
    "energetic": (
        "Channel this energy into your goals",
        "Tackle a task you've been putting off",
        "Plan your next steps forward",
    ),
}
MOOD_RECOMMENDATIONS["overwhelmed"] = MOOD_RECOMMENDATIONS["anxious"]
MOOD_RECOMMENDATIONS["frustrated"] = MOOD_RECOMMENDATIONS["sad"]
MOOD_RECOMMENDATIONS["grateful"] = MOOD_RECOMMENDATIONS["happy"]
MOOD_RECOMMENDATIONS["determined"] = MOOD_RECOMMENDATIONS["energetic"]

HIGH_STRESS_RECOMMENDATIONS = (
    "Consider setting boundaries for today",
    'Practice saying "no" to non-essential requests',
)
LOW_ENERGY_RECOMMENDATIONS = (
    "Honor your need for rest",
    "Do something nourishing for your body",
)
DEFAULT_RECOMMENDATION = "Take a moment to check in with yourself"



def _text(value: Any, default: str) -> str:
    return value.strip() if isinstance(value, str) and value.strip() else default


@dataclass
class MoodAnalysis:
    primary_mood: str = NEUTRAL_MOOD
    intensity: int = 5
    confidence: float = 0.5
    emotional_tone: str = "balanced"
    stress_level: str = "moderate"
    energy_level: str = "moderate"
    social_connection: str = "neutral"
    triggers: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    needs_support: bool = False

    @classmethod
    def from_llm(cls, data: dict[str, Any]) -> MoodAnalysis:
        """Read the model's camelCase JSON, keeping defaults for missing or malformed keys."""
        defaults = cls()
        return cls(
            primary_mood=_text(data.get("primaryMood"), defaults.primary_mood).lower(),
            intensity=safe_number(data.get("intensity"), defaults.intensity, lower=1, upper=10, cast=int),
            confidence=safe_number(data.get("confidence"), defaults.confidence, lower=0.0, upper=1.0),
            emotional_tone=_text(data.get("emotionalTone"), defaults.emotional_tone),
            stress_level=_text(data.get("stressLevel"), defaults.stress_level),
            energy_level=_text(data.get("energyLevel"), defaults.energy_level),
            social_connection=_text(data.get("socialConnection"), defaults.social_connection),
            triggers=string_list(data.get("triggers")),
            needs_support=data.get("needsSupport") is True,
        )

    @property
    def notes(self) -> str:
        return f"Intensity: {self.intensity}/10, Energy: {self.energy_level}, Stress: {self.stress_level}"


def default_mood_analysis() -> MoodAnalysis:
    return MoodAnalysis(recommendations=[DEFAULT_RECOMMENDATION])


@dataclass
class SpeechPatterns:
    speech_rate: str
    energy_level: str
    emotional_markers: list[str]
    linguistic_patterns: list[str]


def analyze_speech_patterns(transcript: str) -> SpeechPatterns:
    text = transcript.lower()
    words = text.split()
    sentences = [s for s in re.split(r"[.!?]+", transcript) if s.strip()]
    words_per_sentence = len(words) / max(len(sentences), 1)
    if words_per_sentence > 15:
        speech_rate = "fast"
    elif words_per_sentence < 8:
        speech_rate = "slow"
    else:
        speech_rate = "normal"

    energy: list[str] = []
    if _HIGH_ENERGY.search(text):
        energy.append("high_energy_words")
    if _LOW_ENERGY.search(text):
        energy.append("low_energy_words")
    markers: list[str] = []
    if _STRESS.search(text):
        markers.append("stress_language")
    if _POSITIVE.search(text):
        markers.append("positive_language")

    if "high_energy_words" in energy:
        energy_level = "high"
    elif "low_energy_words" in energy:
        energy_level = "low"
    else:
        energy_level = "moderate"
    return SpeechPatterns(speech_rate, energy_level, markers, energy + markers)


def combine_analyses(analysis: MoodAnalysis, patterns: SpeechPatterns) -> MoodAnalysis:
    """Raise confidence when speech markers agree; let low speech energy temper high energy."""
    if "positive_language" in patterns.emotional_markers and analysis.primary_mood in POSITIVE_AGREEMENT:
        analysis.confidence = min(1.0, analysis.confidence + 0.1)
    if "stress_language" in patterns.emotional_markers and analysis.primary_mood in STRESS_AGREEMENT:
        analysis.confidence = min(1.0, analysis.confidence + 0.1)
    if patterns.energy_level == "low" and analysis.energy_level == "high":
        analysis.energy_level = "moderate"
    return analysis


def mood_recommendations(analysis: MoodAnalysis) -> list[str]:
    recommendations = list(MOOD_RECOMMENDATIONS.get(analysis.primary_mood, ()))
    if analysis.stress_level == "high":
        recommendations.extend(HIGH_STRESS_RECOMMENDATIONS)
    if analysis.energy_level == "low":
        recommendations.extend(LOW_ENERGY_RECOMMENDATIONS)
    return recommendations[:3]


def needs_support(analysis: MoodAnalysis) -> bool:
    return (
        analysis.needs_support
        or (analysis.intensity >= 8 and analysis.primary_mood in SUPPORT_MOODS)
        or analysis.stress_level == "high"
    )


def dominant_mood(counts: dict[str, int]) -> str:
    """Most frequent mood; on a tie the mood counted later wins."""
    dominant = NEUTRAL_MOOD
    for mood, count in counts.items():
        if not counts.get(dominant, 0) > count:
            dominant = mood
    return dominant


def summarize_moods(entries: Sequence[MoodEntry], now: datetime) -> dict[str, Any]:
    counts: dict[str, int] = {}
    for entry in entries:
        counts[entry.mood] = counts.get(entry.mood, 0) + 1
    week_ago = now - timedelta(days=7)
    return {
        "total_entries": len(entries),
        "dominant_mood": dominant_mood(counts),
        "mood_distribution": counts,
        "weekly_average": round(len(entries) / WEEKS_PER_MONTH),
        "last_week_count": sum(1 for entry in entries if entry.timestamp >= week_ago),
    }


class MoodService:
    """Mood entries, trends and voice-derived mood analysis."""

    def __init__(self, repository: WellnessRepository, llm: OpenAIChatClient, cache: QueryCache) -> None:
        self._repository = repository
        self._llm = llm
        self._cache = cache
        self._stats = {"entries_created": 0, "voice_analyses": 0, "analysis_fallbacks": 0}
        logger.info("mood_service_initialized", llm_enabled=llm.enabled)

    async def create_entry(self, user_id: str, mood: str, notes: str | None = None,
                           timestamp: datetime | None = None) -> MoodEntry:
        values: dict[str, Any] = {"user_id": user_id, "mood": mood, "notes": notes}
        if timestamp is not None:
            values["timestamp"] = timestamp
        entry = await self._repository.create(MoodEntry, **values)
        self._cache.invalidate(user_id, CacheView.MOODS)
        self._stats["entries_created"] += 1
        logger.info("mood_entry_created", user_id=user_id, mood=mood)
        return entry

    async def list_entries(self, user_id: str, start: datetime | None = None,
                           end: datetime | None = None) -> list[MoodEntry]:
        """Newest first; the range applies only when both bounds are given."""
        if start is not None and end is not None:
            return await self._between(user_id, start, end)

        async def load() -> list[MoodEntry]:
            return await self._repository.list(
                MoodEntry, user_id=user_id, order_by=[MoodEntry.timestamp.desc()],
            )

        return await self._cache.get_or_load(user_id, CacheView.MOODS, load)

    async def trends(self, user_id: str, days: int = 7, now: datetime | None = None) -> list[dict[str, Any]]:
        now = now or datetime.now(timezone.utc)
        entries = await self._between(user_id, now - timedelta(days=days), now)
        return [{"date": e.timestamp, "mood": e.mood, "notes": e.notes} for e in entries]

    async def current(self, user_id: str, now: datetime | None = None) -> MoodEntry | None:
        now = now or datetime.now(timezone.utc)
        entries = await self._between(user_id, now - timedelta(days=1), now)
        return entries[0] if entries else None

    async def insights(self, user_id: str, now: datetime | None = None) -> dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        entries = await self._between(user_id, now - timedelta(days=INSIGHT_WINDOW_DAYS), now)
        return summarize_moods(entries, now)

    async def analyze_voice(self, user_id: str, transcript: str, context: str | None = None) -> MoodAnalysis:
        """Analyse a transcript, store the detected mood and attach recommendations.

        Falls back to a neutral analysis, without storing an entry, when the
        language model is unavailable.
        """
        self._stats["voice_analyses"] += 1
        content = f"Context: {context}\n\nCurrent transcript: {transcript}" if context else transcript
        try:
            data = await self._llm.complete_json(
                [{"role": "user", "content": content}],
                system_prompt=MOOD_ANALYSIS_PROMPT,
                temperature=0.3,
            )
        except LLMServiceError as e:
            self._stats["analysis_fallbacks"] += 1
            logger.warning("mood_analysis_fallback", user_id=user_id, error=e.message)
            return default_mood_analysis()

        analysis = combine_analyses(MoodAnalysis.from_llm(data), analyze_speech_patterns(transcript))
        await self.create_entry(user_id, analysis.primary_mood, analysis.notes)
        analysis.recommendations = mood_recommendations(analysis)
        analysis.needs_support = needs_support(analysis)
        logger.info("voice_mood_detected", user_id=user_id, mood=analysis.primary_mood,
                    intensity=analysis.intensity, needs_support=analysis.needs_support)
        return analysis

    async def _between(self, user_id: str, start: datetime, end: datetime) -> list[MoodEntry]:
        return await self._repository.list(
            MoodEntry,
            user_id=user_id,
            conditions=[MoodEntry.timestamp >= start, MoodEntry.timestamp <= end],
            order_by=[MoodEntry.timestamp.desc()],
        )

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
