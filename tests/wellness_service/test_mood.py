"""
Tests for mood tracking and voice mood analysis.
"""
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from siani_infrastructure.database.entities import MoodEntry
from wellness_service.domain.mood import (
    DEFAULT_RECOMMENDATION,
    MOOD_RECOMMENDATIONS,
    MoodAnalysis,
    MoodService,
    SpeechPatterns,
    analyze_speech_patterns,
    combine_analyses,
    dominant_mood,
    mood_recommendations,
    needs_support,
    summarize_moods,
)
from wellness_service.infrastructure import CacheView

NOW = datetime(2025, 3, 12, 12, tzinfo=timezone.utc)


def chat_reply(content: dict) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": json.dumps(content)}}]})


class TestSpeechPatterns:
    """Keyword heuristics over a transcript."""

    def test_short_tired_sentence(self) -> None:
        patterns = analyze_speech_patterns("I am so tired today.")

        assert patterns.speech_rate == "slow"
        assert patterns.energy_level == "low"
        assert patterns.emotional_markers == []

    def test_markers_detected(self) -> None:
        patterns = analyze_speech_patterns("I'm stressed about the deadline but grateful for my friends")

        assert "stress_language" in patterns.emotional_markers
        assert "positive_language" in patterns.emotional_markers

    def test_high_energy_wins(self) -> None:
        assert analyze_speech_patterns("Super tired but excited").energy_level == "high"


class TestCombineAnalyses:
    """Agreement between the model reading and speech markers."""

    def test_positive_agreement_raises_confidence(self) -> None:
        analysis = MoodAnalysis(primary_mood="grateful", confidence=0.7)
        patterns = SpeechPatterns("normal", "moderate", ["positive_language"], [])

        assert combine_analyses(analysis, patterns).confidence == pytest.approx(0.8)

    def test_confidence_capped(self) -> None:
        analysis = MoodAnalysis(primary_mood="anxious", confidence=0.95)
        patterns = SpeechPatterns("fast", "moderate", ["stress_language"], [])

        assert combine_analyses(analysis, patterns).confidence == 1.0

    def test_low_speech_energy_tempers_high(self) -> None:
        analysis = MoodAnalysis(energy_level="high")
        patterns = SpeechPatterns("slow", "low", [], [])

        assert combine_analyses(analysis, patterns).energy_level == "moderate"


class TestRecommendations:
    """Recommendation lists and the support flag."""

    def test_at_most_three(self) -> None:
        analysis = MoodAnalysis(primary_mood="sad", stress_level="high", energy_level="low")
        assert mood_recommendations(analysis) == list(MOOD_RECOMMENDATIONS["sad"])

    def test_unknown_mood_uses_stress_and_energy(self) -> None:
        analysis = MoodAnalysis(primary_mood="calm", stress_level="high", energy_level="low")
        recommendations = mood_recommendations(analysis)

        assert len(recommendations) == 3
        assert recommendations[-1] == "Honor your need for rest"

    def test_needs_support(self) -> None:
        assert needs_support(MoodAnalysis(primary_mood="sad", intensity=8, stress_level="low"))
        assert needs_support(MoodAnalysis(stress_level="high"))
        assert not needs_support(MoodAnalysis(primary_mood="happy", intensity=9, stress_level="low"))

    def test_from_llm_reads_camel_case(self) -> None:
        analysis = MoodAnalysis.from_llm({"primaryMood": "Hopeful", "intensity": 6, "needsSupport": True})

        assert analysis.primary_mood == "hopeful"
        assert analysis.intensity == 6
        assert analysis.stress_level == "moderate"
        assert analysis.needs_support

    def test_from_llm_ignores_malformed_fields(self) -> None:
        analysis = MoodAnalysis.from_llm({
            "primaryMood": 7, "intensity": "high", "confidence": "very", "triggers": "work",
            "needsSupport": "false",
        })

        assert analysis.primary_mood == "neutral"
        assert analysis.intensity == 5
        assert analysis.confidence == 0.5
        assert analysis.triggers == []
        assert not analysis.needs_support

    def test_from_llm_clamps_numbers(self) -> None:
        analysis = MoodAnalysis.from_llm({"intensity": "12", "confidence": 1.7, "triggers": ["rent", None]})

        assert analysis.intensity == 10
        assert analysis.confidence == 1.0
        assert analysis.triggers == ["rent"]


class TestMoodSummary:
    """Dominant mood and insight summaries."""

    def test_dominant_mood_tie_goes_to_later(self) -> None:
        assert dominant_mood({"sad": 2, "happy": 2}) == "happy"
        assert dominant_mood({"happy": 3, "sad": 1}) == "happy"

    def test_dominant_mood_without_entries(self) -> None:
        assert dominant_mood({}) == "neutral"

    def test_summarize(self) -> None:
        entries = [
            MoodEntry(mood="happy", timestamp=NOW - timedelta(days=1)),
            MoodEntry(mood="happy", timestamp=NOW - timedelta(days=10)),
            MoodEntry(mood="sad", timestamp=NOW - timedelta(days=2)),
        ]
        summary = summarize_moods(entries, NOW)

        assert summary["total_entries"] == 3
        assert summary["dominant_mood"] == "happy"
        assert summary["mood_distribution"] == {"happy": 2, "sad": 1}
        assert summary["weekly_average"] == 1
        assert summary["last_week_count"] == 2


class TestMoodService:
    """Stored entries and voice analysis."""

    @pytest.mark.asyncio
    async def test_create_invalidates_cached_list(self, repository, cache, disabled_llm) -> None:
        service = MoodService(repository, disabled_llm, cache)
        await service.create_entry("user-1", "calm")
        assert [e.mood for e in await service.list_entries("user-1")] == ["calm"]
        assert cache.is_cached("user-1", CacheView.MOODS)

        await service.create_entry("user-1", "happy", timestamp=datetime.now(timezone.utc) + timedelta(minutes=1))
        assert not cache.is_cached("user-1", CacheView.MOODS)
        assert [e.mood for e in await service.list_entries("user-1")] == ["happy", "calm"]

    @pytest.mark.asyncio
    async def test_range_and_current(self, repository, cache, disabled_llm) -> None:
        service = MoodService(repository, disabled_llm, cache)
        await service.create_entry("user-1", "sad", timestamp=NOW - timedelta(days=3))
        await service.create_entry("user-1", "calm", timestamp=NOW - timedelta(hours=2))

        trends = await service.trends("user-1", days=7, now=NOW)
        assert [t["mood"] for t in trends] == ["calm", "sad"]
        current = await service.current("user-1", now=NOW)
        assert current is not None and current.mood == "calm"
        assert await service.current("user-1", now=NOW + timedelta(days=5)) is None

    @pytest.mark.asyncio
    async def test_voice_fallback_stores_nothing(self, repository, cache, disabled_llm) -> None:
        service = MoodService(repository, disabled_llm, cache)
        analysis = await service.analyze_voice("user-1", "I feel fine")

        assert analysis.primary_mood == "neutral"
        assert analysis.recommendations == [DEFAULT_RECOMMENDATION]
        assert await repository.count(MoodEntry, user_id="user-1") == 0
        assert service.stats["analysis_fallbacks"] == 1

    @pytest.mark.asyncio
    async def test_voice_analysis_stores_entry(self, repository, cache, llm_factory) -> None:
        llm = llm_factory(lambda request: chat_reply({
            "primaryMood": "anxious", "intensity": 8, "confidence": 0.5,
            "stressLevel": "high", "energyLevel": "moderate", "needsSupport": False,
        }))
        service = MoodService(repository, llm, cache)
        analysis = await service.analyze_voice("user-1", "I'm so stressed about the deadline")
        await llm.close()

        assert analysis.confidence == pytest.approx(0.6)
        assert analysis.needs_support
        assert analysis.recommendations == list(MOOD_RECOMMENDATIONS["anxious"])
        entries = await repository.list(MoodEntry, user_id="user-1")
        assert [e.mood for e in entries] == ["anxious"]
        assert entries[0].notes == "Intensity: 8/10, Energy: moderate, Stress: high"

    @pytest.mark.asyncio
    async def test_malformed_analysis_still_stored(self, repository, cache, llm_factory) -> None:
        llm = llm_factory(lambda request: chat_reply({"primaryMood": "calm", "intensity": "high"}))
        service = MoodService(repository, llm, cache)
        analysis = await service.analyze_voice("user-1", "Feeling settled today")
        await llm.close()

        assert analysis.primary_mood == "calm"
        assert analysis.intensity == 5
        [entry] = await repository.list(MoodEntry, user_id="user-1")
        assert entry.notes.startswith("Intensity: 5/10")
