"""
Tests for biometric insights and mood correlation.
"""
import json
from types import SimpleNamespace

import httpx
import pytest

from siani_common.exceptions import ValidationError
from siani_infrastructure.database.entities import HealthInsight, MoodBiometricCorrelation, MoodEntry
from wellness_service.domain.biometrics import (
    FALLBACK_INSIGHT,
    FALLBACK_RECOMMENDATION,
    FALLBACK_STRENGTH,
    BiometricAverages,
    BiometricService,
    activity_impact,
    biometric_factors,
    correlation_prompt,
    generate_insights,
    heart_rate_impact,
    sleep_impact,
    sleep_quality_label,
    stress_impact,
    validate_measurements,
)


def reading(**values):
    fields = dict(heart_rate=None, sleep_duration=None, step_count=None, stress_level=None, active_minutes=None)
    fields.update(values)
    return SimpleNamespace(**fields)


class TestValidateMeasurements:
    def test_requires_one_measurement(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_measurements({"source": "manual", "heart_rate": None, "sleep_quality": ""})
        assert exc_info.value.user_message == "Please enter at least one biometric measurement."

    def test_single_measurement_is_enough(self) -> None:
        validate_measurements({"blood_oxygen": 98.0})


class TestGenerateInsights:
    """Threshold rules per measurement."""

    def test_heart_rate_bands(self) -> None:
        [low] = generate_insights({"heart_rate": 55})
        [high] = generate_insights({"heart_rate": 110})

        assert (low.title, low.severity) == ("Low Resting Heart Rate", "medium")
        assert (high.title, high.severity) == ("Elevated Resting Heart Rate", "high")
        assert generate_insights({"heart_rate": 75}) == []

    def test_short_sleep_beats_quality(self) -> None:
        [insight] = generate_insights({"sleep_duration": 5.0, "sleep_quality": "poor"})
        assert insight.title == "Insufficient Sleep Duration"
        assert insight.severity == "high"

    def test_poor_quality(self) -> None:
        [insight] = generate_insights({"sleep_duration": 8.0, "sleep_quality": "poor"})
        assert insight.title == "Poor Sleep Quality"

    def test_activity_and_stress(self) -> None:
        insights = generate_insights({"step_count": 16000, "stress_level": 8})

        assert [i.type for i in insights] == ["activity", "stress"]
        assert insights[0].trend_direction == "improving"
        assert insights[1].severity == "high"

    def test_order_is_heart_sleep_activity_stress(self) -> None:
        insights = generate_insights({"heart_rate": 50, "sleep_duration": 4, "step_count": 1000, "stress_level": 2})
        assert [i.type for i in insights] == ["heart_health", "sleep", "activity", "stress"]


class TestImpacts:
    def test_heart_rate_impact(self) -> None:
        assert heart_rate_impact(90, "anxious") == "negative"
        assert heart_rate_impact(65, "calm") == "positive"
        assert heart_rate_impact(90, "happy") == "neutral"

    def test_sleep(self) -> None:
        assert [sleep_quality_label(h) for h in (5, 6.5, 8, 9.5)] == ["poor", "fair", "good", "excellent"]
        assert [sleep_impact(h) for h in (5, 6.5, 8)] == ["negative", "neutral", "positive"]

    def test_activity_and_stress(self) -> None:
        assert [activity_impact(s) for s in (None, 3000, 6000, 9000)] == ["neutral", "negative", "neutral", "positive"]
        assert [stress_impact(s) for s in (8, 5, 2)] == ["negative", "neutral", "positive"]


class TestCorrelationHelpers:
    def test_averages_skip_missing(self) -> None:
        averages = BiometricAverages.from_readings([reading(heart_rate=80, sleep_duration=7), reading(heart_rate=60)])

        assert averages.heart_rate == 70
        assert averages.sleep == 7
        assert averages.steps is None

    def test_factors_use_wire_keys(self) -> None:
        factors = biometric_factors("anxious", BiometricAverages(heart_rate=85, steps=4000, stress=8))

        assert set(factors) == {"heartRate", "activity", "stress"}
        assert factors["heartRate"]["impact"] == "negative"
        assert factors["activity"] == {"steps": 4000, "activeMinutes": 0, "impact": "negative"}

    def test_prompt_marks_missing_values(self) -> None:
        prompt = correlation_prompt("calm", BiometricAverages(heart_rate=62.5))
        assert "- Average heart rate: 62.5" in prompt
        assert "- Average steps: N/A" in prompt


class TestBiometricService:
    """Recording readings and correlating them with recent moods."""

    @pytest.mark.asyncio
    async def test_record_stores_insights_and_fallback_correlations(self, repository, disabled_llm) -> None:
        await repository.create(MoodEntry, user_id="user-1", mood="anxious")
        service = BiometricService(repository, disabled_llm)

        result = await service.record("user-1", {"heart_rate": 105, "stress_level": 8})

        assert len(result["insights"]) == 2
        [correlation] = result["correlations"]
        assert correlation.correlation_strength == FALLBACK_STRENGTH
        assert correlation.insights == [FALLBACK_INSIGHT]
        assert correlation.recommendations == [FALLBACK_RECOMMENDATION]
        assert await repository.count(HealthInsight, user_id="user-1") == 2
        assert await repository.count(MoodBiometricCorrelation, user_id="user-1") == 1
        assert len(await service.active_insights("user-1")) == 2

    @pytest.mark.asyncio
    async def test_empty_reading_rejected(self, repository, disabled_llm) -> None:
        with pytest.raises(ValidationError):
            await BiometricService(repository, disabled_llm).record("user-1", {"source": "manual"})

    @pytest.mark.asyncio
    async def test_correlation_from_model(self, repository, llm_factory) -> None:
        reply = {"strength": 0.72, "insights": ["Sleep tracks mood"], "recommendations": ["Rest"]}
        llm = llm_factory(lambda request: httpx.Response(
            200, json={"choices": [{"message": {"content": json.dumps(reply)}}]},
        ))
        correlation = await BiometricService(repository, llm).correlate("calm", [reading(sleep_duration=8)])
        await llm.close()

        assert correlation.correlation_strength == 0.72
        assert correlation.insights == ["Sleep tracks mood"]
        assert correlation.biometric_factors["sleep"]["impact"] == "positive"

    @pytest.mark.asyncio
    async def test_no_moods_no_correlations(self, repository, disabled_llm) -> None:
        service = BiometricService(repository, disabled_llm)
        result = await service.record("user-1", {"step_count": 8000})

        assert result["correlations"] == []
        assert result["insights"] == []
        assert [r.step_count for r in await service.recent("user-1")] == [8000]

    @pytest.mark.asyncio
    async def test_malformed_correlation_reply(self, repository, llm_factory) -> None:
        await repository.create(MoodEntry, user_id="user-1", mood="calm")
        reply = {"strength": "moderate", "insights": "abc", "recommendations": ["Walk", 3, None]}
        llm = llm_factory(lambda request: httpx.Response(
            200, json={"choices": [{"message": {"content": json.dumps(reply)}}]},
        ))
        result = await BiometricService(repository, llm).record("user-1", {"heart_rate": 72})
        await llm.close()

        [correlation] = result["correlations"]
        assert correlation.correlation_strength == 0.5
        assert correlation.insights == []
        assert correlation.recommendations == ["Walk", "3"]
        assert await repository.count(MoodBiometricCorrelation, user_id="user-1") == 1

    @pytest.mark.asyncio
    async def test_readings_loaded_once_per_entry(self, repository, disabled_llm, monkeypatch) -> None:
        for mood in ("calm", "happy", "sad"):
            await repository.create(MoodEntry, user_id="user-1", mood=mood)
        service = BiometricService(repository, disabled_llm)
        calls: list[int] = []
        recent = service.recent

        async def counting_recent(user_id, limit=7):
            calls.append(limit)
            return await recent(user_id, limit)

        monkeypatch.setattr(service, "recent", counting_recent)
        result = await service.record("user-1", {"heart_rate": 72})

        assert len(result["correlations"]) == 3
        assert len(calls) == 1
