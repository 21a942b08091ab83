"""
SIANI Wellness Service - Biometric insights and mood correlation.

Rule-based health insights are generated from each reading. Correlation
with a mood averages the most recent readings, scores each factor's impact
and asks the language model for observations, falling back to fixed text
when it is unavailable.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from siani_common.exceptions import LLMServiceError, ValidationError
from siani_infrastructure.database.entities import (
    BiometricData,
    HealthInsight,
    InsightType,
    MoodBiometricCorrelation,
    MoodEntry,
    TrendDirection,
)
from ..infrastructure.clients import OpenAIChatClient, safe_number, string_list
from ..infrastructure.repository import WellnessRepository

logger = structlog.get_logger(__name__)

MEASUREMENT_FIELDS = (
    "heart_rate",
    "heart_rate_variability",
    "sleep_duration",
    "sleep_quality",
    "step_count",
    "active_minutes",
    "stress_level",
    "blood_oxygen",
    "body_temperature",
)

CORRELATION_WINDOW = 7
CORRELATED_MOOD_COUNT = 3

FALLBACK_STRENGTH = 0.3
FALLBACK_INSIGHT = "Your biometric data provides valuable insights into your wellness patterns."
FALLBACK_RECOMMENDATION = "Continue monitoring your health metrics to better understand your mind-body connection."

CORRELATION_SYSTEM_PROMPT = """You are SIANI, analyzing the correlation between biometric data and mood patterns. Provide trauma-informed, empowering insights that help users understand their mind-body connection.

Focus on:
- Identifying meaningful patterns between physical health and emotional states
- Providing actionable, compassionate recommendations
- Emphasizing the user's agency and ability to influence their wellness
- Using supportive, non-judgmental language

Return a JSON object with:
- strength: correlation strength (0-1)
- insights: array of 2-3 key observations
- recommendations: array of 2-3 actionable suggestions"""


def has_measurement(values: Mapping[str, Any]) -> bool:
    return any(values.get(name) not in (None, "") for name in MEASUREMENT_FIELDS)


def validate_measurements(values: Mapping[str, Any]) -> None:
    """Reject a reading that carries no measurement at all."""
    if not has_measurement(values):
        raise ValidationError(
            "Biometric entry has no measurement fields set",
            field="measurements",
            constraint="at_least_one",
            user_message="Please enter at least one biometric measurement.",
        )


@dataclass
class HealthInsightData:
    type: str
    title: str
    description: str
    severity: str
    recommendations: list[str]
    trend_direction: str
    correlated_moods: list[str]

    def to_values(self) -> dict[str, Any]:
        return asdict(self)


def analyze_heart_rate(heart_rate: int | None) -> HealthInsightData | None:
    if not heart_rate:
        return None
    if heart_rate < 60:
        return HealthInsightData(
            InsightType.HEART_HEALTH.value,
            "Low Resting Heart Rate",
            "Your heart rate is below normal range. This could indicate excellent fitness or potential health concerns.",
            "medium",
            [
                "Monitor for symptoms like dizziness or fatigue",
                "Consider consulting a healthcare provider if persistent",
                "Continue regular cardiovascular exercise",
            ],
            TrendDirection.STABLE.value,
            ["calm", "relaxed"],
        )
    if heart_rate > 100:
        return HealthInsightData(
            InsightType.HEART_HEALTH.value,
            "Elevated Resting Heart Rate",
            "Your heart rate is above normal range, which may indicate stress, dehydration, or overtraining.",
            "high",
            [
                "Practice deep breathing and relaxation techniques",
                "Ensure adequate hydration and rest",
                "Consider reducing intense activities temporarily",
                "Monitor caffeine and stimulant intake",
            ],
            TrendDirection.DECLINING.value,
            ["anxious", "stressed", "overwhelmed"],
        )
    return None


def analyze_sleep(duration: float | None, quality: str | None) -> HealthInsightData | None:
    if duration and duration < 6:
        return HealthInsightData(
            InsightType.SLEEP.value,
            "Insufficient Sleep Duration",
            "You're getting less than the recommended 7-9 hours of sleep, which can impact mood, "
            "cognition, and physical health.",
            "high",
            [
                "Establish a consistent bedtime routine",
                "Limit screen time 1 hour before bed",
                "Create a cool, dark sleeping environment",
                "Avoid caffeine after 2 PM",
            ],
            TrendDirection.DECLINING.value,
            ["tired", "irritable", "stressed", "overwhelmed"],
        )
    if quality == "poor":
        return HealthInsightData(
            InsightType.SLEEP.value,
            "Poor Sleep Quality",
            "Poor sleep quality can significantly impact your emotional well-being and daily functioning.",
            "medium",
            [
                "Practice relaxation techniques before bed",
                "Consider meditation or gentle stretching",
                "Evaluate your sleep environment for comfort",
                "Track potential sleep disruptors",
            ],
            TrendDirection.STABLE.value,
            ["groggy", "unfocused", "moody"],
        )
    return None


def analyze_activity(steps: int | None) -> HealthInsightData | None:
    if steps and steps < 5000:
        return HealthInsightData(
            InsightType.ACTIVITY.value,
            "Low Daily Activity",
            "Your step count is below recommended levels. Regular movement can significantly boost mood and energy.",
            "medium",
            [
                "Take short walks throughout the day",
                "Use stairs instead of elevators when possible",
                "Set hourly movement reminders",
                "Find enjoyable physical activities",
            ],
            TrendDirection.STABLE.value,
            ["lethargic", "unmotivated", "low"],
        )
    if steps and steps > 15000:
        return HealthInsightData(
            InsightType.ACTIVITY.value,
            "High Activity Level",
            "Excellent activity level! High movement is strongly correlated with improved mood and mental health.",
            "low",
            [
                "Maintain your excellent activity routine",
                "Ensure adequate recovery and rest",
                "Stay hydrated during active periods",
                "Listen to your body for signs of overexertion",
            ],
            TrendDirection.IMPROVING.value,
            ["energetic", "accomplished", "positive"],
        )
    return None


def analyze_stress(stress_level: int | None) -> HealthInsightData | None:
    if not stress_level:
        return None
    if stress_level >= 7:
        return HealthInsightData(
            InsightType.STRESS.value,
            "Elevated Stress Levels",
            "High stress levels can significantly impact your mood, sleep, and overall well-being.",
            "high",
            [
                "Practice deep breathing exercises",
                "Try meditation or mindfulness techniques",
                "Consider talking to SIANI about stress management",
                "Prioritize self-care activities",
                "Evaluate current stressors and coping strategies",
            ],
            TrendDirection.DECLINING.value,
            ["anxious", "overwhelmed", "tense", "irritable"],
        )
    if stress_level <= 3:
        return HealthInsightData(
            InsightType.STRESS.value,
            "Low Stress Levels",
            "Great job managing stress! Low stress levels support better mood and overall wellness.",
            "low",
            [
                "Continue your effective stress management strategies",
                "Share your techniques with others who might benefit",
                "Maintain work-life balance",
                "Keep practicing preventive wellness habits",
            ],
            TrendDirection.IMPROVING.value,
            ["calm", "peaceful", "balanced", "content"],
        )
    return None


def generate_insights(reading: Mapping[str, Any]) -> list[HealthInsightData]:
    """Heart, sleep, activity and stress insights, in that order."""
    candidates = [
        analyze_heart_rate(reading.get("heart_rate")),
        analyze_sleep(reading.get("sleep_duration"), reading.get("sleep_quality")),
        analyze_activity(reading.get("step_count")),
        analyze_stress(reading.get("stress_level")),
    ]
    return [insight for insight in candidates if insight is not None]


# --- Mood correlation ---


def average(values: Sequence[float | int | None]) -> float | None:
    present = [value for value in values if value]
    if not present:
        return None
    return sum(present) / len(present)


def heart_rate_impact(heart_rate: float, mood: str) -> str:
    if mood in ("anxious", "stressed"):
        return "negative" if heart_rate > 80 else "positive"
    if mood in ("calm", "relaxed"):
        return "positive" if heart_rate < 70 else "neutral"
    return "neutral"


def sleep_quality_label(duration: float) -> str:
    if duration < 6:
        return "poor"
    if duration < 7:
        return "fair"
    if duration < 9:
        return "good"
    return "excellent"


def sleep_impact(duration: float) -> str:
    if duration < 6:
        return "negative"
    if 7 <= duration <= 9:
        return "positive"
    return "neutral"


def activity_impact(steps: float | None) -> str:
    if not steps:
        return "neutral"
    if steps < 5000:
        return "negative"
    if steps > 8000:
        return "positive"
    return "neutral"


def stress_impact(stress: float) -> str:
    if stress >= 7:
        return "negative"
    if stress <= 3:
        return "positive"
    return "neutral"


@dataclass
class BiometricAverages:
    heart_rate: float | None = None
    sleep: float | None = None
    steps: float | None = None
    stress: float | None = None
    active_minutes: float | None = None

    @classmethod
    def from_readings(cls, readings: Sequence[Any]) -> BiometricAverages:
        return cls(
            heart_rate=average([r.heart_rate for r in readings]),
            sleep=average([r.sleep_duration for r in readings]),
            steps=average([r.step_count for r in readings]),
            stress=average([r.stress_level for r in readings]),
            active_minutes=average([r.active_minutes for r in readings]),
        )


def biometric_factors(mood: str, averages: BiometricAverages) -> dict[str, Any]:
    """Per-factor values and their impact on ``mood``, in the client's wire shape."""
    factors: dict[str, Any] = {}
    if averages.heart_rate:
        factors["heartRate"] = {
            "value": averages.heart_rate,
            "impact": heart_rate_impact(averages.heart_rate, mood),
        }
    if averages.sleep:
        factors["sleep"] = {
            "quality": sleep_quality_label(averages.sleep),
            "duration": averages.sleep,
            "impact": sleep_impact(averages.sleep),
        }
    if averages.steps or averages.active_minutes:
        factors["activity"] = {
            "steps": averages.steps or 0,
            "activeMinutes": averages.active_minutes or 0,
            "impact": activity_impact(averages.steps),
        }
    if averages.stress:
        factors["stress"] = {
            "level": averages.stress,
            "impact": stress_impact(averages.stress),
        }
    return factors


def correlation_prompt(mood: str, averages: BiometricAverages) -> str:
    def show(value: float | None) -> str:
        return "N/A" if not value else f"{value:g}"

    return (
        f'Analyze the correlation between mood "{mood}" and recent biometrics:\n'
        f"- Average heart rate: {show(averages.heart_rate)}\n"
        f"- Average sleep: {show(averages.sleep)} hours\n"
        f"- Average steps: {show(averages.steps)}\n"
        f"- Average stress level: {show(averages.stress)}/10"
    )


@dataclass
class MoodCorrelationData:
    mood: str
    biometric_factors: dict[str, Any] = field(default_factory=dict)
    correlation_strength: float = FALLBACK_STRENGTH
    insights: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


class BiometricService:
    """Stores readings and derives insights and mood correlations from them."""

    def __init__(self, repository: WellnessRepository, llm: OpenAIChatClient) -> None:
        self._repository = repository
        self._llm = llm
        self._stats = {"readings": 0, "insights": 0, "correlations": 0, "llm_fallbacks": 0}
        logger.info("biometric_service_initialized", llm_enabled=llm.enabled)

    async def record(self, user_id: str, values: dict[str, Any]) -> dict[str, Any]:
        """Persist a reading, its insights and correlations with the latest moods."""
        validate_measurements(values)
        entry = await self._repository.create(BiometricData, user_id=user_id, **values)
        self._stats["readings"] += 1

        insights = generate_insights(values)
        for insight in insights:
            await self._repository.create(HealthInsight, user_id=user_id, **insight.to_values())
        self._stats["insights"] += len(insights)

        moods = await self._repository.list(
            MoodEntry, user_id=user_id, order_by=[MoodEntry.timestamp.desc()], limit=CORRELATED_MOOD_COUNT,
        )
        readings = await self.recent(user_id, CORRELATION_WINDOW) if moods else []
        correlations: list[MoodCorrelationData] = []
        for mood in moods:
            correlation = await self.correlate(mood.mood, readings)
            correlations.append(correlation)
            await self._repository.create(
                MoodBiometricCorrelation,
                user_id=user_id,
                mood_id=mood.id,
                biometric_data_id=entry.id,
                correlation_strength=correlation.correlation_strength,
                insights=correlation.insights,
                recommendations=correlation.recommendations,
                biometric_factors=correlation.biometric_factors,
            )
        self._stats["correlations"] += len(correlations)
        logger.info("biometric_entry_recorded", user_id=user_id, source=entry.source,
                    insights=len(insights), correlations=len(correlations))
        return {"entry": entry, "insights": insights, "correlations": correlations}

    async def correlate(self, mood: str, readings: Sequence[Any]) -> MoodCorrelationData:
        averages = BiometricAverages.from_readings(readings)
        result = MoodCorrelationData(mood=mood, biometric_factors=biometric_factors(mood, averages))
        try:
            analysis = await self._llm.complete_json(
                [{"role": "user", "content": correlation_prompt(mood, averages)}],
                system_prompt=CORRELATION_SYSTEM_PROMPT,
                max_tokens=400,
            )
        except LLMServiceError as e:
            self._stats["llm_fallbacks"] += 1
            logger.warning("correlation_insights_fallback", mood=mood, error=e.message)
            result.correlation_strength = FALLBACK_STRENGTH
            result.insights = [FALLBACK_INSIGHT]
            result.recommendations = [FALLBACK_RECOMMENDATION]
            return result
        result.correlation_strength = safe_number(analysis.get("strength"), 0.5, lower=0.0, upper=1.0)
        result.insights = string_list(analysis.get("insights"))
        result.recommendations = string_list(analysis.get("recommendations"))
        return result

    async def recent(self, user_id: str, limit: int = CORRELATION_WINDOW) -> list[BiometricData]:
        return await self._repository.list(
            BiometricData, user_id=user_id, order_by=[BiometricData.timestamp.desc()], limit=limit,
        )

    async def active_insights(self, user_id: str) -> list[HealthInsight]:
        return await self._repository.list(
            HealthInsight,
            user_id=user_id,
            conditions=[HealthInsight.is_active.is_(True)],
            order_by=[HealthInsight.created_at.desc()],
        )

    async def mood_correlations(self, user_id: str, limit: int = 20) -> list[MoodBiometricCorrelation]:
        return await self._repository.list(
            MoodBiometricCorrelation,
            user_id=user_id,
            order_by=[MoodBiometricCorrelation.created_at.desc()],
            limit=limit,
        )

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
