"""
SIANI Wellness Service - Wellness metrics and analytics insights.

Metrics summarise mood, daily action completion and voice engagement into
four headline scores. Insights are rule-based readings of the same data,
stored per user so the dashboard can show them later.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any

import structlog

from siani_infrastructure.database.entities import (
    POSITIVE_MOODS,
    AnalyticsInsight,
    DailyAction,
    MoodEntry,
    VoiceInteraction,
)
from ..infrastructure.repository import WellnessRepository

logger = structlog.get_logger(__name__)

COMPARISON_WINDOW_DAYS = 7
MIN_MOODS_FOR_TREND = 5
MIN_DATA_POINTS_FOR_FORECAST = 10
TREND_TOLERANCE = 0.05
VOICE_POINTS_PER_INTERACTION = 5

MOOD_WEIGHTS = {
    "happy": 1.0,
    "grateful": 0.9,
    "calm": 0.8,
    "energetic": 0.7,
    "sad": 0.3,
    "anxious": 0.2,
}
DEFAULT_MOOD_WEIGHT = 0.5

# label -> (up threshold, down threshold)
METRIC_THRESHOLDS = {
    "Mood Score": (60, 40),
    "Goal Completion": (70, 30),
    "Voice Engagement": (50, 20),
    "Overall Wellness": (60, 40),
}

TREND_RECOMMENDATIONS = {
    "improving": ["Keep up the great work!", "Consider what factors are contributing to this positive trend"],
    "declining": ["Focus on self-care activities", "Consider talking with your care team", "Try new wellness resources"],
    "stable": ["Maintain your current wellness practices", "Look for small improvements to try"],
}
FORECAST_RECOMMENDATIONS = {
    "improving": ["Continue current wellness practices", "Build on positive momentum",
                  "Share your success with your care team"],
    "declining": ["Prioritize self-care this week", "Reach out for support", "Try stress-reduction techniques"],
    "stable": ["Focus on consistency", "Try one new wellness activity", "Pay attention to mood triggers"],
}
GOAL_RECOMMENDATIONS = {
    "high": ["Set slightly more challenging goals", "Help others with their goals", "Celebrate your consistency"],
    "moderate": ["Break goals into smaller steps", "Focus on one goal at a time", "Track what helps you succeed"],
    "low": ["Start with very small, achievable goals", "Get support from your care team",
            "Focus on progress, not perfection"],
}


@dataclass
class WellnessMetric:
    label: str
    value: int
    change: int
    trend: str


@dataclass
class InsightData:
    type: str
    title: str
    description: str
    confidence: float
    data: dict[str, Any] = field(default_factory=dict)
    recommendations: list[str] = field(default_factory=list)

    def to_values(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "confidence": self.confidence,
            "data": dict(self.data),
            "recommendations": list(self.recommendations),
        }


def mood_score_percent(moods: Sequence[str]) -> int:
    if not moods:
        return 0
    positive = sum(1 for mood in moods if mood in POSITIVE_MOODS)
    return round(positive / len(moods) * 100)


def completion_percent(actions: Sequence[DailyAction]) -> int:
    if not actions:
        return 0
    return round(sum(1 for action in actions if action.completed) / len(actions) * 100)


def voice_engagement_percent(interaction_count: int) -> int:
    return min(100, interaction_count * VOICE_POINTS_PER_INTERACTION)


def metric_trend(label: str, value: float) -> str:
    up, down = METRIC_THRESHOLDS[label]
    if value > up:
        return "up"
    if value < down:
        return "down"
    return "stable"


def weighted_mood_score(moods: Sequence[str]) -> float:
    """Mean mood weight in 0..1; 0.5 without data."""
    if not moods:
        return DEFAULT_MOOD_WEIGHT
    return sum(MOOD_WEIGHTS.get(mood, DEFAULT_MOOD_WEIGHT) for mood in moods) / len(moods)


def trend_direction(current: float, previous: float) -> str:
    if current - previous > TREND_TOLERANCE:
        return "improving"
    if previous - current > TREND_TOLERANCE:
        return "declining"
    return "stable"


def build_metrics(current: dict[str, int], recent: dict[str, int], earlier: dict[str, int]) -> list[WellnessMetric]:
    """Headline metrics; each change is the last window's score minus the window before it."""
    labels = ("Mood Score", "Goal Completion", "Voice Engagement")
    changes = [recent[label] - earlier[label] for label in labels]
    metrics = [
        WellnessMetric(label, current[label], change, metric_trend(label, current[label]))
        for label, change in zip(labels, changes)
    ]
    overall = round(sum(current[label] for label in labels) / len(labels))
    overall_change = round(sum(changes) / len(changes))
    metrics.append(WellnessMetric("Overall Wellness", overall, overall_change,
                                  metric_trend("Overall Wellness", overall)))
    return metrics


def mood_pattern_insight(moods: Sequence[MoodEntry], now: datetime) -> InsightData:
    if len(moods) < MIN_MOODS_FOR_TREND:
        return InsightData(
            type="mood_pattern",
            title="Building Your Mood Profile",
            description="Keep tracking your mood daily to unlock personalized insights about your emotional patterns.",
            confidence=0.3,
            data={"moodCount": len(moods)},
            recommendations=["Continue daily mood tracking", "Notice what influences your mood"],
        )
    week_ago = now - timedelta(days=COMPARISON_WINDOW_DAYS)
    two_weeks_ago = week_ago - timedelta(days=COMPARISON_WINDOW_DAYS)
    this_week = weighted_mood_score([m.mood for m in moods if m.timestamp >= week_ago])
    last_week = weighted_mood_score([m.mood for m in moods if two_weeks_ago <= m.timestamp < week_ago])
    direction = trend_direction(this_week, last_week)
    return InsightData(
        type="wellness_trend",
        title="Overall Mood Trend",
        description=f"Your overall mood has been {direction} compared with last week.",
        confidence=min(0.9, len(moods) / 30),
        data={
            "metric": "mood",
            "direction": direction,
            "currentScore": round(this_week, 2),
            "previousScore": round(last_week, 2),
        },
        recommendations=TREND_RECOMMENDATIONS[direction],
    )


def prediction_insights(mood_score: float, completion_rate: float, data_points: int) -> list[InsightData]:
    predictions = []
    if data_points > MIN_DATA_POINTS_FOR_FORECAST:
        trend = "improving" if mood_score > 0.6 else "declining" if mood_score < 0.4 else "stable"
        predictions.append(InsightData(
            type="prediction",
            title="Mood Forecast",
            description=f"Based on your patterns, your mood is likely to continue {trend} over the next week.",
            confidence=min(0.9, data_points / 30),
            data={"predictionType": "mood_forecast", "predictedTrend": trend, "currentScore": round(mood_score, 2)},
            recommendations=FORECAST_RECOMMENDATIONS[trend],
        ))
    if completion_rate > 0:
        likelihood = "high" if completion_rate > 0.7 else "moderate" if completion_rate > 0.4 else "low"
        predictions.append(InsightData(
            type="prediction",
            title="Goal Success Likelihood",
            description=f"You have a {likelihood} likelihood of achieving your wellness goals this week.",
            confidence=0.8,
            data={"predictionType": "goal_success", "successProbability": likelihood,
                  "completionRate": round(completion_rate, 2)},
            recommendations=GOAL_RECOMMENDATIONS[likelihood],
        ))
    return predictions


def learning_insight() -> InsightData:
    return InsightData(
        type="behavior_pattern",
        title="Pattern Analysis in Progress",
        description="SIANI is learning your patterns. Continue using the app to unlock personalized insights.",
        confidence=0.4,
        data={"status": "learning"},
        recommendations=["Keep tracking daily", "Use voice features regularly", "Complete evening reflections"],
    )


def _day_key(value: date) -> str:
    return value.isoformat()


class AnalyticsService:
    """Computes wellness metrics and stores analytics insights."""

    def __init__(self, repository: WellnessRepository) -> None:
        self._repository = repository
        self._stats = {"metrics_computed": 0, "insights_generated": 0}
        logger.info("analytics_service_initialized")

    async def metrics(self, user_id: str, now: datetime | None = None) -> list[WellnessMetric]:
        now = now or datetime.now(timezone.utc)
        moods = await self._repository.list(MoodEntry, user_id=user_id)
        today_actions = await self._repository.list(
            DailyAction, user_id=user_id, filters={"date": _day_key(now.date())},
        )
        interactions = await self._repository.count(VoiceInteraction, user_id=user_id)
        current = {
            "Mood Score": mood_score_percent([m.mood for m in moods]),
            "Goal Completion": completion_percent(today_actions),
            "Voice Engagement": voice_engagement_percent(interactions),
        }

        recent = await self._window_scores(user_id, now - timedelta(days=COMPARISON_WINDOW_DAYS), now)
        earlier = await self._window_scores(
            user_id,
            now - timedelta(days=2 * COMPARISON_WINDOW_DAYS),
            now - timedelta(days=COMPARISON_WINDOW_DAYS),
        )
        metrics = build_metrics(current, recent, earlier)
        self._stats["metrics_computed"] += 1
        return metrics

    async def insights(self, user_id: str, now: datetime | None = None) -> list[AnalyticsInsight]:
        """Generate, store and return insights, highest confidence first."""
        now = now or datetime.now(timezone.utc)
        moods = await self._repository.list(MoodEntry, user_id=user_id, order_by=[MoodEntry.timestamp.desc()])
        today_actions = await self._repository.list(
            DailyAction, user_id=user_id, filters={"date": _day_key(now.date())},
        )
        interactions = await self._repository.count(VoiceInteraction, user_id=user_id)

        completion_rate = completion_percent(today_actions) / 100
        generated = [mood_pattern_insight(moods, now)]
        generated.extend(prediction_insights(
            weighted_mood_score([m.mood for m in moods]),
            completion_rate,
            len(moods) + len(today_actions) + interactions,
        ))
        generated.append(learning_insight())

        stored = [
            await self._repository.create(AnalyticsInsight, user_id=user_id, **insight.to_values())
            for insight in generated
        ]
        self._stats["insights_generated"] += len(stored)
        logger.info("analytics_insights_generated", user_id=user_id, count=len(stored))
        return sorted(stored, key=lambda insight: insight.confidence, reverse=True)

    async def _window_scores(self, user_id: str, start: datetime, end: datetime) -> dict[str, int]:
        moods = await self._repository.list(
            MoodEntry, user_id=user_id,
            conditions=[MoodEntry.timestamp >= start, MoodEntry.timestamp < end],
        )
        actions = await self._repository.list(
            DailyAction, user_id=user_id,
            conditions=[DailyAction.date >= _day_key(start.date()), DailyAction.date < _day_key(end.date())],
        )
        interactions = await self._repository.count(
            VoiceInteraction, user_id=user_id,
            conditions=[VoiceInteraction.timestamp >= start, VoiceInteraction.timestamp < end],
        )
        return {
            "Mood Score": mood_score_percent([m.mood for m in moods]),
            "Goal Completion": completion_percent(actions),
            "Voice Engagement": voice_engagement_percent(interactions),
        }

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
