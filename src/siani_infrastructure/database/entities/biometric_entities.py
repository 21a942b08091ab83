"""Biometric readings, derived health insights and mood correlations."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import JSONType, UTCDateTime, UserOwnedModel, utc_now
from ..schema_registry import SchemaRegistry


class SleepQuality(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


class BiometricSource(str, Enum):
    MANUAL = "manual"
    FITBIT = "fitbit"
    APPLE_HEALTH = "apple_health"
    GARMIN = "garmin"
    SAMSUNG_HEALTH = "samsung_health"
    GOOGLE_FIT = "google_fit"


class InsightType(str, Enum):
    SLEEP = "sleep"
    ACTIVITY = "activity"
    STRESS = "stress"
    HEART_HEALTH = "heart_health"
    OVERALL_WELLNESS = "overall_wellness"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


@SchemaRegistry.register
class BiometricData(UserOwnedModel):
    __tablename__ = "biometric_data"

    heart_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    heart_rate_variability: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sleep_duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    sleep_quality: Mapped[str | None] = mapped_column(String(16), nullable=True)
    step_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    active_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stress_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    blood_oxygen: Mapped[float | None] = mapped_column(Float, nullable=True)
    body_temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    source: Mapped[str] = mapped_column(String(32), nullable=False, default=BiometricSource.MANUAL.value)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now, index=True)


@SchemaRegistry.register
class HealthInsight(UserOwnedModel):
    __tablename__ = "health_insights"

    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    recommendations: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    trend_direction: Mapped[str] = mapped_column(String(16), nullable=False, default=TrendDirection.STABLE.value)
    correlated_moods: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


@SchemaRegistry.register
class MoodBiometricCorrelation(UserOwnedModel):
    __tablename__ = "mood_biometric_correlations"

    mood_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("mood_entries.id", ondelete="CASCADE"), nullable=False,
    )
    biometric_data_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("biometric_data.id", ondelete="CASCADE"), nullable=False,
    )
    correlation_strength: Mapped[float] = mapped_column(Float, nullable=False)
    insights: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    recommendations: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    biometric_factors: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
