"""Stored analytics insights shown on the progress dashboard."""
from __future__ import annotations

from typing import Any

from sqlalchemy import Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import JSONType, UserOwnedModel
from ..schema_registry import SchemaRegistry


@SchemaRegistry.register
class AnalyticsInsight(UserOwnedModel):
    __tablename__ = "analytics_insights"

    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    recommendations: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
