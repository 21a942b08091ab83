"""SIANI Seed Data Loader - Reference data population with dependency resolution."""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from . import entities  # noqa: F401  registers tables for SchemaRegistry.get
from .connection_manager import DatabaseManager
from .schema_registry import SchemaRegistry

logger = structlog.get_logger(__name__)


class Environment(str, Enum):
    """Deployment environments for seed data selection."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class SeedCategory(str, Enum):
    """Categories of seed data."""
    REFERENCE = "reference"
    COMMUNITY = "community"


class SeedSettings(BaseSettings):
    """Seed data configuration from environment."""
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    force_reseed: bool = Field(default=False)
    model_config = SettingsConfigDict(env_prefix="SEED_", env_file=".env", extra="ignore")


@dataclass
class SeedResult:
    """Result of a seed operation."""
    category: SeedCategory
    table_name: str
    records_created: int
    records_skipped: int
    duration_ms: float
    success: bool
    error: str | None = None


@dataclass
class SeedBatch:
    """A batch of seed data for a single table."""
    table_name: str
    category: SeedCategory
    data: list[dict[str, Any]]
    unique_keys: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)


class BaseSeedProvider(ABC):
    """Abstract base class for seed data providers."""

    @property
    @abstractmethod
    def category(self) -> SeedCategory:
        pass

    @property
    @abstractmethod
    def table_name(self) -> str:
        pass

    @property
    def unique_keys(self) -> list[str]:
        return ["id"]

    @property
    def dependencies(self) -> list[str]:
        return []

    @abstractmethod
    def get_data(self, environment: Environment) -> list[dict[str, Any]]:
        pass

    def get_batch(self, environment: Environment) -> SeedBatch:
        return SeedBatch(self.table_name, self.category, self.get_data(environment),
                         self.unique_keys, self.dependencies)


_UNSPLASH = "https://images.unsplash.com/{photo}?ixlib=rb-4.0.3&w=100&h=100&fit=crop"


def _make_resource(title: str, desc: str, category: str, org: str, provider: str, photo: str) -> dict[str, Any]:
    return {"title": title, "description": desc, "category": category, "organization": org,
            "provider": provider, "image_url": _UNSPLASH.format(photo=photo)}


class ResourceSeedProvider(BaseSeedProvider):
    """Starter wellness resources shown in the resource engine."""

    @property
    def category(self) -> SeedCategory:
        return SeedCategory.REFERENCE

    @property
    def table_name(self) -> str:
        return "resources"

    @property
    def unique_keys(self) -> list[str]:
        return ["title"]

    def get_data(self, environment: Environment) -> list[dict[str, Any]]:
        return [
            _make_resource(
                "Mindful Morning Meditation",
                "Start your day with a 10-minute guided meditation focused on setting positive intentions.",
                "meditation", "Calm Collective", "Dr. Sarah Chen", "photo-1506905925346-21bda4d32df4"),
            _make_resource(
                "Quick Stress Relief Breathing",
                "A 3-minute breathing exercise designed to quickly reduce stress and anxiety in challenging moments.",
                "meditation", "Wellness Institute", "Maria Rodriguez", "photo-1512438248247-f0f2a5a8b7f0"),
            _make_resource(
                "High-Intensity Interval Training",
                "A 20-minute HIIT workout to boost energy and improve cardiovascular health.",
                "exercise", "FitLife Studios", "Coach Michael Johnson", "photo-1571019613454-1cb2f99b2d8b"),
            _make_resource(
                "Healthy Smoothie Recipes",
                "Nutrient-packed smoothie recipes for sustained energy throughout the day.",
                "nutrition", "Wellness Kitchen", "Nutritionist Lisa Park", "photo-1610832958506-aa56368176cf"),
        ]


def _make_question(text: str, options: list[str], topic: str, tags: list[str],
                   featured: bool = False) -> dict[str, Any]:
    return {"question_text": text, "question_type": "multiple_choice", "options": options,
            "topic": topic, "tags": tags, "featured": featured}


class PulseQuestionSeedProvider(BaseSeedProvider):
    """Community pulse questions for the home base."""

    @property
    def category(self) -> SeedCategory:
        return SeedCategory.COMMUNITY

    @property
    def table_name(self) -> str:
        return "pulse_questions"

    @property
    def unique_keys(self) -> list[str]:
        return ["question_text"]

    def get_data(self, environment: Environment) -> list[dict[str, Any]]:
        return [
            _make_question("How safe do you feel in your current living situation?",
                           ["Very safe", "Mostly safe", "Sometimes unsafe", "Often unsafe", "Never safe"],
                           "housing", ["safety", "real-talk"], featured=True),
            _make_question("What helps you feel most at home?",
                           ["Clean space", "Personal items", "Good neighbors", "Quiet environment", "Affordable rent"],
                           "housing", ["comfort", "introspective"]),
            _make_question("When you think about healthcare, what comes to mind first?",
                           ["Hope for healing", "Stress about costs", "Trust in providers", "Fear of judgment",
                            "Gratitude for access"],
                           "health", ["real-talk", "reflection"]),
            _make_question("How do you usually take care of your mental health?",
                           ["Talk to friends", "Exercise or walk", "Listen to music", "Pray or meditate",
                            "Journal or reflect"],
                           "health", ["self-care", "introspective"]),
            _make_question("What does dignity mean to you in daily life?",
                           ["Being heard", "Having choices", "Respect from others", "Personal privacy",
                            "Fair treatment"],
                           "dignity", ["values", "introspective"]),
            _make_question("When facing financial stress, what helps you most?",
                           ["Family support", "Community resources", "Planning ahead",
                            "Taking it one day at a time", "Faith or hope"],
                           "economic", ["coping", "real-talk"]),
            _make_question("How do you prefer to receive support during tough times?",
                           ["Someone to listen", "Practical help", "Being left alone", "Group activities",
                            "Professional guidance"],
                           "support", ["connection", "introspective"]),
            _make_question("How do you stay hopeful during difficult times?",
                           ["Focus on small wins", "Connect with others", "Remember past strength",
                            "Practice gratitude", "Keep moving forward"],
                           "resilience", ["hope", "coping"]),
        ]


class SeedDataLoader:
    """Orchestrates seed data loading with dependency resolution."""

    def __init__(self, database: DatabaseManager, settings: SeedSettings | None = None) -> None:
        self._database = database
        self._settings = settings or SeedSettings()
        self._providers: list[BaseSeedProvider] = [ResourceSeedProvider(), PulseQuestionSeedProvider()]

    @property
    def providers(self) -> list[BaseSeedProvider]:
        return list(self._providers)

    def register_provider(self, provider: BaseSeedProvider) -> None:
        self._providers.append(provider)

    def _resolve_dependencies(self) -> list[BaseSeedProvider]:
        table_to_provider = {p.table_name: p for p in self._providers}
        resolved: list[BaseSeedProvider] = []
        seen: set[str] = set()

        def visit(provider: BaseSeedProvider) -> None:
            if provider.table_name in seen:
                return
            seen.add(provider.table_name)
            for dep in provider.dependencies:
                if dep in table_to_provider:
                    visit(table_to_provider[dep])
            resolved.append(provider)

        for provider in self._providers:
            visit(provider)
        return resolved

    async def seed_all(self) -> list[SeedResult]:
        results: list[SeedResult] = []
        for provider in self._resolve_dependencies():
            result = await self._seed_provider(provider)
            results.append(result)
            if not result.success and not self._settings.force_reseed:
                logger.error("seed_provider_failed", table=provider.table_name, error=result.error)
                break
        return results

    async def _seed_provider(self, provider: BaseSeedProvider) -> SeedResult:
        start = time.perf_counter()
        batch = provider.get_batch(self._settings.environment)
        entity = SchemaRegistry.get(batch.table_name)
        try:
            async with self._database.session() as session:
                created, skipped = 0, 0
                for record in batch.data:
                    existing = await self._find_existing(session, entity, batch.unique_keys, record)
                    if existing is not None:
                        if not self._settings.force_reseed:
                            skipped += 1
                            continue
                        for key, value in record.items():
                            setattr(existing, key, value)
                    else:
                        session.add(entity(**record))
                    created += 1
        except SQLAlchemyError as e:
            return SeedResult(provider.category, provider.table_name, 0, 0, 0, False, str(e))
        duration = (time.perf_counter() - start) * 1000
        logger.info("seed_provider_completed", table=provider.table_name, created=created, skipped=skipped)
        return SeedResult(provider.category, provider.table_name, created, skipped, duration, True)

    @staticmethod
    async def _find_existing(session: AsyncSession, entity: type, keys: list[str],
                             record: dict[str, Any]) -> Any:
        stmt = select(entity).filter_by(**{k: record.get(k) for k in keys}).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
