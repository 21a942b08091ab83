"""Daily micro-actions and evening reflections, keyed by calendar date (YYYY-MM-DD)."""
from __future__ import annotations

from datetime import date
from typing import Any

import structlog

from siani_common.exceptions import ValidationError
from siani_infrastructure.database.entities import DailyAction, Reflection
from ..infrastructure.cache import CacheView, QueryCache
from ..infrastructure.repository import WellnessRepository

logger = structlog.get_logger(__name__)


def parse_day(value: str) -> str:
    """Normalise a YYYY-MM-DD string or raise a validation error."""
    try:
        return date.fromisoformat(value).isoformat()
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Invalid date: {value!r}",
            field="date",
            value=value,
            constraint="YYYY-MM-DD",
            user_message="Date must use the YYYY-MM-DD format",
        ) from e


class DailyPracticeService:
    def __init__(self, repository: WellnessRepository, cache: QueryCache) -> None:
        self._repository = repository
        self._cache = cache
        logger.info("daily_practice_service_initialized")

    async def create_action(self, user_id: str, values: dict[str, Any]) -> DailyAction:
        values = {**values, "date": parse_day(values["date"])}
        action = await self._repository.create(DailyAction, user_id=user_id, **values)
        self._cache.invalidate(user_id, CacheView.ACTIONS)
        return action

    async def actions_for(self, user_id: str, day: str) -> list[DailyAction]:
        """Actions for one day in creation order."""
        day = parse_day(day)

        async def load() -> list[DailyAction]:
            return await self._repository.list(
                DailyAction, user_id=user_id, filters={"date": day}, order_by=[DailyAction.created_at.asc()],
            )

        return await self._cache.get_or_load(user_id, CacheView.ACTIONS, load, variant=day)

    async def set_completed(self, user_id: str, action_id: str, completed: bool) -> DailyAction:
        action = await self._repository.update(DailyAction, action_id, {"completed": completed}, user_id=user_id)
        self._cache.invalidate(user_id, CacheView.ACTIONS)
        logger.info("daily_action_updated", user_id=user_id, action_id=action_id, completed=completed)
        return action

    async def create_reflection(self, user_id: str, values: dict[str, Any]) -> Reflection:
        values = {**values, "date": parse_day(values["date"])}
        return await self._repository.create(Reflection, user_id=user_id, **values)

    async def reflection_for(self, user_id: str, day: str) -> Reflection | None:
        return await self._repository.first(
            Reflection, user_id=user_id, filters={"date": parse_day(day)},
            order_by=[Reflection.created_at.desc()],
        )
