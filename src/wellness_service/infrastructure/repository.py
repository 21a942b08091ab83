"""
SIANI Wellness Service - Repository Layer.

A single SQLAlchemy-backed repository serves every table. Generic CRUD
helpers cover the flat per-user tables; the few operations that must touch
several rows in one transaction have dedicated methods.

Architecture Layer: Infrastructure
Principles: Repository Pattern, Unit of Work per call
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import structlog

from siani_common.exceptions import DatabaseError, EntityConflictError, EntityNotFoundError, ErrorContext
from siani_infrastructure.database import BaseModel, DatabaseManager
from siani_infrastructure.database.entities import (
    CareTeamMember,
    PulseAnswer,
    Resource,
    ResourceRating,
    User,
    VoiceConversation,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

RESOURCE_PROVIDER_ROLE = "Resource Provider"


class WellnessRepository:
    """Data access for the wellness service."""

    def __init__(self, database: DatabaseManager) -> None:
        self._database = database
        self._stats = {"reads": 0, "writes": 0}

    @property
    def database(self) -> DatabaseManager:
        return self._database

    # --- Users ---

    async def ensure_user(self, user_id: str) -> User:
        """Return the user row, provisioning it on first use."""
        async with self._database.session() as session:
            user = await session.get(User, user_id)
            if user is not None:
                return user
            user = User(id=user_id, username=user_id)
            session.add(user)
            try:
                await session.flush()
            except IntegrityError:
                # Another request provisioned the same user concurrently
                await session.rollback()
                user = await session.get(User, user_id)
                if user is None:
                    raise
                return user
            self._stats["writes"] += 1
            logger.info("user_provisioned", user_id=user_id)
            return user

    # --- Generic CRUD ---

    async def add(self, entity: ModelT) -> ModelT:
        async with self._database.session() as session:
            session.add(entity)
            await self._flush(session, entity)
            await session.refresh(entity)
        self._stats["writes"] += 1
        return entity

    async def create(self, model: type[ModelT], **values: Any) -> ModelT:
        return await self.add(model(**values))

    async def get(self, model: type[ModelT], entity_id: str, *, user_id: str | None = None) -> ModelT | None:
        self._stats["reads"] += 1
        async with self._database.session() as session:
            entity = await session.get(model, entity_id)
            if entity is None or not self._owned_by(entity, user_id):
                return None
            return entity

    async def get_or_raise(self, model: type[ModelT], entity_id: str, *, user_id: str | None = None) -> ModelT:
        entity = await self.get(model, entity_id, user_id=user_id)
        if entity is None:
            raise self._not_found(model, entity_id, "get", user_id)
        return entity

    async def list(
        self,
        model: type[ModelT],
        *,
        user_id: str | None = None,
        filters: dict[str, Any] | None = None,
        conditions: Sequence[ColumnElement[bool]] = (),
        order_by: Sequence[Any] = (),
        limit: int | None = None,
    ) -> list[ModelT]:
        """Select rows of ``model`` matching equality filters and extra conditions."""
        stmt = select(model)
        if user_id is not None:
            stmt = stmt.where(model.user_id == user_id)
        for name, value in (filters or {}).items():
            stmt = stmt.where(getattr(model, name) == value)
        for condition in conditions:
            stmt = stmt.where(condition)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        self._stats["reads"] += 1
        async with self._database.session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def first(self, model: type[ModelT], **kwargs: Any) -> ModelT | None:
        rows = await self.list(model, limit=1, **kwargs)
        return rows[0] if rows else None

    async def count(
        self,
        model: type[ModelT],
        *,
        user_id: str | None = None,
        conditions: Sequence[ColumnElement[bool]] = (),
    ) -> int:
        stmt = select(func.count()).select_from(model)
        if user_id is not None:
            stmt = stmt.where(model.user_id == user_id)
        for condition in conditions:
            stmt = stmt.where(condition)
        async with self._database.session() as session:
            return int((await session.execute(stmt)).scalar_one())

    async def update(
        self,
        model: type[ModelT],
        entity_id: str,
        values: dict[str, Any],
        *,
        user_id: str | None = None,
    ) -> ModelT:
        """Apply ``values`` to one row or raise ``EntityNotFoundError``."""
        async with self._database.session() as session:
            entity = await session.get(model, entity_id)
            if entity is None or not self._owned_by(entity, user_id):
                raise self._not_found(model, entity_id, "update", user_id)
            for name, value in values.items():
                setattr(entity, name, value)
            await self._flush(session, entity)
            await session.refresh(entity)
        self._stats["writes"] += 1
        return entity

    async def delete(self, model: type[ModelT], entity_id: str, *, user_id: str | None = None) -> None:
        async with self._database.session() as session:
            entity = await session.get(model, entity_id)
            if entity is None or not self._owned_by(entity, user_id):
                raise self._not_found(model, entity_id, "delete", user_id)
            await session.delete(entity)
        self._stats["writes"] += 1

    # --- Multi-row operations ---

    async def rate_resource(
        self,
        user_id: str,
        resource_id: str,
        rating: int,
        review: str | None = None,
    ) -> tuple[ResourceRating, Resource, CareTeamMember | None]:
        """Store a rating, refresh the resource aggregate and link its provider.

        Returns the rating, the updated resource and the care team member
        added for the provider, or None when the provider was already there.
        """
        async with self._database.session() as session:
            resource = await session.get(Resource, resource_id)
            if resource is None:
                raise self._not_found(Resource, resource_id, "rate_resource", user_id)
            entry = ResourceRating(user_id=user_id, resource_id=resource_id, rating=rating, review=review)
            session.add(entry)
            await self._flush(session, entry)

            avg_rating, rating_count = (await session.execute(
                select(func.avg(ResourceRating.rating), func.count())
                .where(ResourceRating.resource_id == resource_id)
            )).one()
            resource.average_rating = round(float(avg_rating or 0), 2)
            resource.rating_count = int(rating_count)

            existing = (await session.execute(
                select(CareTeamMember.id).where(
                    CareTeamMember.user_id == user_id,
                    CareTeamMember.name == resource.provider,
                    CareTeamMember.organization == resource.organization,
                ).limit(1)
            )).scalar_one_or_none()
            member = None
            if existing is None:
                member = CareTeamMember(
                    user_id=user_id,
                    name=resource.provider,
                    role=RESOURCE_PROVIDER_ROLE,
                    organization=resource.organization,
                )
                session.add(member)
            await self._flush(session, resource)
            await session.refresh(resource)
            if member is not None:
                await session.refresh(member)
        self._stats["writes"] += 1
        logger.info("resource_rated", resource_id=resource_id, rating=rating,
                    average_rating=resource.average_rating, provider_added=member is not None)
        return entry, resource, member

    async def pulse_answer_summary(self, question_id: str, user_id: str) -> dict[str, Any]:
        """Answer count, whether ``user_id`` answered and the option distribution."""
        async with self._database.session() as session:
            rows = (await session.execute(
                select(PulseAnswer.selected_option, func.count())
                .where(PulseAnswer.question_id == question_id)
                .group_by(PulseAnswer.selected_option)
            )).all()
            answered = (await session.execute(
                select(PulseAnswer.id).where(
                    PulseAnswer.question_id == question_id, PulseAnswer.user_id == user_id,
                ).limit(1)
            )).scalar_one_or_none()
        distribution = {option: int(count) for option, count in rows if option}
        return {
            "answer_count": sum(int(count) for _, count in rows),
            "user_has_answered": answered is not None,
            "distribution": distribution,
        }

    async def latest_voice_conversation(self, user_id: str) -> VoiceConversation | None:
        return await self.first(
            VoiceConversation, user_id=user_id, order_by=[VoiceConversation.timestamp.desc()],
        )

    def get_statistics(self) -> dict[str, Any]:
        return dict(self._stats)

    @staticmethod
    def _not_found(model: type[BaseModel], entity_id: str, operation: str,
                   user_id: str | None) -> EntityNotFoundError:
        context = ErrorContext(operation=f"{operation}_{model.__tablename__}", user_id=user_id)
        return EntityNotFoundError(model.__name__, entity_id, context=context)

    @staticmethod
    def _owned_by(entity: BaseModel, user_id: str | None) -> bool:
        return user_id is None or getattr(entity, "user_id", user_id) == user_id

    @staticmethod
    async def _flush(session: Any, entity: BaseModel) -> None:
        try:
            await session.flush()
        except IntegrityError as e:
            raise EntityConflictError(
                f"{type(entity).__name__} violates a constraint: {e.orig}",
                entity_type=type(entity).__name__,
                user_message="The request conflicts with existing data",
                cause=e,
            ) from e
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to write {type(entity).__name__}: {e}",
                                operation="flush", cause=e) from e
