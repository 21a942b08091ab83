"""SIANI Base SQLAlchemy Models - Foundation for all database entities.

Provides base models with:
- String UUID primary keys (user ids may be opaque strings such as demo ids)
- Automatic UTC timestamp tracking
- Optimistic locking via version numbers
- JSON columns that become JSONB on PostgreSQL
- A user-owned base with a cascading foreign key to users
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, event, inspect
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.types import TypeDecorator
import structlog

logger = structlog.get_logger(__name__)

JSONType = JSON().with_variant(JSONB(), "postgresql")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware DateTime that always round-trips as UTC.

    SQLite drops tzinfo on storage, so values are normalised to UTC on the
    way in and re-tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        value = ensure_utc(value)
        if value is not None and dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        return ensure_utc(value)


class Base(AsyncAttrs, DeclarativeBase):
    """SQLAlchemy declarative base with async support."""

    type_annotation_map: ClassVar[dict[type, Any]] = {
        dict[str, Any]: JSONType,
        list[Any]: JSONType,
        datetime: UTCDateTime(),
    }


class TimestampMixin:
    """Mixin providing automatic timestamp tracking in UTC."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utc_now,
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class VersionMixin:
    """Mixin providing optimistic locking via version numbers."""

    version: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )

    def increment_version(self) -> None:
        """Increment version for optimistic locking."""
        self.version = (self.version or 0) + 1


class BaseModel(Base, TimestampMixin, VersionMixin):
    """Abstract base model with string UUID primary key and core features.

    All domain entities inherit from this class.
    Provides: UUID PK, timestamps, version tracking, dict serialisation.
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=new_id,
    )

    @declared_attr.directive
    @classmethod
    def __tablename__(cls) -> str:
        """Generate table name from class name (snake_case)."""
        name = cls.__name__
        return "".join(
            f"_{c.lower()}" if c.isupper() else c for c in name
        ).lstrip("_")

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary representation."""
        result: dict[str, Any] = {}
        for column in inspect(self).mapper.column_attrs:
            value = getattr(self, column.key)
            if isinstance(value, uuid.UUID):
                result[column.key] = str(value)
            elif isinstance(value, datetime):
                result[column.key] = ensure_utc(value).isoformat()
            elif isinstance(value, Decimal):
                result[column.key] = float(value)
            elif isinstance(value, Enum):
                result[column.key] = value.value
            else:
                result[column.key] = value
        return result

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


class UserOwnedModel(BaseModel):
    """Base for rows that belong to a single user."""

    __abstract__ = True

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


# SQLAlchemy event listeners for automatic behavior

@event.listens_for(BaseModel, "before_update", propagate=True)
def receive_before_update(mapper: Any, connection: Any, target: BaseModel) -> None:
    """Automatically increment version on update for optimistic locking."""
    target.increment_version()
    logger.debug(
        "model_before_update",
        model=target.__class__.__name__,
        id=str(target.id),
        version=target.version,
    )


def get_model_table_name(model_class: type[BaseModel]) -> str:
    """Get the table name for a model class."""
    tablename = model_class.__tablename__
    if callable(tablename):
        return tablename()
    return tablename
