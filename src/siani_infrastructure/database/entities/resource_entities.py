"""Community resource catalogue and per-user ratings."""
from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_models import BaseModel, UserOwnedModel
from ..schema_registry import SchemaRegistry


@SchemaRegistry.register
class Resource(BaseModel):
    """A wellness resource offered by a partner organization.

    Resources are shared across users; average_rating and rating_count are
    recomputed from resource_ratings whenever a rating is added.
    """

    __tablename__ = "resources"

    title: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    organization: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    average_rating: Mapped[float] = mapped_column(
        Numeric(3, 2, asdecimal=False), nullable=False, default=0.0, index=True,
    )
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


@SchemaRegistry.register
class ResourceRating(UserOwnedModel):
    __tablename__ = "resource_ratings"
    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_resource_ratings_rating"),)

    resource_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[str | None] = mapped_column(Text, nullable=True)
