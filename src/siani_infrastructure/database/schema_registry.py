"""
Central registry for all database schemas of the SIANI wellness service.

Every entity registers itself here. The seed loader looks tables up by name
and the database manager creates exactly the registered tables at startup.

Usage:
    from siani_infrastructure.database.schema_registry import SchemaRegistry
    from siani_infrastructure.database.base_models import UserOwnedModel

    @SchemaRegistry.register
    class MoodEntry(UserOwnedModel):
        __tablename__ = "mood_entries"
"""

from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import Table

from .base_models import BaseModel, get_model_table_name

T = TypeVar("T", bound=BaseModel)


class SchemaRegistry:
    """Registry of entity classes keyed by table name."""

    _entities: dict[str, type[BaseModel]] = {}

    @classmethod
    def register(cls, entity_class: type[T]) -> type[T]:
        """Register an entity class in the schema registry.

        Raises:
            ValueError: If the table is already registered with a different class.
        """
        table_name = get_model_table_name(entity_class)
        existing = cls._entities.get(table_name)
        if existing is not None and existing is not entity_class:
            raise ValueError(
                f"Table '{table_name}' is already registered with "
                f"{existing.__name__}. Cannot register {entity_class.__name__}."
            )
        cls._entities[table_name] = entity_class
        return entity_class

    @classmethod
    def get(cls, table_name: str) -> type[BaseModel]:
        """Get registered entity by table name.

        Raises:
            KeyError: If table_name is not registered
        """
        if table_name not in cls._entities:
            raise KeyError(
                f"Table '{table_name}' not found in schema registry. "
                f"Available tables: {', '.join(sorted(cls._entities))}"
            )
        return cls._entities[table_name]

    @classmethod
    def tables(cls) -> list[Table]:
        """Tables of every registered entity, in table-name order."""
        return [entity.__table__ for _, entity in sorted(cls._entities.items())]

    @classmethod
    def get_statistics(cls) -> dict[str, Any]:
        """Summarise registered entities and their column counts."""
        return {
            "total_entities": len(cls._entities),
            "tables": {
                name: len(entity.__table__.columns)
                for name, entity in sorted(cls._entities.items())
            },
        }
