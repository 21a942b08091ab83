"""SIANI Database Infrastructure - Schema management and initialization.

This module provides database infrastructure components for the wellness service:
- Base SQLAlchemy models with timestamps and version tracking
- Centralized schema registry for entity management
- Async engine and session management
- Seed data loading with dependency resolution

Usage:
    from siani_infrastructure.database import (
        Base, BaseModel, UserOwnedModel,
        SchemaRegistry,
        DatabaseManager,
        SeedDataLoader, SeedSettings,
    )
"""

from siani_infrastructure.database.base_models import (
    Base,
    BaseModel,
    JSONType,
    TimestampMixin,
    UserOwnedModel,
    UTCDateTime,
    VersionMixin,
    ensure_utc,
    get_model_table_name,
    new_id,
    utc_now,
)

from siani_infrastructure.database.schema_registry import SchemaRegistry

from siani_infrastructure.database.connection_manager import DatabaseManager

from siani_infrastructure.database.seed_data import (
    BaseSeedProvider,
    Environment,
    PulseQuestionSeedProvider,
    ResourceSeedProvider,
    SeedBatch,
    SeedCategory,
    SeedDataLoader,
    SeedResult,
    SeedSettings,
)

__all__ = [
    # Base models
    "Base",
    "BaseModel",
    "JSONType",
    "TimestampMixin",
    "UserOwnedModel",
    "UTCDateTime",
    "VersionMixin",
    "ensure_utc",
    "get_model_table_name",
    "new_id",
    "utc_now",
    # Schema registry
    "SchemaRegistry",
    # Engine and sessions
    "DatabaseManager",
    # Seed data
    "BaseSeedProvider",
    "Environment",
    "PulseQuestionSeedProvider",
    "ResourceSeedProvider",
    "SeedBatch",
    "SeedCategory",
    "SeedDataLoader",
    "SeedResult",
    "SeedSettings",
]
