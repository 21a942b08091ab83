"""
Tests for base models, UTC handling and the connection manager.
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import inspect, select

from siani_infrastructure.database import DatabaseManager, SchemaRegistry, ensure_utc, get_model_table_name, new_id
from siani_infrastructure.database.entities import MoodEntry, Resource, User


class TestUtcHelpers:
    """Tests for datetime normalisation."""

    def test_naive_datetime_becomes_utc(self) -> None:
        value = ensure_utc(datetime(2025, 3, 1, 9, 30))
        assert value.tzinfo is timezone.utc
        assert value.hour == 9

    def test_aware_datetime_is_converted(self) -> None:
        eastern = timezone(timedelta(hours=-5))
        value = ensure_utc(datetime(2025, 3, 1, 9, 30, tzinfo=eastern))
        assert value.hour == 14
        assert value.tzinfo == timezone.utc

    def test_none_passes_through(self) -> None:
        assert ensure_utc(None) is None

    def test_new_id_is_unique(self) -> None:
        assert new_id() != new_id()


class TestBaseModel:
    """Tests for table naming and serialisation."""

    def test_explicit_table_name(self) -> None:
        assert get_model_table_name(MoodEntry) == "mood_entries"

    def test_to_dict_serialises_datetimes(self) -> None:
        created = datetime(2025, 1, 2, 3, 4, tzinfo=timezone.utc)
        entry = MoodEntry(id="m-1", user_id="u-1", mood="happy", timestamp=created, created_at=created)
        data = entry.to_dict()

        assert data["mood"] == "happy"
        assert data["timestamp"] == "2025-01-02T03:04:00+00:00"

    def test_repr(self) -> None:
        assert repr(User(id="u-1", username="u-1")) == "<User(id=u-1)>"


class TestDatabaseManager:
    """Tests for the async engine wrapper."""

    @pytest.mark.asyncio
    async def test_initialize_and_health(self, database: DatabaseManager) -> None:
        assert database.initialized
        assert database.dialect == "sqlite"
        health = await database.health_check()
        assert health["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_creates_every_registered_table(self, database: DatabaseManager) -> None:
        async with database.session() as session:
            names = await session.run_sync(lambda sync: inspect(sync.connection()).get_table_names())

        assert set(names) == {table.name for table in SchemaRegistry.tables()}
        schema = database.get_statistics()["schema"]
        assert schema["total_entities"] == len(names)
        assert schema["tables"]["resources"] == len(Resource.__table__.columns)

    @pytest.mark.asyncio
    async def test_session_commits(self, database: DatabaseManager) -> None:
        async with database.session() as session:
            session.add(User(id="u-1", username="u-1"))
        async with database.session() as session:
            user = (await session.execute(select(User))).scalar_one()

        assert user.username == "u-1"
        assert user.version == 1
        assert database.get_statistics()["commits"] == 2

    @pytest.mark.asyncio
    async def test_session_rolls_back_on_error(self, database: DatabaseManager) -> None:
        with pytest.raises(RuntimeError):
            async with database.session() as session:
                session.add(User(id="u-2", username="u-2"))
                await session.flush()
                raise RuntimeError("abort")
        async with database.session() as session:
            users = (await session.execute(select(User))).scalars().all()

        assert users == []
        assert database.get_statistics()["rollbacks"] == 1

    @pytest.mark.asyncio
    async def test_timestamps_round_trip_as_utc(self, database: DatabaseManager) -> None:
        when = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        async with database.session() as session:
            session.add(User(id="u-3", username="u-3"))
            session.add(MoodEntry(id="m-3", user_id="u-3", mood="calm", timestamp=when))
        async with database.session() as session:
            entry = await session.get(MoodEntry, "m-3")

        assert entry.timestamp == when
        assert entry.timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_update_increments_version(self, database: DatabaseManager) -> None:
        async with database.session() as session:
            session.add(Resource(id="r-1", title="Walk", description="d", category="exercise",
                                 organization="o", provider="p"))
        async with database.session() as session:
            resource = await session.get(Resource, "r-1")
            resource.rating_count = 3
        async with database.session() as session:
            resource = await session.get(Resource, "r-1")

        assert resource.version == 2
