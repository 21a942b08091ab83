"""
Tests for the per-user query cache.
"""
import pytest

from wellness_service.infrastructure import CacheView, QueryCache


class TestQueryCache:
    """Reads, invalidation and eviction."""

    def test_set_and_get(self) -> None:
        cache = QueryCache()
        cache.set("u1", CacheView.APPOINTMENTS, [1, 2])

        assert cache.get("u1", CacheView.APPOINTMENTS) == [1, 2]
        assert cache.get("u2", CacheView.APPOINTMENTS) is None
        stats = cache.get_statistics()
        assert (stats["hits"], stats["misses"]) == (1, 1)

    def test_invalidate_drops_every_variant(self) -> None:
        cache = QueryCache()
        cache.set("u1", CacheView.RESOURCES, ["all"])
        cache.set("u1", CacheView.RESOURCES, ["meditation"], variant="meditation")
        cache.set("u1", CacheView.MOODS, ["calm"])
        cache.set("u2", CacheView.RESOURCES, ["all"])

        assert cache.invalidate("u1", CacheView.RESOURCES) == 2
        assert cache.is_cached("u1", CacheView.MOODS)
        assert cache.is_cached("u2", CacheView.RESOURCES)

    def test_expired_entry_is_a_miss(self) -> None:
        cache = QueryCache(ttl_seconds=0)
        cache.set("u1", CacheView.MESSAGES, ["hi"])
        assert cache.get("u1", CacheView.MESSAGES) is None
        assert not cache.is_cached("u1", CacheView.MESSAGES)

    def test_oldest_entry_evicted(self) -> None:
        cache = QueryCache(max_entries=2)
        cache.set("u1", CacheView.MOODS, 1)
        cache.set("u2", CacheView.MOODS, 2)
        cache.set("u3", CacheView.MOODS, 3)

        assert not cache.is_cached("u1", CacheView.MOODS)
        assert cache.get_statistics()["evictions"] == 1

    def test_disabled_cache_stores_nothing(self) -> None:
        cache = QueryCache(enabled=False)
        cache.set("u1", CacheView.ACTIONS, [1])
        assert not cache.enabled
        assert cache.get("u1", CacheView.ACTIONS) is None

    @pytest.mark.asyncio
    async def test_get_or_load_calls_loader_once(self) -> None:
        cache = QueryCache()
        calls: list[int] = []

        async def loader() -> list[str]:
            calls.append(1)
            return ["team"]

        assert await cache.get_or_load("u1", CacheView.CARE_TEAM, loader) == ["team"]
        assert await cache.get_or_load("u1", CacheView.CARE_TEAM, loader) == ["team"]
        assert len(calls) == 1
