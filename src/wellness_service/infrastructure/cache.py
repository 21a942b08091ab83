"""Per-user query cache for list views.

List endpoints read through the cache and every successful mutation
invalidates the views it affects, so the next read refetches from the
database. Catalogue views that every user sees are stored once under
``SHARED_SCOPE``.
"""
from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

CacheKey = tuple[str, str, str]

# Owner key for views that are the same for every user
SHARED_SCOPE = "*"


class CacheView:
    """Names of the cached list views."""
    APPOINTMENTS = "appointments"
    MOODS = "moods"
    ACTIONS = "actions"
    CARE_TEAM = "care_team"
    MESSAGES = "messages"
    RESOURCES = "resources"


class QueryCache:
    """LRU cache with TTL keyed by ``(user_id, view, variant)``."""

    def __init__(self, ttl_seconds: int = 300, max_entries: int = 1000, enabled: bool = True) -> None:
        self._cache: OrderedDict[CacheKey, tuple[Any, float]] = OrderedDict()
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._enabled = enabled
        self._stats = {"hits": 0, "misses": 0, "invalidations": 0, "evictions": 0}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get(self, user_id: str, view: str, variant: str = "") -> Any | None:
        key = (user_id, view, variant)
        if key in self._cache:
            value, stored_at = self._cache[key]
            if time.time() - stored_at < self._ttl:
                self._cache.move_to_end(key)
                self._stats["hits"] += 1
                return value
            del self._cache[key]
        self._stats["misses"] += 1
        return None

    def set(self, user_id: str, view: str, value: Any, variant: str = "") -> None:
        if not self._enabled:
            return
        key = (user_id, view, variant)
        if key in self._cache:
            del self._cache[key]
        elif len(self._cache) >= self._max_entries:
            self._cache.popitem(last=False)
            self._stats["evictions"] += 1
        self._cache[key] = (value, time.time())

    async def get_or_load(
        self,
        user_id: str,
        view: str,
        loader: Callable[[], Awaitable[Any]],
        variant: str = "",
    ) -> Any:
        """Return the cached view or await ``loader`` and cache its result."""
        cached = self.get(user_id, view, variant)
        if cached is not None:
            return cached
        value = await loader()
        self.set(user_id, view, value, variant)
        return value

    def invalidate(self, user_id: str, *views: str) -> int:
        """Drop every variant of the given views for one user."""
        targets = set(views)
        stale = [key for key in self._cache if key[0] == user_id and key[1] in targets]
        for key in stale:
            del self._cache[key]
        self._stats["invalidations"] += 1
        logger.debug("query_cache_invalidated", user_id=user_id, views=sorted(targets), entries=len(stale))
        return len(stale)

    def is_cached(self, user_id: str, view: str, variant: str = "") -> bool:
        return (user_id, view, variant) in self._cache

    def clear(self) -> None:
        self._cache.clear()

    def get_statistics(self) -> dict[str, Any]:
        return {"entries": len(self._cache), "enabled": self._enabled, **self._stats}
