"""Wellness Service infrastructure layer - persistence, caching and external clients."""
from .cache import SHARED_SCOPE, CacheView, QueryCache
from .clients import ElevenLabsClient, OpenAIChatClient
from .repository import WellnessRepository

__all__ = ["SHARED_SCOPE", "CacheView", "ElevenLabsClient", "OpenAIChatClient", "QueryCache", "WellnessRepository"]
