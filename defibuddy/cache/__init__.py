"""
Cache Package

Provides Redis-based caching with automatic fallback to in-memory cache.

Usage:
    from defibuddy.cache import cache

    cache.set("dex:token-list", tokens, ttl=3600)
    tokens = cache.get("dex:token-list")
"""

from .redis_cache import (
    cache,
    CacheService,
    RedisCache,
    InMemoryCache,
    SESSION_TTL,
)

__all__ = [
    'cache',
    'CacheService',
    'RedisCache',
    'InMemoryCache',
    'SESSION_TTL',
]
