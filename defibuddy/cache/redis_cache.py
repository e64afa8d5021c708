"""
Redis Cache Service

Caches upstream snapshots and session state:
- Uniswap default token list
- DefiLlama pool snapshot
- Per-session portfolios and NFT contract addresses

Supports both Redis and in-memory fallback. Values are JSON documents.
"""

import os
import json
import time
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Cache configuration from environment
REDIS_ENABLED = os.getenv('REDIS_ENABLED', 'false').lower() == 'true'
REDIS_HOST = os.getenv('REDIS_HOST', 'localhost')
REDIS_PORT = int(os.getenv('REDIS_PORT', '6379'))
REDIS_DB = int(os.getenv('REDIS_DB', '0'))
REDIS_PASSWORD = os.getenv('REDIS_PASSWORD', None)
REDIS_PREFIX = os.getenv('REDIS_PREFIX', 'defibuddy:')

# Session state TTL (in seconds)
SESSION_TTL = int(os.getenv('CACHE_SESSION_TTL', str(7 * 24 * 3600)))  # 1 week


class InMemoryCache:
    """
    Fallback in-memory cache when Redis is not available.

    Simple dict-based cache with basic TTL support.
    Not suitable for production with multiple workers.
    """

    def __init__(self):
        self._cache = {}
        self._ttls = {}
        logger.info("Initialized in-memory cache (fallback mode)")

    def get(self, key: str) -> Optional[Any]:
        if key not in self._cache:
            return None

        if key in self._ttls and time.time() > self._ttls[key]:
            del self._cache[key]
            del self._ttls[key]
            return None

        return self._cache[key]

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        self._cache[key] = value

        if ttl:
            self._ttls[key] = time.time() + ttl
        else:
            self._ttls.pop(key, None)

        return True

    def delete(self, key: str) -> bool:
        if key in self._cache:
            del self._cache[key]
            self._ttls.pop(key, None)
            return True
        return False


class RedisCache:
    """
    Redis cache service with connection pooling and error handling.

    Shares session portfolios across workers in production.
    """

    def __init__(self):
        """Initialize Redis connection"""
        import redis

        try:
            self.redis = redis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                db=REDIS_DB,
                password=REDIS_PASSWORD,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )

            self.redis.ping()
            logger.info(f"Connected to Redis at {REDIS_HOST}:{REDIS_PORT}")

        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    def _make_key(self, key: str) -> str:
        return f"{REDIS_PREFIX}{key}"

    def get(self, key: str) -> Optional[Any]:
        try:
            value = self.redis.get(self._make_key(key))
            if value is None:
                return None
            return json.loads(value)
        except Exception as e:
            logger.error(f"Error getting key {key} from Redis: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            full_key = self._make_key(key)
            payload = json.dumps(value, default=str)

            if ttl:
                self.redis.setex(full_key, ttl, payload)
            else:
                self.redis.set(full_key, payload)

            return True

        except Exception as e:
            logger.error(f"Error setting key {key} in Redis: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            self.redis.delete(self._make_key(key))
            return True
        except Exception as e:
            logger.error(f"Error deleting key {key} from Redis: {e}")
            return False


class CacheService:
    """
    Unified cache service with automatic fallback.

    Tries Redis first, falls back to in-memory cache if Redis unavailable.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        if REDIS_ENABLED:
            try:
                self.backend = RedisCache()
                self.cache_type = 'redis'
                logger.info("Cache service using Redis backend")
            except Exception as e:
                logger.warning(f"Redis not available, falling back to in-memory cache: {e}")
                self.backend = InMemoryCache()
                self.cache_type = 'memory'
        else:
            self.backend = InMemoryCache()
            self.cache_type = 'memory'
            logger.info("Cache service using in-memory backend")

        self._initialized = True

    def get(self, key: str) -> Optional[Any]:
        return self.backend.get(key)

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return self.backend.set(key, value, ttl)

    def delete(self, key: str) -> bool:
        return self.backend.delete(key)


# Global cache instance
cache = CacheService()
