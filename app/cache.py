"""
Redis caching utilities for frequently read catalog data
Every method fails open: a missing or broken Redis means a cache miss, never an error
"""
import json
import logging
from typing import Any, Optional

import redis

from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)

PRICING_RULES_KEY = "pricing_rules:enabled"


class Cache:
    """Redis cache wrapper with automatic JSON serialization"""

    def __init__(self, client: Optional[redis.Redis] = None):
        self.redis_client = client

    def _get_client(self) -> Optional[redis.Redis]:
        """Lazy load Redis client"""
        if self.redis_client is None:
            self.redis_client = get_redis_client()
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except (redis.RedisError, ValueError) as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Set value in cache with TTL"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except (redis.RedisError, TypeError) as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except redis.RedisError as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False


# Global cache instance
cache = Cache()


def get_pricing_rules_cached() -> Optional[list]:
    """Enabled pricing rules as [{"key", "value_json"}] rows"""
    return cache.get(PRICING_RULES_KEY)


def set_pricing_rules_cached(rows: list, ttl: int) -> bool:
    return cache.set(PRICING_RULES_KEY, rows, ttl)


def invalidate_pricing_rules_cache() -> bool:
    """Invalidate after any pricing rule write"""
    return cache.delete(PRICING_RULES_KEY)
