"""
Cache Service Singleton - Starboard Evaluation API
starboard/services/cache.py

Provides a singleton Redis cache instance, the cache keys of the evaluation
core, and read-through / invalidation helpers. Redis failures never fail a
request: reads fall back to the database and writes skip the cache.
"""
import logging
import time
from typing import Callable, Optional, Type, TypeVar

import redis
from pydantic import BaseModel

from starboard.config import get_settings
from starboard.services.redis_cache import RedisCache

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Singleton instance
_cache: Optional[RedisCache] = None
_retry_after: float = 0.0


def ttl_steps() -> int:
    return get_settings().CACHE_TTL_STEPS


def ttl_cutoff() -> int:
    return get_settings().CACHE_TTL_CUTOFF


def steps_key(application_id: str) -> str:
    return f"evaluation:{application_id}:steps"


def cutoff_key(application_id: str) -> str:
    return f"evaluation:{application_id}:cutoff"


def get_cache() -> Optional[RedisCache]:
    """
    Get or create Redis cache instance.

    After a failed connect, further attempts are skipped until
    CACHE_RETRY_SECONDS have passed.

    Returns:
        RedisCache instance if caching is enabled and Redis is available,
        None otherwise.
    """
    global _cache, _retry_after
    settings = get_settings()
    if not settings.CACHE_ENABLED:
        return None
    if _cache is None:
        if time.monotonic() < _retry_after:
            return None
        try:
            _cache = RedisCache()
            _cache.client.ping()  # Test connection
        except (redis.RedisError, ConnectionError) as e:
            logger.warning(
                "Redis unavailable, caching disabled for %ss: %s", settings.CACHE_RETRY_SECONDS, e
            )
            _cache = None
            _retry_after = time.monotonic() + settings.CACHE_RETRY_SECONDS
    return _cache


def reset_cache() -> None:
    """
    Reset the cache singleton.

    Useful for testing or when Redis connection needs to be re-established.
    """
    global _cache, _retry_after
    _cache = None
    _retry_after = 0.0


def cached(key: str, model: Type[T], ttl_seconds: int, loader: Callable[[], T]) -> T:
    """Return the cached value for `key`, loading and storing it on a miss."""
    cache = get_cache()
    if cache:
        try:
            hit = cache.get(key, model)
            if hit is not None:
                return hit
        except redis.RedisError as e:
            logger.warning("Cache read failed for %s: %s", key, e)

    value = loader()

    if cache:
        try:
            cache.set(key, value, ttl_seconds)
        except redis.RedisError as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    return value


def invalidate(*keys: str) -> None:
    """Drop cache entries after a write."""
    cache = get_cache()
    if not cache:
        return
    try:
        cache.delete(*keys)
    except redis.RedisError as e:
        logger.warning("Cache invalidation failed for %s: %s", ", ".join(keys), e)
