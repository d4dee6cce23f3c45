"""
Redis Cache Module

Caching layer for analytics reads with:
- Connection pooling
- JSON serialization
- TTL management
- Namespace invalidation

When Redis is disabled or unreachable every call degrades to a cache miss.
"""

import json
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from backoffice.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()

_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Optional[Redis]:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    if not settings.redis.enabled:
        logger.info("Redis caching disabled")
        return None

    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=True,
    )
    client = Redis(connection_pool=_redis_pool)

    try:
        await client.ping()
    except RedisError as e:
        logger.error(f"Redis connection failed: {e}")
        await _redis_pool.disconnect()
        _redis_pool = None
        raise

    _redis_client = client
    logger.info("Redis connection established")
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Optional[Redis]:
    """Get Redis client instance, ``None`` when caching is unavailable"""
    return _redis_client


async def cache_get(key: str) -> Optional[Any]:
    """
    Get value from cache.

    Args:
        key: Cache key

    Returns:
        Cached value or None if not found
    """
    client = get_redis()
    if client is None:
        return None

    try:
        value = await client.get(key)
    except RedisError as e:
        logger.warning("Cache read failed", key=key, error=str(e))
        return None

    if value is None:
        return None

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


async def cache_set(
    key: str,
    value: Any,
    ttl: Optional[Union[int, timedelta]] = None,
) -> bool:
    """
    Set value in cache.

    Args:
        key: Cache key
        value: Value to cache (will be JSON serialized)
        ttl: Time-to-live in seconds or timedelta

    Returns:
        True if successful
    """
    client = get_redis()
    if client is None:
        return False

    try:
        serialized = json.dumps(value, default=str)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to serialize value for cache: {e}")
        return False

    try:
        if ttl:
            if isinstance(ttl, timedelta):
                ttl = int(ttl.total_seconds())
            await client.setex(key, ttl, serialized)
        else:
            await client.set(key, serialized)
    except RedisError as e:
        logger.warning("Cache write failed", key=key, error=str(e))
        return False

    return True


async def cache_delete_pattern(pattern: str) -> int:
    """Delete all keys matching pattern"""
    client = get_redis()
    if client is None:
        return 0

    try:
        keys = [key async for key in client.scan_iter(match=pattern)]
        if not keys:
            return 0
        return await client.delete(*keys)
    except RedisError as e:
        logger.warning("Cache invalidation failed", pattern=pattern, error=str(e))
        return 0


class CacheManager:
    """
    Cache manager with namespace support and automatic key generation.

    Example:
        cache = CacheManager("analytics")
        await cache.set("stats:2024-01-01:2024-01-31:day", rows, ttl=600)
        rows = await cache.get("stats:2024-01-01:2024-01-31:day")
    """

    def __init__(self, namespace: str, default_ttl: int = 3600):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        """Generate namespaced key"""
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        return await cache_get(self._key(key))

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return await cache_set(self._key(key), value, ttl or self.default_ttl)

    async def invalidate_all(self) -> int:
        """Invalidate all keys in namespace"""
        return await cache_delete_pattern(f"{self.namespace}:*")

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: Optional[int] = None,
    ) -> Any:
        """
        Get from cache or compute and cache.

        Args:
            key: Cache key
            factory: Async function to compute value if not cached
            ttl: Time-to-live

        Returns:
            Cached or computed value
        """
        value = await self.get(key)

        if value is not None:
            return value

        value = await factory()
        await self.set(key, value, ttl)

        return value


analytics_cache = CacheManager("analytics", default_ttl=settings.analytics.cache_ttl_seconds)
