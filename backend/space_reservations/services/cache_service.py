"""
Redis caching service for space listings.

CACHING STRATEGY
================

What we cache:
  - Space listing responses (paginated, JSON-serialized)
  - Cache key pattern: "spaces:list:page={page}&size={size}"

Why:
  - The space catalogue is read on every booking screen
  - It changes only on explicit administrative updates

Invalidation strategy:
  - On space create/update/delete: delete every "spaces:list:*" key
  - TTL-based expiry as safety net (REDIS_CACHE_TTL)

Why NOT cache reservations:
  - Conflict and quota checks must see the latest rows; a stale read there
    means a double booking, so the booking path never touches the cache

Redis is advisory only: every failure is logged and the request falls back
to the database.
"""

import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from space_reservations.core.config import get_settings
from space_reservations.core.logging import get_logger
from space_reservations.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

SPACE_LIST_PREFIX = "spaces:list:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or unreachable."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        try:
            await client.ping()
        except RedisError as e:
            logger.error("redis_connection_failed", error=str(e))
            await client.aclose()
            return None
        _redis_client = client
        logger.info("redis_connected", url=settings.REDIS_URL)

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_space_list_key(page: int, page_size: int) -> str:
    return f"{SPACE_LIST_PREFIX}page={page}&size={page_size}"


async def get_cached_spaces(page: int, page_size: int) -> Optional[dict]:
    """Retrieve cached space list response."""
    client = await get_redis()
    if not client:
        return None

    key = _make_space_list_key(page, page_size)
    try:
        data = await client.get(key)
    except RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        record_cache_operation("get", "error")
        return None

    if data:
        record_cache_operation("get", "hit")
        return json.loads(data)
    record_cache_operation("get", "miss")
    return None


async def set_cached_spaces(page: int, page_size: int, data: dict) -> None:
    """Cache space list response with TTL."""
    client = await get_redis()
    if not client:
        return

    key = _make_space_list_key(page, page_size)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", "ok")
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))
        record_cache_operation("set", "error")


async def invalidate_space_cache() -> None:
    """
    Invalidate all cached space listings.
    Uses SCAN to find and delete all keys matching the prefix.
    """
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{SPACE_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        record_cache_operation("invalidate", "ok")
        logger.info("cache_invalidated", keys_deleted=deleted)
    except RedisError as e:
        logger.error("cache_invalidation_error", error=str(e))
        record_cache_operation("invalidate", "error")


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
