"""
Redis caching for venue directory reads.

CACHING STRATEGY
================

What we cache:
  - Venue listing and search responses (JSON-serialized)
  - Cache key pattern: "venues:list:{query}" where query is "all" or the
    normalized search filters

Why:
  - The directory is the most frequent read, on every home screen load
  - Venue profiles change rarely (owner signup, profile edits)

What we do NOT cache:
  - Availability and bookable/instant venue lists. They depend on
    confirmed seat counts and the current time; a stale answer would
    offer seats that are gone.

Invalidation strategy:
  - On venue creation, update or owner signup: delete every "venues:list:*"
    key via SCAN
  - TTL-based expiry as safety net (REDIS_CACHE_TTL)

Cache failures are logged and treated as misses; the directory is always
served from storage when Redis is down or disabled.
"""

import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from tablebook.core.config import get_settings
from tablebook.core.logging import get_logger
from tablebook.core.metrics import record_cache_operation

logger = get_logger(__name__)

VENUE_LIST_PREFIX = "venues:list:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client
    settings = get_settings()

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
        except (RedisError, OSError) as e:
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


def make_venue_list_key(
    cuisine: Optional[str] = None,
    price_range: Optional[str] = None,
    min_rating: Optional[float] = None,
) -> str:
    if cuisine is None and price_range is None and min_rating is None:
        return f"{VENUE_LIST_PREFIX}all"
    return f"{VENUE_LIST_PREFIX}cuisine={cuisine or ''}&price={price_range or ''}&rating={min_rating or ''}"


async def get_cached_venues(key: str) -> Optional[list[dict]]:
    """Retrieve a cached venue list, or None on miss."""
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(key)
    except RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data is None:
        logger.debug("cache_miss", key=key)
        return None
    logger.debug("cache_hit", key=key)
    return json.loads(data)


async def set_cached_venues(key: str, venues: list[dict]) -> None:
    """Cache a venue list with TTL."""
    client = await get_redis()
    if not client:
        return

    ttl = get_settings().REDIS_CACHE_TTL
    try:
        await client.setex(key, ttl, json.dumps(venues, default=str, ensure_ascii=False))
        logger.debug("cache_set", key=key, ttl=ttl)
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_venue_cache() -> None:
    """
    Invalidate all cached venue listings.
    Uses SCAN to find and delete all keys matching the prefix.
    """
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{VENUE_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except RedisError as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Redis cache statistics for the health endpoint."""
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
