"""Process-wide key/value cache.

Uses redis when ``REDIS_URL`` is configured so every worker shares entries,
falling back to an in-process TTLCache when redis is absent or unreachable.
"""
import json
import logging
from typing import Any, Optional

import redis
from cachetools import TTLCache

from storefront.core_settings import get_settings

logger = logging.getLogger(__name__)

# Longest TTL any caller uses (Shiprocket token, 9 days)
LOCAL_MAX_TTL = 9 * 24 * 60 * 60

_redis_client: Optional[redis.Redis] = None
_redis_checked = False
local_cache = TTLCache(maxsize=256, ttl=LOCAL_MAX_TTL)
# Per-key expiry for the local cache, since TTLCache has one TTL for all keys
_local_expiry: dict[str, float] = {}


def _get_redis() -> Optional[redis.Redis]:
    global _redis_client, _redis_checked
    if _redis_checked:
        return _redis_client
    _redis_checked = True
    redis_url = get_settings().REDIS_URL
    if not redis_url:
        return None
    try:
        client = redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=1)
        client.ping()
        _redis_client = client
    except redis.RedisError as e:
        logger.warning(f"Redis unavailable, using local cache: {e}")
        _redis_client = None
    return _redis_client


def cache_get(key: str) -> Any:
    """Retrieve cached value if present and not expired."""
    client = _get_redis()
    if client:
        try:
            val = client.get(key)
            if val is not None:
                return json.loads(val)
        except redis.RedisError as e:
            logger.warning(f"Redis get failed for {key}: {e}")
    expires_at = _local_expiry.get(key)
    if expires_at is not None and expires_at <= local_cache.timer():
        cache_delete(key)
        return None
    return local_cache.get(key)


def cache_set(key: str, value: Any, ttl: int) -> None:
    """Set a cache value with TTL in seconds."""
    client = _get_redis()
    if client:
        try:
            client.setex(key, ttl, json.dumps(value))
            return
        except redis.RedisError as e:
            logger.warning(f"Redis set failed for {key}: {e}")
    local_cache[key] = value
    _local_expiry[key] = local_cache.timer() + min(ttl, LOCAL_MAX_TTL)


def cache_delete(key: str) -> None:
    client = _get_redis()
    if client:
        try:
            client.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Redis delete failed for {key}: {e}")
    local_cache.pop(key, None)
    _local_expiry.pop(key, None)


def reset_cache() -> None:
    """Forget the redis connection and clear local entries (tests, config reloads)."""
    global _redis_client, _redis_checked
    _redis_client = None
    _redis_checked = False
    local_cache.clear()
    _local_expiry.clear()
