"""
Rate Limiting Module

Sliding-window rate limiting backed by Redis, with an in-memory fallback
when Redis is unavailable. Used to throttle login attempts per email and
client address.
"""

import logging
import time

from schoolhub.core import redis as redis_module
from schoolhub.core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# In-memory rate limit storage (fallback when Redis unavailable)
# Format: {key: [(timestamp, count), ...]}
_memory_store: dict[str, list[tuple[float, int]]] = {}


async def _check_rate_limit_redis(
    client,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using Redis sorted sets.

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using in-memory storage.

    Only correct for a single server process.
    """
    now = time.time()
    window_start = now - window_seconds

    _drop_expired(window_start)

    entries = [(ts, count) for ts, count in _memory_store.get(key, []) if ts > window_start]
    current_count = sum(count for _, count in entries)

    if current_count >= limit:
        _memory_store[key] = entries
        return False

    entries.append((now, 1))
    _memory_store[key] = entries
    return True


def _drop_expired(window_start: float) -> None:
    """Forget keys with no attempt inside the window."""
    stale = [
        key
        for key, entries in _memory_store.items()
        if not entries or entries[-1][0] <= window_start
    ]
    for key in stale:
        del _memory_store[key]


def reset_memory_store() -> None:
    """Forget every in-memory counter."""
    _memory_store.clear()


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check if a request is within rate limits.

    Tries Redis first, falls back to in-memory storage.
    """
    client = redis_module.redis_client

    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


async def enforce_rate_limit(key: str, limit: int, window_seconds: int) -> None:
    """
    Raise if the key has exceeded its allowance.

    Raises:
        RateLimitExceededError: When the limit is exceeded (HTTP 429)
    """
    allowed = await check_rate_limit(key, limit, window_seconds)
    if not allowed:
        logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
        raise RateLimitExceededError(window_seconds)


__all__ = [
    "check_rate_limit",
    "enforce_rate_limit",
    "reset_memory_store",
]
