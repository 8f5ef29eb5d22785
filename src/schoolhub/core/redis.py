"""
Redis Configuration

Async Redis client backing the access-token denylist (logout) and the
login rate limiter.
"""

import logging

from redis.asyncio import Redis, from_url

from schoolhub.core.config import settings

logger = logging.getLogger(__name__)

# Redis client instance
redis_client: Redis | None = None

DENYLIST_PREFIX = "token:revoked:"


async def init_redis() -> Redis:
    """
    Initialize Redis connection.

    Call this on application startup. The module-level client is only
    published once the server answers a ping.
    """
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    redis_client = client
    return client


async def get_redis() -> Redis | None:
    """
    Get Redis client instance.

    Returns None if Redis is not available (optional outside production).
    """
    return redis_client


def is_redis_available() -> bool:
    """Check if Redis client is initialized and available."""
    return redis_client is not None


async def revoke_token(jti: str, ttl_seconds: int) -> bool:
    """
    Put a token id on the denylist until the token would have expired.

    Returns:
        True if the token was recorded, False if Redis is unavailable
    """
    if redis_client is None:
        logger.warning("Redis unavailable - logout cannot revoke the access token")
        return False
    await redis_client.set(f"{DENYLIST_PREFIX}{jti}", "1", ex=max(1, ttl_seconds))
    return True


async def is_token_revoked(jti: str) -> bool:
    """Check whether a token id is on the denylist."""
    if redis_client is None:
        return False
    return await redis_client.exists(f"{DENYLIST_PREFIX}{jti}") > 0


async def close_redis() -> None:
    """Close Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.close()
        redis_client = None
