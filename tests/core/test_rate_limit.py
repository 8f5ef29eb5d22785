"""
Unit tests for the login rate limiter's in-memory fallback.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from schoolhub.core import rate_limit
from schoolhub.core.exceptions import RateLimitExceededError
from schoolhub.core.rate_limit import check_rate_limit, enforce_rate_limit


class TestMemoryFallback:
    async def test_allows_up_to_limit(self):
        results = [await check_rate_limit("login:a", 3, 60) for _ in range(4)]
        assert results == [True, True, True, False]

    async def test_keys_are_independent(self):
        for _ in range(2):
            await check_rate_limit("login:a", 2, 60)
        assert await check_rate_limit("login:b", 2, 60)

    async def test_enforce_raises_with_retry_after(self):
        await enforce_rate_limit("login:c", 1, 120)
        with pytest.raises(RateLimitExceededError) as exc_info:
            await enforce_rate_limit("login:c", 1, 120)
        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after_seconds == 120

    async def test_expired_keys_are_forgotten(self):
        with patch.object(rate_limit.time, "time", return_value=1_000.0):
            await check_rate_limit("login:old", 5, 60)
        assert "login:old" in rate_limit._memory_store

        with patch.object(rate_limit.time, "time", return_value=1_061.0):
            await check_rate_limit("login:new", 5, 60)

        assert "login:old" not in rate_limit._memory_store
        assert "login:new" in rate_limit._memory_store

    async def test_recent_keys_are_kept(self):
        with patch.object(rate_limit.time, "time", return_value=1_000.0):
            await check_rate_limit("login:old", 5, 60)
        with patch.object(rate_limit.time, "time", return_value=1_030.0):
            await check_rate_limit("login:new", 5, 60)

        assert set(rate_limit._memory_store) == {"login:old", "login:new"}


class TestRedisBackend:
    async def test_redis_failure_falls_back_to_memory(self):
        client = MagicMock()
        pipe = MagicMock()
        pipe.execute = AsyncMock(side_effect=ConnectionError("down"))
        client.pipeline.return_value = pipe

        with patch("schoolhub.core.redis.redis_client", client):
            assert await check_rate_limit("login:d", 1, 60)
            assert not await check_rate_limit("login:d", 1, 60)

    async def test_redis_count_decides(self):
        client = MagicMock()
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[0, 5, 1, True])
        client.pipeline.return_value = pipe

        with patch("schoolhub.core.redis.redis_client", client):
            assert not await check_rate_limit("login:e", 5, 60)
