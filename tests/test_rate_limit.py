"""Tests for the Redis helpers, including degraded behaviour when Redis is down."""

import pytest

from tagnote.core.rate_limit import (
    OneTimeKeyUnavailable,
    check_rate_limit,
    consume_once,
    is_revoked,
    revoke,
)


class BrokenRedis:
    """Every command fails like an unreachable server."""

    async def incr(self, *args, **kwargs):
        raise ConnectionError("redis down")

    expire = set = exists = incr


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_blocks_after_limit(self, fake_redis):
        results = [await check_rate_limit(fake_redis, "magic:a@example.com", 2) for _ in range(3)]
        assert [allowed for allowed, _ in results] == [True, True, False]
        assert results[0][1] == 1

    @pytest.mark.asyncio
    async def test_degrades_open(self):
        assert await check_rate_limit(BrokenRedis(), "bucket", 1) == (True, 1)


class TestConsumeOnce:
    @pytest.mark.asyncio
    async def test_second_use_rejected(self, fake_redis):
        assert await consume_once(fake_redis, "code-1", 60) is True
        assert await consume_once(fake_redis, "code-1", 60) is False
        assert await consume_once(fake_redis, "code-2", 60) is True

    @pytest.mark.asyncio
    async def test_unreachable_redis_fails_closed(self):
        with pytest.raises(OneTimeKeyUnavailable):
            await consume_once(BrokenRedis(), "code-3", 60)


class TestRevocation:
    @pytest.mark.asyncio
    async def test_revoke_then_check(self, fake_redis):
        assert await is_revoked(fake_redis, "jti-1") is False
        await revoke(fake_redis, "jti-1", 60)
        assert await is_revoked(fake_redis, "jti-1") is True

    @pytest.mark.asyncio
    async def test_expired_token_not_stored(self, fake_redis):
        await revoke(fake_redis, "jti-2", 0)
        assert await is_revoked(fake_redis, "jti-2") is False

    @pytest.mark.asyncio
    async def test_unreachable_redis_is_not_revoked(self):
        assert await is_revoked(BrokenRedis(), "jti") is False
