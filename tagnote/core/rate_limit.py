"""
간단한 Redis 기반 레이트 리밋 / 일회용 키 유틸리티
"""

from __future__ import annotations

import logging
import time

import redis.asyncio as redis


logger = logging.getLogger(__name__)


async def check_rate_limit(client: redis.Redis, bucket: str, max_requests: int, window_seconds: int = 60) -> tuple[bool, int]:
    """
    고정 윈도우 방식 레이트리밋.
    반환: (허용 여부, 남은 횟수)
    """
    now = int(time.time())
    window = now // window_seconds
    key = f"rl:{bucket}:{window}"
    try:
        count = await client.incr(key)
        if count == 1:
            await client.expire(key, window_seconds)
        remaining = max(0, max_requests - count)
        return (count <= max_requests, remaining)
    except Exception as e:
        # Redis 장애 시 리밋을 우회(가용성 우선)
        logger.warning(f"레이트리밋 확인 실패, 우회합니다: {e}")
        return (True, max_requests)


class OneTimeKeyUnavailable(Exception):
    """일회용 키 저장소에 접근할 수 없음 - 소비 여부를 판단할 수 없다"""


async def consume_once(client: redis.Redis, key: str, ttl_seconds: int) -> bool:
    """키를 한 번만 소비. 이미 소비된 키면 False.

    Redis 장애 시에는 우회하지 않고 OneTimeKeyUnavailable을 올린다.
    """
    try:
        created = await client.set(f"once:{key}", "1", nx=True, ex=max(1, ttl_seconds))
    except Exception as e:
        logger.warning(f"일회용 키 확인 실패: {e}")
        raise OneTimeKeyUnavailable(str(e)) from e
    return bool(created)


async def revoke(client: redis.Redis, jti: str, ttl_seconds: int) -> None:
    """토큰 jti를 만료 시점까지 블랙리스트에 등록"""
    if ttl_seconds <= 0:
        return
    try:
        await client.set(f"revoked:{jti}", "1", ex=ttl_seconds)
    except Exception as e:
        logger.warning(f"토큰 폐기 등록 실패: {e}")


async def is_revoked(client: redis.Redis, jti: str) -> bool:
    """블랙리스트 여부"""
    try:
        return bool(await client.exists(f"revoked:{jti}"))
    except Exception as e:
        logger.warning(f"토큰 폐기 여부 확인 실패, 우회합니다: {e}")
        return False
