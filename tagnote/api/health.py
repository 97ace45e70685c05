"""
운영 진단용 헬스 체크 - 인증 서비스 도달 가능 여부
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import asyncio
import logging

import aiohttp

from tagnote.core.config import settings


logger = logging.getLogger(__name__)

router = APIRouter()

HEALTH_TIMEOUT_SECONDS = 5


def _fail(message: str, **extra) -> JSONResponse:
    return JSONResponse({"ok": False, "message": message, **extra}, status_code=500)


@router.get("/supabase-health")
async def identity_health():
    """인증 서비스의 /auth/health 를 호출해 결과를 그대로 전달"""
    identity_url = settings.IDENTITY_SERVICE_URL
    if not identity_url:
        return _fail("Missing IDENTITY_SERVICE_URL")

    headers = {"apikey": settings.IDENTITY_API_KEY} if settings.IDENTITY_API_KEY else {}
    url = f"{identity_url.rstrip('/')}/auth/health"
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=HEALTH_TIMEOUT_SECONDS),
            ) as resp:
                if resp.status != 200:
                    return _fail("Identity health endpoint returned non-200", status=resp.status)
                data = await resp.json()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.warning(f"인증 서비스 헬스 체크 실패: {e}")
        return _fail("Failed to reach identity service", error=str(e) or type(e).__name__)

    return {"ok": True, "identity_url": identity_url, "auth_health": data}
