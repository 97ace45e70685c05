"""
aiohttp 기반 JSON API 공통 클라이언트

HTTP 오류 상태는 지정한 TagNoteError 하위 클래스로, 전송 오류는 NetworkFailure로 변환한다.
자동 재시도는 하지 않는다.
"""

from typing import Any, Dict, Optional, Type
import asyncio
import logging

import aiohttp

from tagnote.core.errors import TagNoteError, StoreFailure, NetworkFailure


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15


def _error_text(body: Any) -> str:
    """오류 응답 본문에서 서버 메시지 추출 (FastAPI detail / 프록시 error)"""
    if isinstance(body, dict):
        for key in ("detail", "error", "message"):
            value = body.get(key)
            if value:
                return value if isinstance(value, str) else str(value)
    return str(body) if body else ""


class ApiClient:
    """base_url 기준 JSON 요청 래퍼"""

    def __init__(
        self,
        base_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _get_session(self) -> aiohttp.ClientSession:
        # ClientSession은 실행 중인 이벤트 루프 안에서 생성해야 한다
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
        params: Any = None,
        failure_message: Optional[str] = None,
        error_cls: Type[TagNoteError] = StoreFailure,
    ) -> Any:
        """요청 후 JSON 본문 반환 (오류 상태면 error_cls 예외)"""
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        try:
            async with self._get_session().request(
                method,
                url,
                headers=headers,
                json=json,
                params=params,
                timeout=self._timeout,
            ) as resp:
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = await resp.text()
                status = resp.status
        except asyncio.TimeoutError:
            logger.debug(f"{method} {url} timeout")
            raise NetworkFailure(detail="Request timeout")
        except aiohttp.ClientError as e:
            logger.debug(f"{method} {url} connection error: {e}")
            raise NetworkFailure(detail=str(e) or type(e).__name__)

        if status >= 400:
            detail = _error_text(body) or f"HTTP {status}"
            logger.debug(f"{method} {url} -> {status}: {detail}")
            raise error_cls(failure_message, detail=detail, status=status)
        return body
