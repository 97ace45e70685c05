"""
인증 서비스(/auth) 클라이언트

현재 세션을 메모리에 보관하고, 세션이 바뀔 때마다 구독자에게 (event, session)을 알린다.
"""

from typing import Callable, Optional
import logging

import aiohttp

from tagnote.core.config import settings
from tagnote.core.errors import AuthFailure, TagNoteError
from tagnote.schemas.auth import MagicLinkResponse, SessionResponse
from tagnote.schemas.user import UserResponse
from tagnote.client.api_client import ApiClient
from tagnote.client.events import ListenerSet, Subscription


logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

SessionListener = Callable[[str, Optional[SessionResponse]], None]


class IdentityClient(ApiClient):
    """메일 링크 로그인 / 세션 관리"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(base_url or settings.API_BASE_URL, session)
        self._current: Optional[SessionResponse] = None
        self._listeners = ListenerSet()

    async def get_session(self) -> Optional[SessionResponse]:
        """현재 세션 (없으면 None)"""
        return self._current

    async def get_user(self) -> Optional[UserResponse]:
        """서버에 현재 토큰의 사용자를 다시 확인"""
        if self._current is None:
            return None
        data = await self.request(
            "GET", "/auth/me",
            token=self._current.access_token,
            error_cls=AuthFailure,
            failure_message="認証状態の取得に失敗しました。",
        )
        return UserResponse.model_validate(data)

    def on_session_change(self, listener: SessionListener) -> Subscription:
        """세션 변경 구독"""
        return self._listeners.subscribe(listener)

    def _apply(self, event: str, session: Optional[SessionResponse]) -> None:
        self._current = session
        self._listeners.emit(event, session)

    async def sign_in_with_link(
        self,
        email: str,
        allow_create: bool = False,
        redirect_url: Optional[str] = None,
    ) -> MagicLinkResponse:
        """로그인 링크 메일 요청 (allow_create=True면 가입 겸용)"""
        data = await self.request(
            "POST", "/auth/magic-link",
            json={"email": email, "allow_create": allow_create, "redirect_url": redirect_url},
            error_cls=AuthFailure,
        )
        return MagicLinkResponse.model_validate(data)

    async def exchange_code_for_session(self, code: str) -> SessionResponse:
        """메일 링크의 code를 세션으로 교환"""
        data = await self.request("POST", "/auth/exchange", json={"code": code}, error_cls=AuthFailure)
        session = SessionResponse.model_validate(data)
        self._apply(SIGNED_IN, session)
        return session

    async def set_session(self, access_token: str, refresh_token: str) -> SessionResponse:
        """외부에서 받은 토큰 쌍으로 세션 설정"""
        data = await self.request(
            "POST", "/auth/session",
            json={"access_token": access_token, "refresh_token": refresh_token},
            error_cls=AuthFailure,
        )
        session = SessionResponse.model_validate(data)
        self._apply(SIGNED_IN, session)
        return session

    async def refresh_session(self) -> SessionResponse:
        """리프레시 토큰으로 토큰 갱신"""
        if self._current is None:
            raise AuthFailure("認証情報が見つかりませんでした。")
        data = await self.request(
            "POST", "/auth/refresh",
            json={"refresh_token": self._current.refresh_token},
            error_cls=AuthFailure,
        )
        session = SessionResponse.model_validate(data)
        self._apply(TOKEN_REFRESHED, session)
        return session

    async def sign_out(self) -> None:
        """로그아웃 - 서버 폐기에 실패해도 로컬 세션은 비운다"""
        current = self._current
        if current is not None:
            try:
                await self.request("POST", "/auth/logout", token=current.access_token, error_cls=AuthFailure)
            except TagNoteError as e:
                logger.warning(f"서버 로그아웃 실패: {e.with_detail()}")
        self._apply(SIGNED_OUT, None)
