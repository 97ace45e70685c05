"""
SessionGate - 현재 사용자와 변경 알림을 화면 컴포넌트에 제공
"""

from typing import Callable, Optional
import logging

from tagnote.core.errors import AuthRequired
from tagnote.schemas.auth import SessionResponse
from tagnote.schemas.user import UserResponse
from tagnote.client.events import ListenerSet, Subscription
from tagnote.client.identity import IdentityClient


logger = logging.getLogger(__name__)


class SessionGate:
    """
    IdentityClient 세션 구독 래퍼.

    생성 시 구독하고 close()에서 해지한다. async with 블록으로 쓰면 진입 시 현재 세션을 읽는다.
    """

    def __init__(self, identity: IdentityClient):
        self._identity = identity
        self._session: Optional[SessionResponse] = None
        self._listeners = ListenerSet()
        self._subscription: Optional[Subscription] = identity.on_session_change(self._on_session_change)
        self.loaded = False

    async def load(self) -> Optional[UserResponse]:
        """현재 세션 읽기"""
        self._session = await self._identity.get_session()
        self.loaded = True
        return self.user

    @property
    def user(self) -> Optional[UserResponse]:
        return self._session.user if self._session else None

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token if self._session else None

    @property
    def closed(self) -> bool:
        return self._subscription is None

    def require_user(self) -> UserResponse:
        """로그인 사용자 반환, 없으면 AuthRequired"""
        if self.user is None:
            raise AuthRequired()
        return self.user

    def subscribe(self, listener: Callable[[Optional[UserResponse]], None]) -> Subscription:
        """사용자 변경 구독"""
        return self._listeners.subscribe(listener)

    def _on_session_change(self, event: str, session: Optional[SessionResponse]) -> None:
        logger.debug(f"세션 변경: {event}")
        self._session = session
        self.loaded = True
        self._listeners.emit(self.user)

    def close(self) -> None:
        """구독 해지"""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._listeners.clear()

    async def __aenter__(self) -> "SessionGate":
        await self.load()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
