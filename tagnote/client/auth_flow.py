"""
로그인 / 회원가입 / 메일 링크 콜백 처리
"""

from typing import Optional
from urllib.parse import parse_qs, urlsplit
import logging

from tagnote.core.errors import NetworkFailure, TagNoteError
from tagnote.client.identity import IdentityClient
from tagnote.client.notifications import NotificationBus


logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "ネットワークエラーが発生しました。接続設定を確認して再試行してください。"
NETWORK_ERROR_TOAST = "ネットワークエラーにより送信に失敗しました。"
AUTH_FAILED_TOAST = "認証に失敗しました。リンクを再度お試しください。"
SIGNED_IN_TOAST = "ログインしました。"


def _first(params: dict, key: str) -> Optional[str]:
    values = params.get(key)
    return values[0] if values else None


class AuthFlow:
    """status: idle | loading | sent | success | error"""

    def __init__(
        self,
        identity: IdentityClient,
        notifications: NotificationBus,
        redirect_url: Optional[str] = None,
    ):
        self.identity = identity
        self.notifications = notifications
        self.redirect_url = redirect_url
        self.status = "idle"
        self.error: Optional[str] = None
        self.message: Optional[str] = None

    async def _send_link(self, email: str, allow_create: bool, failed_toast: str) -> bool:
        self.status = "loading"
        self.error = None
        self.message = None
        try:
            await self.identity.sign_in_with_link(email, allow_create=allow_create, redirect_url=self.redirect_url)
        except NetworkFailure as e:
            self.status = "error"
            self.error = e.with_detail() if e.detail else NETWORK_ERROR_MESSAGE
            self.notifications.error(NETWORK_ERROR_TOAST)
            return False
        except TagNoteError as e:
            self.status = "error"
            self.error = e.detail or e.user_message
            self.notifications.error(failed_toast)
            return False
        self.status = "sent"
        return True

    async def login(self, email: str) -> bool:
        """등록된 이메일로 로그인 링크 발송 (신규 가입 없음)"""
        if not await self._send_link(email, False, "ログインメールの送信に失敗しました。"):
            return False
        self.message = "ログイン用の確認メールを送信しました。受信箱をご確認ください。"
        self.notifications.success("ログイン用の確認メールを送信しました。")
        return True

    async def signup(self, email: str) -> bool:
        """가입 겸용 링크 발송"""
        if not await self._send_link(email, True, "アカウント作成に失敗しました。もう一度お試しください。"):
            return False
        self.message = "確認メールを送信しました。メールに記載のリンクから登録を完了してください。"
        self.notifications.success("確認メールを送信しました。受信箱をご確認ください。")
        return True

    async def handle_callback(self, url: str) -> bool:
        """
        메일 링크로 돌아온 URL 처리.
        우선순위: error_description > code 교환 > fragment 토큰 쌍 > 기존 세션 확인
        """
        self.status = "loading"
        self.error = None
        parts = urlsplit(url)
        query = parse_qs(parts.query)
        fragment = parse_qs(parts.fragment)

        code = _first(query, "code") or _first(fragment, "code")
        access_token = _first(fragment, "access_token")
        refresh_token = _first(fragment, "refresh_token")
        error_description = _first(query, "error_description") or _first(fragment, "error_description")

        if error_description:
            self.status = "error"
            self.error = error_description
            return False

        try:
            if code:
                await self.identity.exchange_code_for_session(code)
                return self._signed_in()
            if access_token and refresh_token:
                await self.identity.set_session(access_token, refresh_token)
                return self._signed_in()
        except TagNoteError as e:
            logger.warning(f"콜백 인증 실패: {e.with_detail()}")
            self.status = "error"
            self.error = e.detail or e.user_message
            self.notifications.error(AUTH_FAILED_TOAST)
            return False

        session = await self.identity.get_session()
        if session is not None:
            return self._signed_in()
        self.status = "error"
        self.error = "認証情報が見つかりませんでした。メールリンクを再送してください。"
        self.notifications.error("認証情報が無効です。メールリンクを再送してください。")
        return False

    def _signed_in(self) -> bool:
        self.status = "success"
        self.notifications.success(SIGNED_IN_TOAST)
        return True
