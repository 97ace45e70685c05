"""
클라이언트 계층 오류 분류

각 오류는 사용자에게 그대로 보여줄 수 있는 메시지(user_message)를 가진다.
"""

from typing import Optional


AUTH_REQUIRED_MESSAGE = "ログインが必要です。先にログインしてください。"


class TagNoteError(Exception):
    """TagNote 오류 기본 클래스"""

    default_message = "エラーが発生しました。"

    def __init__(
        self,
        message: Optional[str] = None,
        detail: Optional[str] = None,
        status: Optional[int] = None,
    ):
        self.user_message = message or self.default_message
        self.detail = detail
        self.status = status
        super().__init__(self.user_message)

    def with_detail(self) -> str:
        """진단용 상세 메시지를 덧붙인 문자열"""
        if self.detail:
            return f"{self.user_message} ({self.detail})"
        return self.user_message


class AuthRequired(TagNoteError):
    """유효한 세션이 없음 (빈 결과로 취급하지 않는다)"""
    default_message = AUTH_REQUIRED_MESSAGE


class AuthFailure(TagNoteError):
    """인증 서비스가 요청을 거부함 (링크 만료, 가입 불가 등)"""
    default_message = "認証に失敗しました。リンクを再度お試しください。"


class ValidationFailed(TagNoteError):
    """클라이언트 측 검증 실패 - 네트워크 호출 전에 차단"""
    default_message = "入力内容を確認してください。"


class StoreFailure(TagNoteError):
    """저장소가 반환한 생성/조회/수정/삭제 오류"""
    default_message = "データの保存・取得に失敗しました。"


class NetworkFailure(TagNoteError):
    """요청 자체가 완료되지 못함"""
    default_message = "ネットワークエラーが発生しました。接続設定を確認して再試行してください。"


class NotFound(TagNoteError):
    """ID 조회 결과 없음 - 존재 여부를 노출하지 않도록 일반 메시지 사용"""
    default_message = "メモの取得に失敗しました。アクセス権限をご確認ください。"


def with_cause(message: str, error: TagNoteError) -> str:
    """화면 알림 문구 뒤에 원인 오류 메시지를 괄호로 덧붙인다"""
    cause = error.detail or error.user_message
    return f"{message} ({cause})" if cause else message
