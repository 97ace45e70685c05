"""
메모 상세/편집 세션

상태 전이:
    LOADING -> VIEWING | ERROR
    VIEWING <-> EDITING
    EDITING -> SAVING -> VIEWING | ERROR (편집 내용 유지)
    VIEWING/EDITING -> DELETING -> DELETED | ERROR
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union
import inspect
import logging

from tagnote.core.errors import AuthRequired, TagNoteError, AUTH_REQUIRED_MESSAGE, with_cause
from tagnote.schemas.memo import MemoResponse, UNTITLED_MEMO
from tagnote.services.markdown_service import render_markdown
from tagnote.client.notifications import NotificationBus
from tagnote.client.repository import MemoRepository


logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "メモの取得に失敗しました。アクセス権限をご確認ください。"
UPDATE_FAILED_MESSAGE = "メモの更新に失敗しました。ネットワークと権限を確認してください。"
UPDATED_MESSAGE = "メモを更新しました。"
DELETE_CONFIRM_MESSAGE = "このメモを削除します。よろしいですか？"
DELETE_FAILED_MESSAGE = "メモの削除に失敗しました。ネットワークと権限を確認してください。"
DELETED_MESSAGE = "メモを削除しました。"
LIST_PATH = "/memos"

Confirm = Callable[[str], Union[bool, Awaitable[bool]]]
Navigate = Callable[[str], Any]


class MemoState(str, Enum):
    LOADING = "loading"
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"
    DELETING = "deleting"
    DELETED = "deleted"
    ERROR = "error"


class InvalidTransition(Exception):
    """현재 상태에서 허용되지 않는 동작"""


async def _resolve(value):
    if inspect.isawaitable(value):
        return await value
    return value


class MemoEditingSession:
    """메모 한 건의 조회/편집/저장/삭제"""

    def __init__(
        self,
        memo_id: str,
        repository: MemoRepository,
        notifications: NotificationBus,
        confirm: Confirm,
        navigate: Navigate,
    ):
        self.memo_id = str(memo_id)
        self.repository = repository
        self.notifications = notifications
        self._confirm = confirm
        self._navigate = navigate

        self.state = MemoState.LOADING
        self.memo: Optional[MemoResponse] = None
        self.error: Optional[str] = None
        self.editing = False
        self.draft_title = ""
        self.draft_content = ""
        self.closed = False

    # 조회

    async def load(self) -> None:
        self.state = MemoState.LOADING
        self.error = None
        try:
            memo = await self.repository.fetch_one(self.memo_id)
        except AuthRequired:
            self._fail(AUTH_REQUIRED_MESSAGE)
            return
        except TagNoteError as e:
            logger.warning(f"메모 조회 실패: memo_id={self.memo_id} {e.with_detail()}")
            self._fail(FETCH_FAILED_MESSAGE)
            return

        if self.closed:
            return
        self._commit(memo)
        self.state = MemoState.VIEWING

    def _commit(self, memo: MemoResponse) -> None:
        self.memo = memo
        self.draft_title = memo.title or ""
        self.draft_content = memo.content or ""

    def _fail(self, message: str) -> None:
        if self.closed:
            return
        self.state = MemoState.ERROR
        self.error = message
        self.notifications.error(message)

    # 편집

    def start_editing(self) -> None:
        if self.state != MemoState.VIEWING:
            raise InvalidTransition(f"{self.state.value} 상태에서는 편집을 시작할 수 없습니다")
        self.draft_title = self.memo.title or ""
        self.draft_content = self.memo.content or ""
        self.editing = True
        self.state = MemoState.EDITING

    def cancel_editing(self) -> None:
        """초안을 버리고 마지막 저장 값으로 되돌린다 (저장소 호출 없음)"""
        if not self.editing:
            raise InvalidTransition("편집 중이 아닙니다")
        self.draft_title = self.memo.title or ""
        self.draft_content = self.memo.content or ""
        self.editing = False
        self.error = None
        self.state = MemoState.VIEWING

    def build_update_payload(self) -> dict:
        return {
            "title": self.draft_title.strip() or UNTITLED_MEMO,
            "content": self.draft_content.strip(),
        }

    async def save(self) -> bool:
        """초안 저장 - 실패 시 ERROR 상태에서 편집 내용을 그대로 두고 재시도 가능"""
        if not self.editing or self.state not in (MemoState.EDITING, MemoState.ERROR):
            raise InvalidTransition(f"{self.state.value} 상태에서는 저장할 수 없습니다")
        if self.repository.gate.user is None:
            self._fail(AUTH_REQUIRED_MESSAGE)
            return False

        self.state = MemoState.SAVING
        self.error = None
        try:
            memo = await self.repository.update(self.memo_id, self.build_update_payload())
        except TagNoteError as e:
            logger.warning(f"메모 수정 실패: memo_id={self.memo_id} {e.with_detail()}")
            self._fail(with_cause(UPDATE_FAILED_MESSAGE, e))
            return False

        self._commit(memo)
        self.editing = False
        self.state = MemoState.VIEWING
        self.notifications.success(UPDATED_MESSAGE)
        return True

    # 삭제

    async def delete(self) -> bool:
        """확인 후 삭제 - 프록시 경로 우선, 실패/생략 시 직접 삭제"""
        if self.memo is None or self.state in (MemoState.LOADING, MemoState.SAVING, MemoState.DELETING, MemoState.DELETED):
            raise InvalidTransition(f"{self.state.value} 상태에서는 삭제할 수 없습니다")
        if self.repository.gate.user is None:
            self._fail(AUTH_REQUIRED_MESSAGE)
            return False

        if not await _resolve(self._confirm(DELETE_CONFIRM_MESSAGE)):
            return False

        self.state = MemoState.DELETING
        error_text = await self._delete_with_fallback()
        if error_text is not None:
            self._fail(f"{DELETE_FAILED_MESSAGE} ({error_text})")
            return False

        self.state = MemoState.DELETED
        self.notifications.success(DELETED_MESSAGE)
        await _resolve(self._navigate(LIST_PATH))
        return True

    async def _delete_with_fallback(self) -> Optional[str]:
        """삭제 성공 시 None, 두 경로 모두 실패하면 마지막으로 실행된 경로의 오류 문자열"""
        if self.repository.access_token:
            try:
                await self.repository.delete_via_proxy(self.memo_id)
                return None
            except TagNoteError as e:
                logger.info(f"프록시 삭제 실패, 직접 삭제로 전환: {e.detail or e.user_message}")

        try:
            await self.repository.delete(self.memo_id)
        except TagNoteError as e:
            logger.warning(f"메모 삭제 실패: memo_id={self.memo_id} {e.with_detail()}")
            return e.detail or e.user_message
        return None

    # 표시

    @property
    def display_title(self) -> str:
        return (self.memo.title if self.memo else "") or UNTITLED_MEMO

    @property
    def content_html(self) -> str:
        return render_markdown(self.memo.content if self.memo else "")

    @property
    def preview_html(self) -> str:
        return render_markdown(self.draft_content)

    @property
    def meta(self):
        """표시용 시각 (수정 시각 우선)"""
        if self.memo is None:
            return None
        return self.memo.updated_at or self.memo.created_at

    def close(self) -> None:
        """화면 종료 - 이후 도착한 응답은 무시한다"""
        self.closed = True
