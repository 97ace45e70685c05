"""
메모 목록 화면 상태 - 필터 입력과 조회 결과
"""

from typing import List, Optional
import logging

from tagnote.core.errors import AuthRequired, TagNoteError, AUTH_REQUIRED_MESSAGE, with_cause
from tagnote.schemas.memo import MemoFilter, MemoResponse
from tagnote.services.markdown_service import render_markdown
from tagnote.services.tag_service import normalize_tags
from tagnote.client.notifications import NotificationBus
from tagnote.client.repository import MemoRepository


logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "メモの取得に失敗しました。ネットワークと認可設定を確認してください。"
LOADING_MESSAGE = "メモを読み込み中..."
EMPTY_MESSAGE = "保存されたメモはまだありません。"


class MemoFilterForm:
    """키워드 / 카테고리 / 태그(쉼표 구분) 입력"""

    def __init__(self, search: str = "", category: str = "", tags_input: str = ""):
        self.search = search
        self.category = category
        self.tags_input = tags_input

    @property
    def tags(self) -> List[str]:
        return normalize_tags(self.tags_input)

    def to_filter(self) -> MemoFilter:
        return MemoFilter(search=self.search, category=self.category, tags=self.tags)


class MemoListView:
    """status: idle | loading | error"""

    def __init__(self, repository: MemoRepository, notifications: NotificationBus):
        self.repository = repository
        self.notifications = notifications
        self.status = "idle"
        self.error: Optional[str] = None
        self.memos: List[MemoResponse] = []
        self._generation = 0

    async def load(self, filters: Optional[MemoFilter] = None) -> None:
        """필터로 목록 조회 - 나중에 시작한 조회 결과만 반영한다"""
        self._generation += 1
        generation = self._generation
        self.status = "loading"
        self.error = None

        try:
            memos = await self.repository.fetch_many(filters or MemoFilter())
        except AuthRequired:
            self._fail(generation, AUTH_REQUIRED_MESSAGE)
            return
        except TagNoteError as e:
            logger.warning(f"메모 목록 조회 실패: {e.with_detail()}")
            self._fail(generation, with_cause(FETCH_FAILED_MESSAGE, e))
            return

        if generation != self._generation:
            return
        self.memos = memos
        self.status = "idle"

    def _fail(self, generation: int, message: str) -> None:
        if generation != self._generation:
            return
        self.status = "error"
        self.error = message
        self.notifications.error(message)

    @property
    def empty_message(self) -> Optional[str]:
        if self.status == "loading":
            return LOADING_MESSAGE
        if self.error:
            return self.error
        if not self.memos:
            return EMPTY_MESSAGE
        return None

    @property
    def count_label(self) -> str:
        return "同期中..." if self.status == "loading" else f"{len(self.memos)} 件"

    @staticmethod
    def render(memo: MemoResponse) -> str:
        return render_markdown(memo.content)
