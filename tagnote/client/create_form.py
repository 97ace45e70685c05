"""
메모 작성 폼 - Markdown 미리보기, 검증, 저장
"""

from typing import Optional
import logging

from tagnote.core.errors import TagNoteError, with_cause
from tagnote.schemas.memo import MemoResponse
from tagnote.schemas.user import UserResponse
from tagnote.services.markdown_service import render_markdown
from tagnote.services.tag_service import normalize_tags
from tagnote.client.notifications import NotificationBus
from tagnote.client.repository import MemoRepository


logger = logging.getLogger(__name__)

PLACEHOLDER_MARKDOWN = """# はじめてのメモ
- [ ] UIのトーンを揃える
- [x] カテゴリ構造のドラフト
- [ ] タグの命名規則を決める

```tsx
const saveMemo = async () => {
  await sync();
};
```"""

LOGIN_REQUIRED_MESSAGE = "ログインしてください。"
REQUIRED_FIELDS_MESSAGE = "タイトルと本文は必須です。"
CREATE_FAILED_MESSAGE = "メモの作成に失敗しました。もう一度お試しください。"
CREATED_MESSAGE = "メモを保存しました。"


class MemoCreateForm:
    """작성 폼 상태 - 로그인 사용자가 있어야 제출할 수 있다"""

    def __init__(self, repository: MemoRepository, notifications: NotificationBus):
        self.repository = repository
        self.notifications = notifications
        self.submitting = False
        self.reset()
        self.user: Optional[UserResponse] = repository.gate.user
        self._subscription = repository.gate.subscribe(self._on_user_change)

    def reset(self) -> None:
        """입력값을 초기 상태로"""
        self.title = ""
        self.category = ""
        self.tags_input = ""
        self.content = PLACEHOLDER_MARKDOWN

    def _on_user_change(self, user: Optional[UserResponse]) -> None:
        self.user = user

    def close(self) -> None:
        self._subscription.unsubscribe()

    @property
    def tags(self):
        return normalize_tags(self.tags_input)

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    @property
    def can_submit(self) -> bool:
        return self.is_logged_in and not self.submitting

    @property
    def preview_html(self) -> str:
        return render_markdown(self.content)

    def build_payload(self) -> dict:
        return {
            "title": self.title.strip(),
            "content": self.content.strip(),
            "category": self.category.strip() or None,
            "tags": self.tags,
            "user_id": str(self.user.id),
        }

    async def submit(self) -> Optional[MemoResponse]:
        """저장 - 실패해도 입력값은 그대로 둔다"""
        if self.submitting:
            return None
        if self.user is None:
            self.notifications.error(LOGIN_REQUIRED_MESSAGE)
            return None
        if not self.title.strip() or not self.content.strip():
            self.notifications.error(REQUIRED_FIELDS_MESSAGE)
            return None

        self.submitting = True
        try:
            memo = await self.repository.create(self.build_payload())
        except TagNoteError as e:
            logger.warning(f"메모 생성 실패: {e.with_detail()}")
            self.notifications.error(with_cause(CREATE_FAILED_MESSAGE, e))
            return None
        finally:
            self.submitting = False

        self.notifications.success(CREATED_MESSAGE)
        self.reset()
        return memo
