"""
NotificationBus - 성공/오류 토스트 메시지
"""

from dataclasses import dataclass, field
from itertools import count
from typing import Callable, List, Optional
import logging
import time

from tagnote.client.events import ListenerSet, Subscription


logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"

MAX_NOTIFICATIONS = 4
DISPLAY_SECONDS = 3.2


@dataclass
class Notification:
    """토스트 한 건"""
    id: int
    message: str
    variant: str = SUCCESS
    created_at: float = field(default_factory=time.monotonic)


class NotificationBus:
    """최근 알림만 유지하고 구독자에게 전달"""

    def __init__(
        self,
        max_items: int = MAX_NOTIFICATIONS,
        display_seconds: Optional[float] = DISPLAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_items = max_items
        self.display_seconds = display_seconds
        self._clock = clock
        self._ids = count(1)
        self._items: List[Notification] = []
        self._listeners = ListenerSet()

    def notify(self, message: str, variant: str = SUCCESS) -> Notification:
        """알림 추가 (오래된 것부터 밀려난다)"""
        if variant not in (SUCCESS, ERROR):
            raise ValueError(f"지원하지 않는 알림 종류: {variant}")
        item = Notification(next(self._ids), message, variant, self._clock())
        self._items = (self._items + [item])[-self.max_items:]
        if variant == ERROR:
            logger.info(f"오류 알림: {message}")
        self._listeners.emit(item)
        return item

    def success(self, message: str) -> Notification:
        return self.notify(message, SUCCESS)

    def error(self, message: str) -> Notification:
        return self.notify(message, ERROR)

    def dismiss(self, notification_id: int) -> None:
        self._items = [n for n in self._items if n.id != notification_id]

    @property
    def items(self) -> List[Notification]:
        """표시 중인 알림 (표시 시간이 지난 항목 제외)"""
        if self.display_seconds is not None:
            now = self._clock()
            self._items = [n for n in self._items if now - n.created_at < self.display_seconds]
        return list(self._items)

    @property
    def latest(self) -> Optional[Notification]:
        return self._items[-1] if self._items else None

    def subscribe(self, listener: Callable[[Notification], None]) -> Subscription:
        return self._listeners.subscribe(listener)
