"""
구독/해지 수명 주기를 가진 리스너 목록
"""

from typing import Any, Callable, List
import logging


logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class Subscription:
    """구독 핸들 - unsubscribe()는 여러 번 호출해도 안전하다"""

    def __init__(self, listeners: "ListenerSet", listener: Listener):
        self._listeners = listeners
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._listeners.discard(self._listener)


class ListenerSet:
    """등록 순서대로 리스너를 호출한다"""

    def __init__(self):
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def discard(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self) -> None:
        self._listeners.clear()

    def emit(self, *args) -> None:
        # 호출 중 해지되는 리스너가 있어도 순회가 깨지지 않도록 복사본 사용
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception as e:
                logger.exception(f"리스너 호출 실패: {e}")
