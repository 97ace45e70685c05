"""
MemoRepository - 로그인 사용자 범위의 메모 CRUD

모든 작업은 네트워크 호출 전에 사용자 확인을 먼저 한다 (세션이 없으면 AuthRequired).
"""

from typing import Any, Dict, List, Optional

from tagnote.core.errors import AuthRequired, NotFound
from tagnote.schemas.memo import MemoFilter, MemoResponse
from tagnote.client.session_gate import SessionGate
from tagnote.client.store import MemoStoreClient


class MemoRepository:
    """SessionGate + MemoStoreClient"""

    def __init__(self, store: MemoStoreClient, gate: SessionGate):
        self.store = store
        self.gate = gate

    def _owner(self) -> tuple:
        user = self.gate.require_user()
        token = self.gate.access_token
        if not token:
            raise AuthRequired()
        return str(user.id), token

    @property
    def access_token(self) -> Optional[str]:
        return self.gate.access_token

    async def create(self, payload: Dict[str, Any]) -> MemoResponse:
        _, token = self._owner()
        return await self.store.insert(token, payload)

    async def fetch_one(self, memo_id: str) -> MemoResponse:
        _, token = self._owner()
        memo = await self.store.select_one(token, memo_id)
        if memo is None:
            raise NotFound()
        return memo

    async def fetch_many(self, filters: MemoFilter) -> List[MemoResponse]:
        _, token = self._owner()
        return await self.store.select(token, filters)

    async def update(self, memo_id: str, payload: Dict[str, Any]) -> MemoResponse:
        _, token = self._owner()
        memo = await self.store.update(token, memo_id, payload)
        if memo is None:
            raise NotFound(detail="no row returned")
        return memo

    async def delete(self, memo_id: str) -> None:
        """직접 삭제 - user_id 조건은 항상 포함된다"""
        user_id, token = self._owner()
        await self.store.delete(token, memo_id, user_id)

    async def delete_via_proxy(self, memo_id: str) -> None:
        token = self.gate.access_token
        if not token:
            raise AuthRequired()
        await self.store.delete_via_proxy(token, memo_id)
