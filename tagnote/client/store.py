"""
메모 저장소(/memos) 및 삭제 프록시(/api/memos) 클라이언트
"""

from typing import Any, Dict, List, Optional
import logging

import aiohttp

from tagnote.core.config import settings
from tagnote.core.errors import StoreFailure
from tagnote.schemas.memo import MemoFilter, MemoListResponse, MemoResponse
from tagnote.client.api_client import ApiClient


logger = logging.getLogger(__name__)


def filter_params(filters: MemoFilter) -> List[tuple]:
    """필터를 쿼리 파라미터로 변환 - 비어 있는 조건은 보내지 않는다"""
    params = []
    if filters.search.strip():
        params.append(("search", filters.search.strip()))
    if filters.category.strip():
        params.append(("category", filters.category.strip()))
    for tag in filters.tags:
        params.append(("tags", tag))
    return params


class MemoStoreClient(ApiClient):
    """메모 테이블 select / insert / update / delete"""

    def __init__(self, base_url: Optional[str] = None, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(base_url or settings.API_BASE_URL, session)

    async def select(self, token: str, filters: MemoFilter) -> List[MemoResponse]:
        data = await self.request("GET", "/memos", token=token, params=filter_params(filters))
        return MemoListResponse.model_validate(data).memos

    async def select_one(self, token: str, memo_id: str) -> Optional[MemoResponse]:
        """없거나 다른 사용자의 메모면 None"""
        try:
            data = await self.request("GET", f"/memos/{memo_id}", token=token)
        except StoreFailure as e:
            if e.status in (404, 422):
                return None
            raise
        return MemoResponse.model_validate(data)

    async def insert(self, token: str, payload: Dict[str, Any]) -> MemoResponse:
        data = await self.request("POST", "/memos", token=token, json=payload)
        return MemoResponse.model_validate(data)

    async def update(self, token: str, memo_id: str, payload: Dict[str, Any]) -> Optional[MemoResponse]:
        """수정된 행 반환 (대상 행이 없으면 None)"""
        try:
            data = await self.request("PATCH", f"/memos/{memo_id}", token=token, json=payload)
        except StoreFailure as e:
            if e.status == 404:
                return None
            raise
        return MemoResponse.model_validate(data)

    async def delete(self, token: str, memo_id: str, user_id: str) -> None:
        """id AND user_id 조건으로 직접 삭제"""
        await self.request(
            "DELETE", f"/memos/{memo_id}",
            token=token,
            params={"user_id": user_id},
        )

    async def delete_via_proxy(self, token: str, memo_id: str) -> None:
        """서버 프록시 경유 삭제 - 200 이외 응답은 StoreFailure"""
        body = await self.request("DELETE", f"/api/memos/{memo_id}", token=token)
        if not (isinstance(body, dict) and body.get("success")):
            raise StoreFailure(detail=f"unexpected proxy response: {body}")
