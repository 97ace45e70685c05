"""
메모 API 엔드포인트 - 토큰 사용자 범위로 제한된 메모 저장소
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging
import uuid

from tagnote.core.database import get_db
from tagnote.core.security import get_current_user
from tagnote.models.user import User
from tagnote.services import memo_service
from tagnote.schemas.memo import (
    MemoCreate,
    MemoUpdate,
    MemoResponse,
    MemoListResponse,
    MemoFilter,
)

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_DETAIL = "メモが見つかりません。"


@router.get("", response_model=MemoListResponse)
async def list_memos(
    search: str = Query("", max_length=200),
    category: str = Query("", max_length=100),
    tags: Optional[List[str]] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """메모 목록 조회 (키워드/카테고리/태그 필터, 최신순)"""
    filters = MemoFilter(search=search, category=category, tags=tags or [])
    memos = await memo_service.list_memos(db, current_user.id, filters)
    return MemoListResponse(
        memos=[MemoResponse.model_validate(memo) for memo in memos],
        total_count=len(memos)
    )


@router.post("", response_model=MemoResponse, status_code=status.HTTP_201_CREATED)
async def create_memo(
    memo_data: MemoCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """메모 생성"""
    if memo_data.user_id is not None and memo_data.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="他のユーザーとしてメモを作成することはできません。",
        )

    return await memo_service.create_memo(db, current_user.id, memo_data)


@router.get("/{memo_id}", response_model=MemoResponse)
async def get_memo(
    memo_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """메모 단일 조회"""
    memo = await memo_service.get_memo_by_id(db, memo_id, current_user.id)
    if not memo:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    return memo


@router.patch("/{memo_id}", response_model=MemoResponse)
async def update_memo(
    memo_id: uuid.UUID,
    memo_data: MemoUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """메모 수정 (제목/본문)"""
    memo = await memo_service.update_memo(db, memo_id, current_user.id, memo_data)
    if not memo:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    return memo


@router.delete("/{memo_id}")
async def delete_memo(
    memo_id: uuid.UUID,
    user_id: Optional[uuid.UUID] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """메모 삭제 - user_id 필터는 토큰 사용자 조건과 AND로 결합된다

    일치하는 행이 없어도 {"success": true}를 반환한다 (/api/memos 프록시와 같은 응답).
    """
    deleted = False
    if user_id is None or user_id == current_user.id:
        deleted = await memo_service.delete_memo(db, memo_id, current_user.id)
    if not deleted:
        logger.info(f"삭제 대상 없음: memo_id={memo_id} user_id={current_user.id}")
    return {"success": True}
