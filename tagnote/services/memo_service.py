"""
메모 서비스 - 비즈니스 로직

모든 조회/수정/삭제는 id와 함께 소유자(user_id) 조건으로 범위를 제한한다.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from datetime import datetime, timezone
from typing import List, Optional
import logging
import uuid

from tagnote.models.memo import Memo
from tagnote.schemas.memo import MemoCreate, MemoUpdate, MemoFilter
from tagnote.services.memo_query import build_memo_query


logger = logging.getLogger(__name__)


async def list_memos(
    db: AsyncSession,
    user_id: uuid.UUID,
    filters: MemoFilter
) -> List[Memo]:
    """필터 조건으로 메모 목록 조회 (최신순)"""
    query = build_memo_query(filters, user_id, dialect_name=db.get_bind().dialect.name)
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_memo(
    db: AsyncSession,
    user_id: uuid.UUID,
    memo_data: MemoCreate
) -> Memo:
    """메모 생성"""
    memo = Memo(
        user_id=user_id,
        title=memo_data.title,
        content=memo_data.content,
        category=memo_data.category,
        tags=memo_data.tags,
    )

    db.add(memo)
    await db.commit()
    await db.refresh(memo)
    logger.info(f"메모 생성: memo_id={memo.id} user_id={user_id}")
    return memo


async def get_memo_by_id(
    db: AsyncSession,
    memo_id: uuid.UUID,
    user_id: uuid.UUID
) -> Optional[Memo]:
    """메모 단일 조회"""
    result = await db.execute(
        select(Memo)
        .where(
            Memo.id == memo_id,
            Memo.user_id == user_id
        )
    )
    return result.scalar_one_or_none()


async def update_memo(
    db: AsyncSession,
    memo_id: uuid.UUID,
    user_id: uuid.UUID,
    memo_data: MemoUpdate
) -> Optional[Memo]:
    """메모 수정 (제목/본문만)"""
    # 권한 확인을 위해 먼저 조회
    memo = await get_memo_by_id(db, memo_id, user_id)
    if not memo:
        return None

    update_data = memo_data.model_dump(exclude_none=True)
    if update_data:
        update_data["updated_at"] = datetime.now(timezone.utc)
        await db.execute(
            update(Memo)
            .where(
                Memo.id == memo_id,
                Memo.user_id == user_id
            )
            .values(**update_data)
        )
        await db.commit()
        await db.refresh(memo)

    return memo


async def delete_memo(
    db: AsyncSession,
    memo_id: uuid.UUID,
    user_id: uuid.UUID
) -> bool:
    """메모 삭제"""
    result = await db.execute(
        delete(Memo)
        .where(
            Memo.id == memo_id,
            Memo.user_id == user_id
        )
    )
    await db.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"메모 삭제: memo_id={memo_id} user_id={user_id}")
    return deleted
