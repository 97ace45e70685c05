"""
사용자 관련 서비스
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timezone
from typing import Optional, Union
import uuid

from tagnote.models.user import User


async def get_user_by_id(db: AsyncSession, user_id: Union[str, uuid.UUID]) -> Optional[User]:
    """ID로 사용자 조회"""
    try:
        user_uuid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
    except ValueError:
        return None  # 유효하지 않은 UUID 형식
    result = await db.execute(select(User).where(User.id == user_uuid))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """이메일로 사용자 조회"""
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, email: str) -> User:
    """사용자 생성 (미인증 상태)"""
    user = User(email=email.strip().lower())
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def mark_signed_in(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
    """로그인 완료 처리 - 이메일 인증 및 마지막 로그인 시각 갱신"""
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(is_verified=True, last_sign_in_at=datetime.now(timezone.utc))
    )
    await db.commit()
    user = await get_user_by_id(db, user_id)
    if user is not None:
        await db.refresh(user)
    return user
