"""
보안 관련 유틸리티 - JWT 세션 토큰과 매직 링크 코드
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import redis.asyncio as redis

from tagnote.core.config import settings
from tagnote.core.database import get_db, get_redis
from tagnote.core.rate_limit import is_revoked
from tagnote.models.user import User


# JWT 토큰 스키마 (토큰이 없을 때 401을 직접 응답하기 위해 auto_error=False)
security = HTTPBearer(auto_error=False)


def _encode(data: dict, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "jti": uuid.uuid4().hex,
        "type": token_type,
    })
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """액세스 토큰 생성"""
    delta = expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, "access", delta)


def create_refresh_token(data: dict) -> str:
    """리프레시 토큰 생성"""
    return _encode(data, "refresh", timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS))


def create_magic_link_code(user_id: uuid.UUID, email: str) -> str:
    """메일 링크에 실어 보낼 일회용 로그인 코드 생성"""
    return _encode(
        {"sub": str(user_id), "email": email},
        "magic_link",
        timedelta(minutes=settings.MAGIC_LINK_EXPIRE_MINUTES),
    )


def verify_token(token: str, token_type: str = "access") -> Optional[dict]:
    """토큰 검증"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def seconds_until_expiry(payload: dict) -> int:
    """토큰 만료까지 남은 초"""
    exp = payload.get("exp")
    if exp is None:
        return 0
    return max(0, int(exp - datetime.now(timezone.utc).timestamp()))


def credentials_exception(detail: str = "認証情報が無効です。") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_user_from_token(
    token: Optional[str],
    db: AsyncSession,
    redis_conn: redis.Redis,
) -> Optional[User]:
    """
    토큰에서 사용자를 다시 도출한다.
    만료/위조/폐기된 토큰, 비활성 사용자는 None.
    """
    if not token:
        return None
    payload = verify_token(token, "access")
    if payload is None:
        return None
    user_id = payload.get("sub")
    if user_id is None:
        return None
    jti = payload.get("jti")
    if jti and await is_revoked(redis_conn, jti):
        return None

    # 순환 참조 방지를 위해 함수 내에서 임포트
    from tagnote.services.user_service import get_user_by_id
    user = await get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    redis_conn: redis.Redis = Depends(get_redis),
) -> User:
    """현재 사용자 가져오기"""
    if credentials is None:
        raise credentials_exception("ログインが必要です。")

    user = await resolve_user_from_token(credentials.credentials, db, redis_conn)
    if user is None:
        raise credentials_exception()
    return user

