"""
인증 관련 API 라우터 - 메일 링크 기반 패스워드리스 로그인
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl
from typing import Optional
import logging

from tagnote.core.config import settings
from tagnote.core.database import get_db, get_redis, test_db_connection
from tagnote.core.rate_limit import check_rate_limit, consume_once, revoke, OneTimeKeyUnavailable
from tagnote.core.security import (
    security,
    create_access_token,
    create_refresh_token,
    create_magic_link_code,
    verify_token,
    seconds_until_expiry,
    resolve_user_from_token,
    credentials_exception,
    get_current_user,
)
from tagnote.models.user import User
from tagnote.schemas.auth import (
    MagicLinkRequest,
    MagicLinkResponse,
    CodeExchangeRequest,
    SetSessionRequest,
    RefreshTokenRequest,
    SessionResponse,
)
from tagnote.schemas.user import UserResponse
from tagnote.services.user_service import (
    get_user_by_email,
    get_user_by_id,
    create_user,
    mark_signed_in,
)
from tagnote.services.mail_service import send_magic_link_email


logger = logging.getLogger(__name__)

router = APIRouter()


def _origin(url: str) -> str:
    parts = urlsplit(url.strip())
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


def is_allowed_redirect(redirect_url: Optional[str]) -> bool:
    """redirect_url이 프론트엔드 또는 설정된 허용 목록의 origin인지 (미지정은 기본 콜백)"""
    if not redirect_url:
        return True
    parts = urlsplit(redirect_url.strip())
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return False
    allowed = {_origin(settings.FRONTEND_BASE_URL)}
    allowed.update(_origin(o) for o in settings.ALLOWED_REDIRECT_ORIGINS.split(",") if o.strip())
    return _origin(redirect_url) in allowed


def _build_login_url(redirect_url: Optional[str], code: str) -> str:
    """redirect_url(기본: 프론트 콜백)에 code 쿼리 파라미터를 붙인다"""
    base = redirect_url or f"{settings.FRONTEND_BASE_URL.rstrip('/')}/auth/callback"
    parts = urlsplit(base)
    query = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "code"]
    query.append(("code", code))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def _issue_session(user: User) -> SessionResponse:
    """새 토큰 쌍 발급"""
    data = {"sub": str(user.id)}
    return SessionResponse(
        access_token=create_access_token(data),
        refresh_token=create_refresh_token(data),
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/magic-link", response_model=MagicLinkResponse)
async def send_magic_link(
    payload: MagicLinkRequest,
    db: AsyncSession = Depends(get_db),
    redis_conn: Redis = Depends(get_redis),
):
    """로그인 링크 발송 (allow_create=True면 회원가입 겸용)"""
    if not is_allowed_redirect(payload.redirect_url):
        logger.warning(f"허용되지 않은 redirect_url 거부: {payload.redirect_url}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="許可されていないリダイレクト先です。",
        )

    email = payload.email.strip().lower()
    allowed, _ = await check_rate_limit(redis_conn, f"magic:{email}", settings.MAGIC_LINK_RATE_LIMIT)
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="短時間に送信しすぎです。しばらく待ってから再試行してください。",
        )

    created = False
    user = await get_user_by_email(db, email)
    if user is None:
        if not payload.allow_create:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Signups not allowed for this email",
            )
        user = await create_user(db, email)
        created = True
    elif not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="このアカウントは無効化されています。",
        )

    code = create_magic_link_code(user.id, user.email)
    login_url = _build_login_url(payload.redirect_url, code)
    try:
        await send_magic_link_email(user.email, login_url, is_signup=created)
    except Exception as e:
        logger.warning(f"로그인 메일 발송 실패: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"メールの送信に失敗しました。({e})",
        )

    return MagicLinkResponse(message="確認メールを送信しました。受信箱をご確認ください。", created=created)


@router.post("/exchange", response_model=SessionResponse)
async def exchange_code(
    payload: CodeExchangeRequest,
    db: AsyncSession = Depends(get_db),
    redis_conn: Redis = Depends(get_redis),
):
    """메일 링크의 code를 세션으로 교환 (code는 한 번만 사용 가능)"""
    claims = verify_token(payload.code, "magic_link")
    if claims is None:
        raise credentials_exception("ログインリンクが無効か期限切れです。")

    jti = claims.get("jti")
    if not jti:
        raise credentials_exception("ログインリンクが無効か期限切れです。")
    try:
        first_use = await consume_once(redis_conn, f"magic:{jti}", seconds_until_expiry(claims))
    except OneTimeKeyUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="認証サーバーが一時的に利用できません。しばらくしてから再試行してください。",
        )
    if not first_use:
        raise credentials_exception("このログインリンクは既に使用されています。")

    user = await get_user_by_id(db, claims.get("sub"))
    if user is None or not user.is_active or user.email != claims.get("email"):
        raise credentials_exception()

    user = await mark_signed_in(db, user.id)
    logger.info(f"매직 링크 로그인: user_id={user.id}")
    return _issue_session(user)


@router.post("/session", response_model=SessionResponse)
async def set_session(
    payload: SetSessionRequest,
    db: AsyncSession = Depends(get_db),
    redis_conn: Redis = Depends(get_redis),
):
    """기존 토큰 쌍으로 세션 복원 - 두 토큰이 같은 사용자여야 한다"""
    user = await resolve_user_from_token(payload.access_token, db, redis_conn)
    refresh_claims = verify_token(payload.refresh_token, "refresh")
    if user is None or refresh_claims is None or refresh_claims.get("sub") != str(user.id):
        raise credentials_exception()

    return SessionResponse(
        access_token=payload.access_token,
        refresh_token=payload.refresh_token,
        expires_in=seconds_until_expiry(verify_token(payload.access_token, "access") or {}),
        user=UserResponse.model_validate(user),
    )


@router.post("/refresh", response_model=SessionResponse)
async def refresh_token(
    token_data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
):
    """토큰 갱신"""
    claims = verify_token(token_data.refresh_token, "refresh")
    if claims is None:
        raise credentials_exception("リフレッシュトークンが無効です。")

    user = await get_user_by_id(db, claims.get("sub"))
    if user is None or not user.is_active:
        raise credentials_exception()
    return _issue_session(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """현재 사용자 정보 조회"""
    return current_user


@router.post("/logout")
async def logout(
    credentials=Depends(security),
    redis_conn: Redis = Depends(get_redis),
):
    """로그아웃 - 제시된 액세스 토큰을 만료 시점까지 폐기"""
    claims = verify_token(credentials.credentials, "access") if credentials else None
    if claims and claims.get("jti"):
        await revoke(redis_conn, claims["jti"], seconds_until_expiry(claims))
    return {"message": "ログアウトしました。"}


@router.get("/health")
async def auth_health():
    """인증 서비스 헬스 체크"""
    return {
        "name": "tagnote-auth",
        "version": settings.APP_VERSION,
        "database": await test_db_connection(),
    }
