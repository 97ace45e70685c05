"""
인증 관련 Pydantic 스키마
"""

from pydantic import BaseModel, EmailStr
from typing import Optional

from .user import UserResponse


class MagicLinkRequest(BaseModel):
    """로그인 링크 발송 요청"""
    email: EmailStr
    allow_create: bool = False  # True면 미가입 이메일에 계정을 만든다 (회원가입)
    redirect_url: Optional[str] = None


class MagicLinkResponse(BaseModel):
    """로그인 링크 발송 결과"""
    message: str
    created: bool = False


class CodeExchangeRequest(BaseModel):
    """메일 링크의 code를 세션으로 교환"""
    code: str


class SetSessionRequest(BaseModel):
    """기존 토큰 쌍으로 세션 복원"""
    access_token: str
    refresh_token: str


class RefreshTokenRequest(BaseModel):
    """리프레시 토큰 요청 스키마"""
    refresh_token: str


class SessionResponse(BaseModel):
    """세션(토큰 + 사용자) 응답"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
