"""
Pydantic 스키마 패키지
"""

from .auth import (
    MagicLinkRequest,
    MagicLinkResponse,
    CodeExchangeRequest,
    SetSessionRequest,
    RefreshTokenRequest,
    SessionResponse,
)
from .user import UserResponse
from .memo import (
    MemoCreate,
    MemoUpdate,
    MemoResponse,
    MemoListResponse,
    MemoFilter,
    UNTITLED_MEMO,
)

__all__ = [
    "MagicLinkRequest",
    "MagicLinkResponse",
    "CodeExchangeRequest",
    "SetSessionRequest",
    "RefreshTokenRequest",
    "SessionResponse",
    "UserResponse",
    "MemoCreate",
    "MemoUpdate",
    "MemoResponse",
    "MemoListResponse",
    "MemoFilter",
    "UNTITLED_MEMO",
]
