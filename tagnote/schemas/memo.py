"""
메모 스키마 - API 요청/응답 모델
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
import uuid
from datetime import datetime

from tagnote.services.tag_service import normalize_tag_list


UNTITLED_MEMO = "無題のメモ"


class MemoCreate(BaseModel):
    """메모 생성 요청"""
    title: str = Field(..., max_length=200)
    content: str
    category: Optional[str] = Field(None, max_length=100)
    tags: List[str] = Field(default_factory=list)
    # 보내는 경우 토큰의 사용자와 같아야 한다 (다른 사용자 명의로 생성 불가)
    user_id: Optional[uuid.UUID] = None

    @field_validator("title", "content")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("タイトルと本文は必須です。")
        return value

    @field_validator("category")
    @classmethod
    def _optional_category(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: List[str]) -> List[str]:
        return normalize_tag_list(value)


class MemoUpdate(BaseModel):
    """메모 수정 요청 - 제목/본문만 수정 가능"""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_or_default(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or UNTITLED_MEMO

    @field_validator("content")
    @classmethod
    def _trim_content(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip()


class MemoResponse(BaseModel):
    """메모 응답"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MemoListResponse(BaseModel):
    """메모 목록 응답"""
    memos: List[MemoResponse]
    total_count: int


class MemoFilter(BaseModel):
    """목록 조회 필터 (저장되지 않음)"""
    search: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
