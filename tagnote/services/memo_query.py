"""
메모 목록 조회 쿼리 생성

필터 조합 로직은 모두 여기에서만 만든다. 모든 조건은 AND로 결합되며
소유자 조건(user_id)은 항상 포함된다.
"""

from typing import List
import uuid

from sqlalchemy import Select, and_, exists, literal, or_, select, func, type_coerce
from sqlalchemy.dialects.postgresql import JSONB

from tagnote.models.memo import Memo
from tagnote.schemas.memo import MemoFilter


LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """LIKE 패턴 메타문자(%, _)와 이스케이프 문자를 한 번만 이스케이프"""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def _tags_contain(tags: List[str], dialect_name: str):
    """메모 태그가 요청 태그를 모두 포함하는지 (집합 포함, 완전 일치 아님)"""
    if dialect_name == "postgresql":
        return type_coerce(Memo.tags, JSONB).contains(tags)

    # SQLite: json_each로 태그마다 EXISTS
    conditions = []
    for tag in tags:
        values = func.json_each(Memo.tags).table_valued("value").alias()
        conditions.append(
            exists(select(literal(1)).select_from(values).where(values.c.value == tag))
        )
    return and_(*conditions)


def build_memo_query(filters: MemoFilter, owner_id: uuid.UUID, dialect_name: str = "postgresql") -> Select:
    """필터와 소유자로 메모 목록 SELECT 문 생성 (최신순)"""
    query = select(Memo).where(Memo.user_id == owner_id)

    term = filters.search.strip()
    if term:
        pattern = f"%{escape_like(term)}%"
        query = query.where(
            or_(
                Memo.title.ilike(pattern, escape=LIKE_ESCAPE),
                Memo.content.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    category = filters.category.strip()
    if category:
        query = query.where(Memo.category == category)

    if filters.tags:
        query = query.where(_tags_contain(list(filters.tags), dialect_name))

    return query.order_by(Memo.created_at.desc())
