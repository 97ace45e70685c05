"""
서버 측 메모 삭제 프록시

클라이언트가 보낸 user_id는 받지 않는다. 삭제 대상 사용자는 항상 Bearer 토큰에서 다시 도출한다.
응답 형식: 200 {"success": true} / 401 {"error"} / 500 {"error"}
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis
import logging
import uuid

from tagnote.core.database import get_db, get_redis
from tagnote.core.security import security, resolve_user_from_token
from tagnote.services import memo_service


logger = logging.getLogger(__name__)

router = APIRouter()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.delete("/memos/{memo_id}")
async def delete_memo_via_proxy(
    memo_id: str,
    credentials=Depends(security),
    db: AsyncSession = Depends(get_db),
    redis_conn: Redis = Depends(get_redis),
):
    """Bearer 토큰으로 인가된 메모 삭제"""
    if credentials is None:
        return _error("Unauthorized: missing bearer token", status.HTTP_401_UNAUTHORIZED)

    try:
        user = await resolve_user_from_token(credentials.credentials, db, redis_conn)
        if user is None:
            return _error("Unauthorized: invalid session", status.HTTP_401_UNAUTHORIZED)

        try:
            memo_uuid = uuid.UUID(memo_id)
        except ValueError:
            return _error("Delete failed (invalid memo id)", status.HTTP_500_INTERNAL_SERVER_ERROR)

        try:
            deleted = await memo_service.delete_memo(db, memo_uuid, user.id)
        except Exception as e:
            logger.error(f"프록시 메모 삭제 실패: memo_id={memo_id} error={e}")
            return _error(f"Delete failed ({e})", status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception as e:
        logger.error(f"프록시 처리 중 오류: {e}")
        return _error(f"Server error ({e})", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if not deleted:
        # 이미 없거나 다른 사용자의 메모 - 존재 여부를 드러내지 않도록 성공으로 응답
        logger.info(f"프록시 삭제 대상 없음: memo_id={memo_id} user_id={user.id}")
    return {"success": True}
