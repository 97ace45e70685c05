"""
TagNote - FastAPI 메인 애플리케이션
메일 링크 로그인 + 태그 기반 Markdown 메모
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from tagnote.core.config import settings, validate_settings
from tagnote.core.database import engine, Base, test_db_connection, test_redis_connection

# 모델 메타데이터 등록
import tagnote.models  # noqa: F401

from tagnote.api.auth import router as auth_router
from tagnote.api.memos import router as memos_router
from tagnote.api.memo_proxy import router as memo_proxy_router
from tagnote.api.health import router as health_router

# 로깅 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료 시 실행되는 이벤트"""
    validate_settings()
    logger.info("TagNote API 시작")

    # 데이터베이스 테이블 생성 (개발용)
    if settings.ENVIRONMENT == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("데이터베이스 테이블 생성 완료")

    yield

    logger.info("TagNote API 종료")
    await engine.dispose()


# FastAPI 앱 생성
app = FastAPI(
    title="TagNote API",
    description="メールリンク認証とタグ付き Markdown メモ",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)

# CORS: 개발 환경에선 프론트 도메인을 명시적으로 허용
DEV_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
ALLOWED_ORIGINS = DEV_ALLOWED_ORIGINS if settings.ENVIRONMENT == "development" else [settings.FRONTEND_BASE_URL]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 라우터 등록
app.include_router(auth_router, prefix="/auth", tags=["인증"])
app.include_router(memos_router, prefix="/memos", tags=["메모"])
app.include_router(memo_proxy_router, prefix="/api", tags=["프록시"])
app.include_router(health_router, prefix="/api", tags=["진단"])


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "TagNote API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "database": "connected" if await test_db_connection() else "unavailable",
        "redis": "connected" if await test_redis_connection() else "unavailable",
    }
