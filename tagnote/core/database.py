"""
데이터베이스 설정 및 연결
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import MetaData, types
from sqlalchemy.dialects.postgresql import UUID as PostgresUUID, JSONB
import redis.asyncio as redis
from typing import AsyncGenerator
import logging
import uuid
import ssl
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from tagnote.core.config import settings


logger = logging.getLogger(__name__)


# SQLite와 PostgreSQL 모두 지원하는 UUID 타입
class UUID(types.TypeDecorator):
    """Platform-independent UUID type.

    Uses PostgreSQL's UUID type when available, otherwise uses
    CHAR(36), storing as stringified hex values.
    """
    impl = types.CHAR(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PostgresUUID(as_uuid=True))
        return dialect.type_descriptor(types.CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == 'postgresql':
            return value
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(str(value)))

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


# SQLite와 PostgreSQL 모두 지원하는 JSON 타입
class JSON(types.TypeDecorator):
    """Platform-independent JSON type."""
    impl = types.JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(types.JSON())


def _build_engine_args(database_url: str) -> tuple[str, dict]:
    """DATABASE_URL을 드라이버별 엔진 URL과 옵션으로 변환"""
    if database_url.startswith("sqlite"):
        if "+aiosqlite" not in database_url:
            database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return database_url, {}

    # PostgreSQL의 경우 asyncpg 드라이버 사용
    raw_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # Supabase 등에서 흔히 쓰는 sslmode 파라미터는 asyncpg에서 직접 지원하지 않음.
    # → sslmode/ssl을 URL에서 제거하고 connect_args로 SSLContext를 전달한다.
    parts = urlsplit(raw_url)
    query_items = parse_qsl(parts.query, keep_blank_values=True)
    sslmode = next((v for (k, v) in query_items if k.lower() in ("sslmode", "ssl")), None)
    query_filtered = [(k, v) for (k, v) in query_items if k.lower() not in ("sslmode", "ssl")]
    engine_url = urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query_filtered), parts.fragment))

    options = {"pool_pre_ping": True, "pool_recycle": 300}
    mode = (sslmode or "").strip().lower()
    if mode in ("1", "true", "yes", "on", "require", "prefer", "verify-ca", "verify-full"):
        # require/prefer: 암호화만, verify-*: 인증서 검증 (libpq sslmode 의미와 동일)
        ctx = ssl.create_default_context()
        if mode not in ("verify-ca", "verify-full"):
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        options["connect_args"] = {"ssl": ctx}
    return engine_url, options


_engine_url, _engine_options = _build_engine_args(settings.DATABASE_URL)

# SQLAlchemy 비동기 엔진 생성
engine = create_async_engine(
    _engine_url,
    echo=settings.DEBUG,
    **_engine_options,
)

# 세션 팩토리 생성
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)

# Redis 연결 (실제 연결은 첫 명령 실행 시점)
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


# Base 클래스 정의
class Base(DeclarativeBase):
    """SQLAlchemy Base 클래스"""
    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s"
        }
    )


# 데이터베이스 세션 의존성
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """데이터베이스 세션 의존성"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Redis 클라이언트 의존성
async def get_redis() -> redis.Redis:
    """Redis 클라이언트 의존성"""
    return redis_client


# 데이터베이스 연결 테스트
async def test_db_connection() -> bool:
    """데이터베이스 연결 테스트"""
    try:
        async with engine.begin() as conn:
            await conn.exec_driver_sql("SELECT 1")
        return True
    except Exception as e:
        logger.warning(f"데이터베이스 연결 실패: {e}")
        return False


# Redis 연결 테스트
async def test_redis_connection() -> bool:
    """Redis 연결 테스트"""
    try:
        await redis_client.ping()
        return True
    except Exception as e:
        logger.warning(f"Redis 연결 실패: {e}")
        return False
