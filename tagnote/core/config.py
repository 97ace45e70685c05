"""
애플리케이션 설정
"""

from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv


"""env 로딩 우선순위
1) OS 환경변수
2) 프로젝트 루트의 .env (repo/.env)
3) 패키지 디렉터리의 .env (repo/tagnote/.env)
"""

# .env 사전 로드 (OS 환경변수 우선, override=False)
_here = Path(__file__).resolve()
_repo_root_env = _here.parents[2] / ".env"  # repo/.env
_package_env = _here.parents[1] / ".env"    # repo/tagnote/.env
for _p in (_repo_root_env, _package_env):
    if _p.exists():
        load_dotenv(dotenv_path=str(_p), override=False)


DEFAULT_JWT_SECRET = "your-super-secret-jwt-key-change-this-in-production"


class Settings(BaseSettings):
    """애플리케이션 설정"""
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    APP_VERSION: str = "0.1.0"

    DATABASE_URL: str = "sqlite+aiosqlite:///./tagnote.db"
    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # 매직 링크 (패스워드리스 로그인)
    MAGIC_LINK_EXPIRE_MINUTES: int = 15
    MAGIC_LINK_RATE_LIMIT: int = 5  # 이메일당 분당 요청 수

    # 이메일/SMTP
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    EMAIL_FROM_ADDRESS: str = "no-reply@tagnote.local"
    EMAIL_FROM_NAME: str = "TagNote"
    FRONTEND_BASE_URL: str = "http://localhost:3000"
    # 로그인 링크 redirect_url로 허용할 추가 origin (쉼표 구분). FRONTEND_BASE_URL의 origin은 항상 허용
    ALLOWED_REDIRECT_ORIGINS: str = ""

    # 클라이언트가 호출하는 API 서버
    API_BASE_URL: str = "http://localhost:8000"

    # 헬스 체크 대상 인증 서비스
    IDENTITY_SERVICE_URL: Optional[str] = "http://localhost:8000"
    IDENTITY_API_KEY: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore'


settings = Settings()


def validate_settings():
    """설정 검증"""
    if settings.ENVIRONMENT == "production":
        if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
            raise ValueError("프로덕션 환경에서는 JWT_SECRET_KEY를 변경해야 합니다.")
        if not settings.SMTP_HOST:
            raise ValueError("프로덕션 환경에서는 로그인 메일 발송을 위해 SMTP_HOST가 필요합니다.")

    return True


validate_settings()
