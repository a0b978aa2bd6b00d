from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # 추가 환경변수 무시
    )

    # Application
    APP_NAME: str = "Yuno Policy API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database - 로컬 개발은 SQLite, 배포 환경은 DATABASE_URL(PostgreSQL) 사용
    DATABASE_URL: str = "sqlite+aiosqlite:///./yuno.db"

    # 온통청년 Open API (키가 없으면 캐시 조회만 동작)
    ONTONG_API_KEY: Optional[str] = None
    ONTONG_API_BASE_URL: str = "https://www.youthcenter.go.kr/openapi"
    ONTONG_API_TIMEOUT: float = Field(default=10.0, gt=0)

    # 캐시 / 동기화
    CACHE_TTL_HOURS: float = Field(default=6.0, gt=0)
    SYNC_PAGE_SIZE: int = Field(default=100, ge=1)
    SYNC_DELAY_SECONDS: float = Field(default=1.0, ge=0)


settings = Settings()
