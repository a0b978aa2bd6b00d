from sqlalchemy import types
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base
from app.core.config import settings

# DATABASE_URL 변환 (Render/Railway는 postgresql:// 형태로 제공)
database_url = str(settings.DATABASE_URL)
if database_url.startswith("postgresql://"):
    database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)


# SQLite와 PostgreSQL 모두 지원하는 JSON 타입
class JSON(types.TypeDecorator):
    """Platform-independent JSON type.

    Uses PostgreSQL's JSONB when available, otherwise the generic JSON type.
    Python ``None`` is stored as SQL NULL rather than a JSON ``null``.
    """
    impl = types.JSON(none_as_null=True)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import JSONB
            return dialect.type_descriptor(JSONB(none_as_null=True))
        return dialect.type_descriptor(types.JSON(none_as_null=True))


def build_engine(url: str, echo: bool = False):
    """비동기 엔진 생성"""
    return create_async_engine(url, echo=echo)


def build_session_factory(bind) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Async engine 생성
engine = build_engine(database_url, echo=settings.DEBUG)

AsyncSessionLocal = build_session_factory(engine)

Base = declarative_base()
