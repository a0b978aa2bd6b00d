import asyncio
import logging
from sqlalchemy.ext.asyncio import AsyncEngine
from app.core.database import engine as default_engine, Base
from app.models import *  # 모든 모델 import

logger = logging.getLogger(__name__)


async def init_db(engine: AsyncEngine = default_engine):
    """DB 초기화 - 테이블만 생성 (데이터 유지)"""
    async with engine.begin() as conn:
        # 모든 테이블 생성 (이미 있으면 무시)
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"테이블 확인 완료: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # 기본 실행: 테이블만 생성 (데이터 유지)
    asyncio.run(init_db())
