"""
청년정책 캐시 저장소 Repository
"""
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.dialects import postgresql, sqlite

from app.core.clock import utcnow
from app.models.policy import Policy
from app.schemas.policy import PolicyData, PolicyQuery
from app.services.data.policy_filter import PolicyFilter
from app.services.data.policy_transformer import to_row

logger = logging.getLogger(__name__)

# upsert 시 덮어쓰는 컬럼 (조회수/인기도는 파이프라인에서 관리하지 않음)
UPSERT_COLUMNS = (
    "title",
    "category",
    "description",
    "content",
    "deadline",
    "start_date",
    "end_date",
    "application_url",
    "contact_info",
    "requirements",
    "benefits",
    "documents",
    "region",
    "target_age",
    "target_education",
    "tags",
    "image_url",
    "status",
    "cached_at",
    "updated_at",
)


class PolicyRepository:
    """policies 테이블 조회/저장"""

    def __init__(self, session_factory: async_sessionmaker, clock: Callable[[], datetime] = utcnow):
        self._session_factory = session_factory
        self._clock = clock

    @staticmethod
    def _dialect_name(db: AsyncSession) -> str:
        return db.get_bind().dialect.name

    @staticmethod
    def _insert(dialect_name: str):
        if dialect_name == "postgresql":
            return postgresql.insert
        if dialect_name == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"upsert를 지원하지 않는 DB입니다: {dialect_name}")

    async def _query(self, query: PolicyQuery, include_age: bool, order_by) -> Tuple[List[Policy], int]:
        async with self._session_factory() as db:
            where = PolicyFilter.from_query(query, self._dialect_name(db), include_age=include_age).render()

            count_result = await db.execute(
                select(func.count()).select_from(Policy).where(where)
            )
            total = count_result.scalar() or 0

            result = await db.execute(
                select(Policy)
                .where(where)
                .order_by(*order_by)
                .limit(query.limit)
                .offset(query.offset)
            )
            return list(result.scalars().all()), total

    async def query_page(self, query: PolicyQuery) -> Tuple[List[Policy], int]:
        """조건에 맞는 정책 페이지 + 전체 개수 (인기도, 최근 수정 순)"""
        return await self._query(
            query,
            include_age=True,
            order_by=(Policy.popularity_score.desc(), Policy.updated_at.desc()),
        )

    async def query_cached_page(self, query: PolicyQuery) -> Tuple[List[Policy], int]:
        """캐시 목록 조회 (연령 조건 없음, 인기도, 최근 생성 순)"""
        return await self._query(
            query,
            include_age=False,
            order_by=(Policy.popularity_score.desc(), Policy.created_at.desc()),
        )

    async def get_by_id(self, policy_id: str) -> Optional[Policy]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Policy).where(Policy.id == policy_id)
            )
            return result.scalar_one_or_none()

    def _upsert_statement(self, dialect_name: str, rows: List[Dict]):
        stmt = self._insert(dialect_name)(Policy).values(rows)
        return stmt.on_conflict_do_update(
            index_elements=[Policy.id],
            set_={column: stmt.excluded[column] for column in UPSERT_COLUMNS},
        )

    async def upsert_one(self, policy: PolicyData) -> None:
        """단일 정책 저장 (있으면 전체 갱신, cached_at/updated_at은 현재 시각)"""
        now = self._clock()
        row = to_row(policy)
        row.update(status="active", cached_at=now, updated_at=now)

        async with self._session_factory() as db:
            try:
                await db.execute(self._upsert_statement(self._dialect_name(db), [row]))
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    async def upsert_batch(self, policies: List[PolicyData]) -> int:
        """
        여러 정책 일괄 저장 (단일 INSERT ... ON CONFLICT 문)

        cached_at은 각 정책이 가진 값을 그대로 사용하고,
        값이 없을 때만 현재 시각으로 채운다.
        """
        if not policies:
            return 0

        now = self._clock()
        rows: Dict[str, Dict] = {}
        for policy in policies:
            row = to_row(policy)
            row.update(status="active", cached_at=policy.cached_at or now, updated_at=now)
            # 같은 배치 안의 중복 ID는 마지막 값 사용
            rows[policy.id] = row

        async with self._session_factory() as db:
            try:
                await db.execute(self._upsert_statement(self._dialect_name(db), list(rows.values())))
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.debug(f"정책 {len(rows)}개 일괄 저장")
        return len(rows)

    async def count(self) -> int:
        """저장된 정책 총 개수"""
        async with self._session_factory() as db:
            result = await db.execute(select(func.count()).select_from(Policy))
            return result.scalar() or 0
