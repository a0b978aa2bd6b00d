"""
청년정책 조회 서비스
DB 캐시를 우선 조회하고, 비었거나 오래된 경우 온통청년 API로 대체한 뒤
백그라운드에서 캐시를 다시 채운다.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Set, Tuple

from app.core.clock import utcnow, ensure_utc
from app.schemas.policy import PolicyData, PolicyQuery, PolicyListResult, Pagination
from app.services.data.policy_repository import PolicyRepository
from app.services.data.policy_transformer import (
    from_row,
    transform_policies,
    transform_policy_detail,
)
from app.services.data.youth_policy_client import YouthPolicyClient, OntongAPIError, filter_by_age

logger = logging.getLogger(__name__)

CACHE_TTL = timedelta(hours=6)
SYNC_PAGE_SIZE = 100
SYNC_DELAY_SECONDS = 1.0


class PolicyService:
    """캐시 우선 정책 조회 / 전체 동기화"""

    def __init__(
        self,
        repository: PolicyRepository,
        client: YouthPolicyClient,
        clock: Callable[[], datetime] = utcnow,
        cache_ttl: timedelta = CACHE_TTL,
        sync_page_size: int = SYNC_PAGE_SIZE,
        sync_delay: float = SYNC_DELAY_SECONDS,
    ):
        self.repository = repository
        self.client = client
        self.clock = clock
        self.cache_ttl = cache_ttl
        self.sync_page_size = sync_page_size
        self.sync_delay = sync_delay
        self._background_tasks: Set[asyncio.Task] = set()

    def is_fresh(self, cached_at: Optional[datetime]) -> bool:
        """캐시 시각이 TTL(기본 6시간) 이내인지"""
        if cached_at is None:
            return False
        return self.clock() - ensure_utc(cached_at) < self.cache_ttl

    # ========== 목록 조회 ==========

    async def get_policies(self, query: PolicyQuery) -> PolicyListResult:
        """
        정책 목록 조회

        1. DB 조회 결과가 있고 신선하면 그대로 반환
        2. 아니면 온통청년 API 결과를 반환하고 캐시는 백그라운드에서 갱신
        3. API도 실패하면 오래된 DB 결과, 그것도 없으면 빈 결과

        어떤 오류도 호출자에게 전달하지 않는다.
        """
        try:
            db_result, last_cached = await self._get_policies_from_db(query)

            if db_result.policies and self.is_fresh(last_cached):
                logger.info(f"[DB] 정책 조회 성공: {len(db_result.policies)}개 (페이지 {query.page})")
                return db_result

            logger.info("[API] 정책 데이터 갱신 필요, 온통청년 API 호출...")
            try:
                api_result = await self._get_policies_from_api(query)
            except OntongAPIError as e:
                logger.warning(f"온통청년 API 호출 실패, 캐시된 데이터 반환: {e}")
                if db_result.policies:
                    return db_result
                return PolicyListResult.empty(query.page, query.limit)

            self.refresh_cache_in_background(api_result.policies)
            return api_result

        except Exception:
            logger.exception("정책 조회 중 오류")
            return PolicyListResult.empty(query.page, query.limit)

    async def _get_policies_from_db(self, query: PolicyQuery) -> Tuple[PolicyListResult, Optional[datetime]]:
        rows, total = await self.repository.query_page(query)
        policies = [from_row(row) for row in rows]

        cached_times = [policy.cached_at for policy in policies if policy.cached_at is not None]
        last_cached = max(cached_times) if cached_times else None

        result = PolicyListResult(
            policies=policies,
            pagination=Pagination(
                page=query.page,
                limit=query.limit,
                total=total,
                has_next=query.offset + query.limit < total,
            ),
        )
        return result, last_cached

    async def _get_policies_from_api(self, query: PolicyQuery) -> PolicyListResult:
        payload = await self.client.fetch_list(query)
        policies = transform_policies(payload, cached_at=self.clock())
        policies = filter_by_age(policies, query.age_min, query.age_max)

        try:
            total = int(payload.get("totalCount") or 0)
        except (TypeError, ValueError):
            total = 0

        return PolicyListResult(
            policies=policies,
            pagination=Pagination(
                page=query.page,
                limit=query.limit,
                total=total,
                has_next=len(policies) == query.limit,
            ),
        )

    # ========== 백그라운드 캐시 갱신 ==========

    def refresh_cache_in_background(self, policies: List[PolicyData]) -> asyncio.Task:
        """응답을 기다리게 하지 않도록 캐시 갱신을 별도 태스크로 실행"""
        task = asyncio.create_task(self._refresh_cache(list(policies)))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _refresh_cache(self, policies: List[PolicyData]) -> int:
        saved = 0
        try:
            logger.info(f"[CACHE] 백그라운드 캐시 업데이트 시작: {len(policies)}개 정책")
            for policy in policies:
                try:
                    await self.repository.upsert_one(policy)
                    saved += 1
                except Exception as e:
                    logger.warning(f"[CACHE] 정책 저장 실패 ({policy.id}): {e}")
            logger.info(f"[CACHE] 백그라운드 캐시 업데이트 완료: {saved}/{len(policies)}")
        except Exception:
            logger.exception("[CACHE] 백그라운드 캐시 업데이트 실패")
        return saved

    async def wait_for_background_tasks(self) -> None:
        """진행 중인 캐시 갱신이 끝날 때까지 대기 (종료 시 사용)"""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    # ========== 상세 / 캐시 조회 ==========

    async def get_policy_detail(self, policy_id: str) -> Optional[PolicyData]:
        """정책 상세 조회 (API 실패 시 캐시에서 조회)"""
        try:
            payload = await self.client.fetch_detail(policy_id)
            policy = transform_policy_detail(payload, cached_at=self.clock())
            if policy is not None:
                return policy
            logger.info(f"정책 상세 응답이 비어 있음 ({policy_id}), 캐시 조회")
        except OntongAPIError as e:
            logger.warning(f"정책 상세 조회 실패 ({policy_id}), 캐시 조회: {e}")

        row = await self.repository.get_by_id(policy_id)
        return from_row(row) if row is not None else None

    async def get_cached_policies(self, query: PolicyQuery) -> PolicyListResult:
        """캐시된 정책만 조회 (API 호출 없음)"""
        try:
            rows, total = await self.repository.query_cached_page(query)
            return PolicyListResult(
                policies=[from_row(row) for row in rows],
                pagination=Pagination(
                    page=query.page,
                    limit=query.limit,
                    total=total,
                    has_next=query.offset + query.limit < total,
                ),
            )
        except Exception:
            logger.exception("캐시된 정책 조회 실패")
            return PolicyListResult.empty(1, query.limit)

    # ========== 전체 동기화 ==========

    async def sync_policies(self) -> int:
        """
        전체 정책을 페이지 단위로 가져와 DB에 일괄 저장

        한 페이지가 page_size보다 적게 오거나 비어 있으면 종료한다.
        실패하면 예외를 그대로 올린다.
        """
        try:
            logger.info("정책 동기화 시작...")
            page = 1
            total_synced = 0

            while True:
                result = await self.get_policies(PolicyQuery(page=page, limit=self.sync_page_size))
                if not result.policies:
                    break

                await self.repository.upsert_batch(result.policies)
                total_synced += len(result.policies)
                logger.info(f"{total_synced}개 정책 동기화 완료")

                if len(result.policies) < self.sync_page_size:
                    break

                page += 1
                # API 호출 제한을 고려한 딜레이
                await asyncio.sleep(self.sync_delay)

            logger.info(f"정책 동기화 완료: 총 {total_synced}개")
            return total_synced

        except Exception:
            logger.exception("정책 동기화 실패")
            raise
