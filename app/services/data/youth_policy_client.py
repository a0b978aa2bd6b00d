"""
청년정책 API 클라이언트
온통청년 Open API(youthPolicy.json / youthPolicyDetail.json) 조회
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from app.core.config import settings
from app.schemas.policy import PolicyData, PolicyQuery
from app.services.data.policy_transformer import map_category_to_code, matches_age_range

logger = logging.getLogger(__name__)

LIST_ENDPOINT = "youthPolicy.json"
DETAIL_ENDPOINT = "youthPolicyDetail.json"


class OntongAPIError(Exception):
    """온통청년 API 호출 실패 (연결 오류, 타임아웃, 2xx 이외 응답)"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class YouthPolicyClient:
    """청년정책 API 클라이언트"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.ONTONG_API_KEY
        if not self.api_key:
            logger.warning("ONTONG_API_KEY가 설정되지 않았습니다 - 캐시 데이터만 제공됩니다")

        self.base_url = (base_url or settings.ONTONG_API_BASE_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.ONTONG_API_TIMEOUT)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self.session = aiohttp.ClientSession(
            timeout=self.timeout,
            headers={"User-Agent": "Yuno-Backend/1.0"},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        await self.close()

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """API 요청 실행 (재시도 없음)"""
        if not self.session or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": "Yuno-Backend/1.0"},
            )

        # API 키 추가
        query = {key: value for key, value in params.items() if value not in (None, "")}
        if self.api_key:
            query["openApiVlak"] = self.api_key

        url = f"{self.base_url}/{endpoint}"
        logger.info(f"[ONTONG API] GET /{endpoint}")

        try:
            async with self.session.get(url, params=query) as response:
                if not 200 <= response.status < 300:
                    raise OntongAPIError(f"API 요청 실패: {response.status}", status=response.status)
                data = await response.json(content_type=None)
        except OntongAPIError as e:
            logger.error(f"[ONTONG API ERROR] {e}")
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"[ONTONG API ERROR] {e!r}")
            raise OntongAPIError(f"API 요청 중 오류: {e!r}") from e

        if not isinstance(data, dict):
            raise OntongAPIError("API 응답 형식이 올바르지 않습니다")
        return data

    @staticmethod
    def build_list_params(query: PolicyQuery) -> Dict[str, Any]:
        """조회 조건 → 온통청년 API 파라미터"""
        return {
            "display": query.limit,
            "pageIndex": query.page,
            "bizTycdSel": map_category_to_code(query.category) if query.category else None,
            "srchPolicyRegion": query.region,
            "query": query.search,
        }

    async def fetch_list(self, query: PolicyQuery) -> Dict[str, Any]:
        """정책 목록 조회 (원본 응답)"""
        return await self._request(LIST_ENDPOINT, self.build_list_params(query))

    async def fetch_detail(self, policy_id: str) -> Dict[str, Any]:
        """정책 상세 조회 (원본 응답)"""
        return await self._request(DETAIL_ENDPOINT, {"bizId": policy_id})


def filter_by_age(policies: List[PolicyData], age_min: Optional[int], age_max: Optional[int]) -> List[PolicyData]:
    """
    연령 조건 클라이언트 필터링

    온통청년 API는 연령 검색을 지원하지 않으므로 응답을 받은 뒤 거른다.
    """
    if age_min is None and age_max is None:
        return policies
    return [policy for policy in policies if matches_age_range(policy, age_min, age_max)]
