"""
청년정책 조회 API 엔드포인트
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Path, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas.policy import (
    CategoryName,
    PolicyQuery,
    PolicyListResponse,
    PolicyDetailResponse,
)
from app.services.policy_service import PolicyService

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_MAX_LENGTH = 100

router = APIRouter(
    prefix="/policies",
    tags=["policies"]
)


def get_policy_service(request: Request) -> PolicyService:
    """앱 시작 시 생성된 PolicyService"""
    return request.app.state.policy_service


@router.get(
    "",
    response_model=PolicyListResponse,
    summary="정책 목록 조회",
    description="캐시를 우선 조회하고, 오래되었거나 없으면 온통청년 API에서 가져옵니다"
)
async def get_policies(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[CategoryName] = Query(None),
    region: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="2~100자 (앞뒤 공백 제외)"),
    age_min: Optional[int] = Query(None, alias="ageMin", ge=18, le=65),
    age_max: Optional[int] = Query(None, alias="ageMax", ge=18, le=65),
    service: PolicyService = Depends(get_policy_service),
):
    search_text = search.strip() if search is not None else None
    if search_text is not None and not SEARCH_MIN_LENGTH <= len(search_text) <= SEARCH_MAX_LENGTH:
        raise RequestValidationError([{
            "type": "string_too_short" if len(search_text) < SEARCH_MIN_LENGTH else "string_too_long",
            "loc": ("query", "search"),
            "msg": f"Search query must be between {SEARCH_MIN_LENGTH} and {SEARCH_MAX_LENGTH} characters",
            "input": search,
        }])

    query = PolicyQuery(
        page=page,
        limit=limit,
        category=category,
        region=region.strip() if region else None,
        search=search_text,
        age_min=age_min,
        age_max=age_max,
    )

    try:
        result = await service.get_policies(query)
    except Exception:
        logger.exception("Get policies error")
        return JSONResponse(
            status_code=500,
            content={"error": "Server Error", "message": "Failed to retrieve policies"},
        )

    return PolicyListResponse(data=result)


@router.get(
    "/{policy_id}",
    response_model=PolicyDetailResponse,
    summary="정책 상세 조회",
    responses={404: {"description": "Policy not found"}}
)
async def get_policy_detail(
    policy_id: str = Path(..., min_length=1),
    service: PolicyService = Depends(get_policy_service),
):
    try:
        policy = await service.get_policy_detail(policy_id)
    except Exception:
        logger.exception("Get policy detail error")
        return JSONResponse(
            status_code=500,
            content={"error": "Server Error", "message": "Failed to retrieve policy details"},
        )

    if policy is None:
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "message": "Policy not found"},
        )

    return PolicyDetailResponse(data=policy)
