from fastapi import APIRouter
from app.api.v1 import policies
from app.core.config import settings

api_router = APIRouter()

# 정책 API 라우터 등록
api_router.include_router(policies.router)


@api_router.get("/", summary="API 버전 정보")
async def api_index():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "Youth policy data service (온통청년 정책 API)",
        "endpoints": {
            "policies": "/api/v1/policies"
        }
    }
