import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.clock import utcnow
from app.core.database import engine, AsyncSessionLocal
from app.db.init_db import init_db
from app.api.v1.api import api_router
from app.services.data.policy_repository import PolicyRepository
from app.services.data.youth_policy_client import YouthPolicyClient
from app.services.policy_service import PolicyService

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def build_policy_service() -> PolicyService:
    """설정값으로 PolicyService 조립"""
    return PolicyService(
        repository=PolicyRepository(AsyncSessionLocal),
        client=YouthPolicyClient(),
        clock=utcnow,
        cache_ttl=timedelta(hours=settings.CACHE_TTL_HOURS),
        sync_page_size=settings.SYNC_PAGE_SIZE,
        sync_delay=settings.SYNC_DELAY_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 서버 시작 시 테이블 자동 생성 (없으면 만들고, 있으면 무시)
    await init_db()
    app.state.policy_service = build_policy_service()
    logger.info(f"{settings.APP_NAME} 시작")

    yield

    service: PolicyService = app.state.policy_service
    await service.wait_for_background_tasks()
    await service.client.close()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """요청 파라미터 검증 실패 → 400"""
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation Error",
            "message": "Invalid query parameters",
            "details": jsonable_encoder(exc.errors()),
        },
    )


# API 라우터 등록
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """헬스체크 엔드포인트"""
    return {
        "status": "healthy",
        "service": "yuno-policy-api",
        "timestamp": utcnow().isoformat()
    }
