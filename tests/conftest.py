"""
공용 테스트 픽스처
"""
from datetime import datetime, timezone

import pytest

from app.core.database import Base, build_engine, build_session_factory
from app.models import Policy  # noqa: F401  # Base에 모델 등록
from app.schemas.policy import PolicyData, ContactInfo, TargetAge
from app.services.data.policy_repository import PolicyRepository


class FixedClock:
    """테스트용 시계 (now 값을 직접 조정)"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'policies.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def repository(session_factory, clock):
    return PolicyRepository(session_factory, clock=clock)


def make_policy(policy_id: str, **overrides) -> PolicyData:
    data = {
        "id": policy_id,
        "title": f"청년 정책 {policy_id}",
        "category": "취업지원",
        "description": "청년 취업을 지원합니다",
        "content": "월 50만원 지원",
        "application_url": f"https://example.go.kr/{policy_id}",
        "contact_info": ContactInfo(department="고용노동부", phone="1350", email=None),
        "requirements": ["만 19세~34세"],
        "benefits": ["월 50만원"],
        "documents": ["신분증", "주민등록등본"],
        "region": ["서울"],
        "target_age": TargetAge(min=19, max=34),
        "target_education": {"level": "대졸", "notes": ["졸업예정자 포함"]},
        "tags": ["취업", "구직"],
    }
    data.update(overrides)
    return PolicyData(**data)


@pytest.fixture
def policy_factory():
    return make_policy
