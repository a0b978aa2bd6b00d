from typing import Any, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, computed_field
from datetime import date, datetime


OTHER_CATEGORY = "기타"
NATIONWIDE = "전국"

CategoryName = Literal["장학금", "창업지원", "취업지원", "주거지원", "생활복지", "문화", "참여권리"]


# ========== 정책 (캐시/외부 API 공통 표현) ==========

class ContactInfo(BaseModel):
    """담당 기관 연락처"""
    department: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class TargetAge(BaseModel):
    """대상 연령 범위"""
    min: int
    max: int


class PolicyData(BaseModel):
    """청년정책 공통 표현"""
    id: str
    title: str = ""
    category: str = OTHER_CATEGORY
    description: Optional[str] = None
    content: Optional[str] = None
    deadline: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    application_url: Optional[str] = None
    contact_info: Optional[ContactInfo] = None
    requirements: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    documents: List[str] = Field(default_factory=list)
    region: List[str] = Field(default_factory=lambda: [NATIONWIDE])
    target_age: Optional[TargetAge] = None
    target_education: Optional[Any] = None
    tags: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    status: Literal["active", "inactive"] = "active"
    view_count: int = 0
    popularity_score: float = 0.0
    cached_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def application_period(self) -> str:
        """신청 기간 표시용 문자열"""
        start = self.start_date.isoformat() if self.start_date else ""
        end = self.end_date.isoformat() if self.end_date else ""
        if start and end:
            return f"{start} ~ {end}"
        if start:
            return f"{start} ~"
        if end:
            return f"~ {end}"
        return "-"


# ========== 조회 조건 / 결과 ==========

class PolicyQuery(BaseModel):
    """정책 목록 조회 조건"""
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1)
    category: Optional[str] = None
    region: Optional[str] = None
    search: Optional[str] = None
    age_min: Optional[int] = None
    age_max: Optional[int] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    has_next: bool = Field(..., alias="hasNext")


class PolicyListResult(BaseModel):
    """정책 목록 + 페이지 정보"""
    policies: List[PolicyData] = Field(default_factory=list)
    pagination: Pagination

    @classmethod
    def empty(cls, page: int, limit: int) -> "PolicyListResult":
        return cls(
            policies=[],
            pagination=Pagination(page=page, limit=limit, total=0, has_next=False),
        )


# ========== 응답 스키마 ==========

class PolicyListResponse(BaseModel):
    success: bool = True
    message: str = "Policies retrieved successfully"
    data: PolicyListResult


class PolicyDetailResponse(BaseModel):
    success: bool = True
    message: str = "Policy details retrieved successfully"
    data: Optional[PolicyData] = None
