"""
청년정책 데이터 변환
온통청년 API 응답 / DB 행을 공통 정책 표현(PolicyData)으로 변환하고,
다시 DB 컬럼 값으로 되돌린다.
"""
import hashlib
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from app.core.clock import ensure_utc
from app.schemas.policy import (
    PolicyData,
    ContactInfo,
    TargetAge,
    OTHER_CATEGORY,
    NATIONWIDE,
)


CATEGORY_CODES = {
    "장학금": "023010",
    "창업지원": "023020",
    "취업지원": "023030",
    "주거지원": "023040",
    "생활복지": "023050",
    "문화": "023060",
    "참여권리": "023070",
}
CODE_CATEGORIES = {code: name for name, code in CATEGORY_CODES.items()}

REGION_CODES = {
    "003002001": "서울",
    "003002002": "부산",
    "003002003": "대구",
    "003002000": NATIONWIDE,
}

# 신청기간 문자열의 날짜 토큰 (2024.01.01 / 20240101)
DATE_TOKEN = re.compile(r"(\d{4}\.?\d{2}\.?\d{2})")
NUMBER_TOKEN = re.compile(r"\d+")

# DB에 JSON으로 저장되는 컬럼
STRUCTURED_COLUMNS = (
    "contact_info",
    "requirements",
    "benefits",
    "documents",
    "region",
    "target_age",
    "target_education",
    "tags",
)


# ========== 코드 매핑 ==========

def map_category_to_code(category: Optional[str]) -> str:
    return CATEGORY_CODES.get(category or "", "")


def map_code_to_category(code: Optional[str]) -> str:
    return CODE_CATEGORIES.get(code or "", OTHER_CATEGORY)


# ========== 필드 파싱 ==========

def parse_date(date_string: Optional[str], position: str = "end") -> Optional[date]:
    """
    "2024.01.01~2024.12.31" 형태의 기간 문자열에서 날짜 추출

    position="start"면 첫 번째, 그 외에는 마지막 날짜 토큰을 사용한다.
    파싱할 수 없으면 None.
    """
    if not date_string:
        return None

    tokens = DATE_TOKEN.findall(date_string)
    if not tokens:
        return None

    token = tokens[0] if position == "start" else tokens[-1]
    try:
        return datetime.strptime(token.replace(".", ""), "%Y%m%d").date()
    except ValueError:
        return None


def parse_age(age_info: Optional[str]) -> Optional[TargetAge]:
    """연령 정보 텍스트 → {min, max}"""
    if not age_info:
        return None

    numbers = NUMBER_TOKEN.findall(age_info)
    if not numbers:
        return None
    if len(numbers) == 1:
        age = int(numbers[0])
        return TargetAge(min=age, max=age)
    return TargetAge(min=int(numbers[0]), max=int(numbers[1]))


def parse_region(region_code: Optional[str]) -> List[str]:
    name = REGION_CODES.get(region_code or "")
    return [name] if name else [NATIONWIDE]


def split_list(text: Optional[str]) -> List[str]:
    """쉼표 구분 문자열 → 공백 제거된 리스트 (빈 항목 제외)"""
    if not text:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]


def parse_requirements(age_info: Optional[str]) -> List[str]:
    return [age_info] if age_info else []


def parse_benefits(content: Optional[str]) -> List[str]:
    return [content] if content else []


def _policy_id(item: Dict[str, Any]) -> str:
    biz_id = (item.get("bizId") or "").strip()
    if biz_id:
        return biz_id
    # ID가 없는 항목은 정책명 기반으로 고정 ID 생성
    seed = f"{item.get('polyBizSjnm') or ''}|{item.get('rqutUrla') or ''}"
    return "local-" + hashlib.sha1(seed.encode("utf-8")).hexdigest()[:16]


# ========== 외부 API → PolicyData ==========

def to_canonical(item: Dict[str, Any], cached_at: Optional[datetime] = None) -> PolicyData:
    """온통청년 정책 목록 항목 1건 변환"""
    period = item.get("rqutPrdCn")
    age_info = item.get("ageInfo")

    return PolicyData(
        id=_policy_id(item),
        title=item.get("polyBizSjnm") or "",
        category=map_code_to_category(item.get("bizTycdSel")),
        description=item.get("polyItcnCn"),
        content=item.get("sporCn"),
        deadline=parse_date(period),
        start_date=parse_date(period, "start"),
        end_date=parse_date(period, "end"),
        application_url=item.get("rqutUrla") or None,
        requirements=parse_requirements(age_info),
        region=parse_region(item.get("polyRlmCd")),
        target_age=parse_age(age_info),
        tags=split_list(item.get("keyword")),
        cached_at=cached_at,
    )


def transform_policies(payload: Optional[Dict[str, Any]], cached_at: Optional[datetime] = None) -> List[PolicyData]:
    """정책 목록 응답 변환"""
    items = (payload or {}).get("youthPolicy") or []
    if isinstance(items, dict):
        items = [items]
    return [to_canonical(item, cached_at) for item in items if isinstance(item, dict)]


def transform_policy_detail(payload: Optional[Dict[str, Any]], cached_at: Optional[datetime] = None) -> Optional[PolicyData]:
    """
    정책 상세 응답 변환

    목록 변환을 1건짜리 리스트에 적용한 뒤 연락처/지원내용/제출서류를 덧붙인다.
    """
    detail = (payload or {}).get("youthPolicyDetail")
    if not isinstance(detail, dict):
        return None

    policy = transform_policies({"youthPolicy": [detail]}, cached_at)[0]
    return policy.model_copy(update={
        "contact_info": ContactInfo(
            department=detail.get("cnsgNmor"),
            phone=detail.get("tintCherCn"),
            email=detail.get("cherCtpcCn"),
        ),
        "benefits": parse_benefits(detail.get("sporCn")),
        "documents": split_list(detail.get("pstnPaprCn")),
    })


# ========== 연령 조건 ==========

def matches_age_range(policy: PolicyData, age_min: Optional[int] = None, age_max: Optional[int] = None) -> bool:
    """
    요청 연령 범위와 정책 대상 연령이 겹치는지 확인

    연령 정보가 없는 정책은 항상 통과한다.
    """
    if age_min is None and age_max is None:
        return True
    if policy.target_age is None:
        return True

    policy_min = policy.target_age.min
    policy_max = policy.target_age.max

    if age_min is not None and age_max is not None:
        return not (policy_max < age_min or policy_min > age_max)
    if age_min is not None:
        return policy_max >= age_min
    return policy_min <= age_max


# ========== PolicyData <-> DB 행 ==========

def to_row(policy: PolicyData) -> Dict[str, Any]:
    """DB 컬럼 값으로 변환 (구조화 필드는 JSON 직렬화 가능한 값으로)"""
    data = policy.model_dump(mode="json", exclude={"application_period"})
    row = {
        "id": policy.id,
        "title": policy.title,
        "category": policy.category,
        "description": policy.description,
        "content": policy.content,
        "deadline": policy.deadline,
        "start_date": policy.start_date,
        "end_date": policy.end_date,
        "application_url": policy.application_url,
        "image_url": policy.image_url,
        "status": policy.status,
    }
    for column in STRUCTURED_COLUMNS:
        row[column] = data[column]
    return row


def from_row(row: Any) -> PolicyData:
    """DB 행(Policy 모델) → PolicyData"""
    return PolicyData(
        id=row.id,
        title=row.title or "",
        category=row.category or OTHER_CATEGORY,
        description=row.description,
        content=row.content,
        deadline=row.deadline,
        start_date=row.start_date,
        end_date=row.end_date,
        application_url=row.application_url,
        contact_info=row.contact_info,
        requirements=row.requirements or [],
        benefits=row.benefits or [],
        documents=row.documents or [],
        region=row.region or [NATIONWIDE],
        target_age=row.target_age,
        target_education=row.target_education,
        tags=row.tags or [],
        image_url=row.image_url,
        status=row.status or "active",
        view_count=row.view_count or 0,
        popularity_score=float(row.popularity_score or 0),
        cached_at=ensure_utc(row.cached_at),
        updated_at=ensure_utc(row.updated_at),
    )
