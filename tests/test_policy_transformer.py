"""
정책 데이터 변환 테스트
"""
from datetime import date, datetime, timezone

from app.models.policy import Policy
from app.schemas.policy import PolicyData, TargetAge
from app.services.data.policy_transformer import (
    parse_date,
    parse_age,
    parse_region,
    split_list,
    map_category_to_code,
    map_code_to_category,
    to_canonical,
    transform_policies,
    transform_policy_detail,
    matches_age_range,
    to_row,
    from_row,
)


def test_parse_date_range():
    period = "2024.01.01~2024.12.31"
    assert parse_date(period, "start") == date(2024, 1, 1)
    assert parse_date(period, "end") == date(2024, 12, 31)
    assert parse_date(period) == date(2024, 12, 31)


def test_parse_date_without_dots():
    assert parse_date("20240301 ~ 20240415", "start") == date(2024, 3, 1)
    assert parse_date("20240301 ~ 20240415", "end") == date(2024, 4, 15)


def test_parse_date_without_digits():
    assert parse_date("상시 모집", "start") is None
    assert parse_date("상시 모집", "end") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_parse_date_invalid_calendar_value():
    assert parse_date("2024.13.45") is None


def test_parse_age():
    assert parse_age("19~34세") == TargetAge(min=19, max=34)
    assert parse_age("만 20세") == TargetAge(min=20, max=20)
    assert parse_age("") is None
    assert parse_age("제한없음") is None


def test_region_and_category_lookup():
    assert parse_region("003002001") == ["서울"]
    assert parse_region("999999999") == ["전국"]
    assert parse_region(None) == ["전국"]

    assert map_category_to_code("주거지원") == "023040"
    assert map_category_to_code("없는분류") == ""
    assert map_code_to_category("023010") == "장학금"
    assert map_code_to_category("000000") == "기타"


def test_split_list_drops_empty_entries():
    assert split_list(" 취업, 창업 ,,  ") == ["취업", "창업"]
    assert split_list(None) == []


def test_to_canonical_maps_upstream_fields():
    cached_at = datetime(2024, 6, 1, tzinfo=timezone.utc)
    policy = to_canonical(
        {
            "bizId": "R2024010112345",
            "polyBizSjnm": "청년 월세 지원",
            "bizTycdSel": "023040",
            "polyItcnCn": "청년 월세를 지원합니다",
            "sporCn": "월 20만원",
            "rqutPrdCn": "2024.01.01~2024.12.31",
            "rqutUrla": "https://example.go.kr/apply",
            "ageInfo": "만 19세 ~ 34세",
            "polyRlmCd": "003002002",
            "keyword": "주거,월세",
        },
        cached_at,
    )

    assert policy.id == "R2024010112345"
    assert policy.title == "청년 월세 지원"
    assert policy.category == "주거지원"
    assert policy.start_date == date(2024, 1, 1)
    assert policy.end_date == date(2024, 12, 31)
    assert policy.deadline == date(2024, 12, 31)
    assert policy.requirements == ["만 19세 ~ 34세"]
    assert policy.region == ["부산"]
    assert policy.target_age == TargetAge(min=19, max=34)
    assert policy.tags == ["주거", "월세"]
    assert policy.status == "active"
    assert policy.cached_at == cached_at
    assert policy.application_period == "2024-01-01 ~ 2024-12-31"


def test_to_canonical_degrades_on_missing_fields():
    policy = to_canonical({"polyBizSjnm": "이름만 있는 정책"})

    assert policy.id.startswith("local-")
    assert policy.id == to_canonical({"polyBizSjnm": "이름만 있는 정책"}).id
    assert policy.category == "기타"
    assert policy.deadline is None
    assert policy.target_age is None
    assert policy.region == ["전국"]
    assert policy.tags == []
    assert policy.application_period == "-"


def test_transform_policies_handles_missing_list():
    assert transform_policies({}) == []
    assert transform_policies(None) == []
    assert len(transform_policies({"youthPolicy": {"bizId": "A"}})) == 1


def test_transform_policy_detail_merges_extra_fields():
    policy = transform_policy_detail({
        "youthPolicyDetail": {
            "bizId": "R1",
            "polyBizSjnm": "청년 창업 지원",
            "bizTycdSel": "023020",
            "sporCn": "사업화 자금 지원",
            "cnsgNmor": "중소벤처기업부",
            "tintCherCn": "02-123-4567",
            "cherCtpcCn": "help@example.go.kr",
            "pstnPaprCn": "사업계획서, 신분증",
        }
    })

    assert policy.id == "R1"
    assert policy.category == "창업지원"
    assert policy.contact_info.department == "중소벤처기업부"
    assert policy.contact_info.phone == "02-123-4567"
    assert policy.contact_info.email == "help@example.go.kr"
    assert policy.benefits == ["사업화 자금 지원"]
    assert policy.documents == ["사업계획서", "신분증"]


def test_transform_policy_detail_without_detail():
    assert transform_policy_detail({"youthPolicyDetail": None}) is None


def test_matches_age_range_overlap_policy():
    policy = PolicyData(id="A", target_age=TargetAge(min=19, max=34))

    assert matches_age_range(policy, 30, 40)
    assert matches_age_range(policy, 18, 19)
    assert not matches_age_range(policy, 35, 40)
    assert not matches_age_range(policy, 18, 18)
    assert matches_age_range(policy, age_min=34)
    assert not matches_age_range(policy, age_min=35)
    assert matches_age_range(policy, age_max=19)
    assert not matches_age_range(policy, age_max=18)
    assert matches_age_range(PolicyData(id="B"), 40, 50)


def test_row_round_trip_keeps_structured_fields(policy_factory):
    policy = policy_factory("P1", deadline=date(2024, 12, 31), start_date=date(2024, 1, 1))
    row = to_row(policy)

    assert row["contact_info"] == {"department": "고용노동부", "phone": "1350", "email": None}
    assert row["target_age"] == {"min": 19, "max": 34}
    assert row["deadline"] == date(2024, 12, 31)

    restored = from_row(Policy(**row, view_count=0, popularity_score=0))
    assert restored.model_dump(exclude={"cached_at", "updated_at"}) == \
        policy.model_dump(exclude={"cached_at", "updated_at"})
