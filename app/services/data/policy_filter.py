"""
정책 조회 조건 빌더
(조건식, 바인딩 값) 쌍을 모아 SQLAlchemy 바인드 파라미터 조건으로 렌더링한다.
사용자 입력은 항상 바인드 파라미터로만 전달된다.
"""
from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy import and_, or_, select, func, cast, bindparam
from sqlalchemy.sql.elements import BindParameter, ColumnElement
from sqlalchemy.types import TypeEngine
from sqlalchemy.dialects.postgresql import JSONB

from app.models.policy import Policy
from app.schemas.policy import PolicyQuery

Predicate = Callable[[BindParameter], ColumnElement]

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class PolicyFilter:
    """정책 목록 WHERE 절 빌더"""

    def __init__(self, dialect_name: str = "postgresql"):
        self.dialect_name = dialect_name
        self._conditions: List[Tuple[Predicate, Any, Optional[TypeEngine]]] = []
        self.add(lambda value: Policy.status == value, "active")

    def add(self, predicate: Predicate, value: Any, type_: Optional[TypeEngine] = None) -> "PolicyFilter":
        self._conditions.append((predicate, value, type_))
        return self

    def category(self, category: Optional[str]) -> "PolicyFilter":
        if category:
            self.add(lambda value: Policy.category == value, category)
        return self

    def search(self, text: Optional[str]) -> "PolicyFilter":
        """제목 또는 소개에 검색어 포함 (대소문자 무시, %/_ 는 문자 그대로)"""
        if text:
            self.add(
                lambda value: or_(
                    Policy.title.ilike(value, escape=LIKE_ESCAPE),
                    Policy.description.ilike(value, escape=LIKE_ESCAPE),
                ),
                f"%{escape_like(text)}%",
            )
        return self

    def region(self, region: Optional[str]) -> "PolicyFilter":
        """region 배열에 해당 지역이 포함된 정책"""
        if not region:
            return self

        if self.dialect_name == "postgresql":
            self.add(lambda value: cast(Policy.region, JSONB).contains(value), [region], JSONB())
        else:
            def contains_region(value):
                items = func.json_each(Policy.region).table_valued("value")
                return select(items.c.value).where(items.c.value == value).exists()

            self.add(contains_region, region)
        return self

    def age_range(self, age_min: Optional[int], age_max: Optional[int]) -> "PolicyFilter":
        """
        대상 연령 범위가 요청 범위와 겹치는 정책

        상한/하한 중 하나만 주어지면 해당 쪽만 비교한다.
        """
        policy_min = Policy.target_age["min"].as_integer()
        policy_max = Policy.target_age["max"].as_integer()

        if age_min is not None and age_max is not None:
            self.add(lambda value: policy_min <= value, age_max)
            self.add(lambda value: policy_max >= value, age_min)
        elif age_min is not None:
            self.add(lambda value: policy_max >= value, age_min)
        elif age_max is not None:
            self.add(lambda value: policy_min <= value, age_max)
        return self

    def render(self) -> ColumnElement:
        clauses = []
        for index, (predicate, value, type_) in enumerate(self._conditions):
            param = bindparam(f"filter_{index}", value, type_=type_, unique=True)
            clauses.append(predicate(param))
        return and_(*clauses)

    @classmethod
    def from_query(cls, query: PolicyQuery, dialect_name: str, include_age: bool = True) -> "PolicyFilter":
        builder = (
            cls(dialect_name)
            .category(query.category)
            .search(query.search)
            .region(query.region)
        )
        if include_age:
            builder.age_range(query.age_min, query.age_max)
        return builder
