from sqlalchemy import Column, String, Integer, Float, Date, DateTime, Text, func
from app.core.database import Base, JSON


class Policy(Base):
    __tablename__ = "policies"

    id = Column(String(64), primary_key=True)  # 온통청년 정책 ID (bizId)
    title = Column(String(500), nullable=False)
    category = Column(String(50), index=True)  # 장학금, 창업지원 ... 또는 기타
    description = Column(Text)  # 정책 소개
    content = Column(Text)  # 지원 내용
    deadline = Column(Date)
    start_date = Column(Date)
    end_date = Column(Date)
    application_url = Column(String(1000))
    contact_info = Column(JSON)  # {"department", "phone", "email"}
    requirements = Column(JSON)  # ["만 19세~34세", ...]
    benefits = Column(JSON)
    documents = Column(JSON)
    region = Column(JSON)  # ["서울"] / ["전국"]
    target_age = Column(JSON)  # {"min": 19, "max": 34}
    target_education = Column(JSON)
    tags = Column(JSON)
    image_url = Column(String(1000))
    status = Column(String(20), nullable=False, default="active", server_default="active", index=True)
    view_count = Column(Integer, nullable=False, default=0, server_default="0")
    popularity_score = Column(Float, nullable=False, default=0, server_default="0")
    cached_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
