from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """현재 시각 (UTC, timezone-aware)"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite는 timezone 정보 없이 돌려주므로 UTC로 간주
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
