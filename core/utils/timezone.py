"""
타임존 유틸리티

내부 저장: UTC | 영업일/문서 번호: 현지 시간(WIB) 원칙 준수를 위한 헬퍼 함수
"""

from datetime import date, datetime, timedelta, timezone

from core.constants import Defaults

# WIB 타임존 (UTC+7)
WIB = timezone(timedelta(hours=Defaults.TIMEZONE_OFFSET_HOURS))


def business_tz(offset_hours: int | None = None) -> timezone:
    """영업 기준 타임존 반환

    Args:
        offset_hours: UTC 오프셋 (None이면 WIB)
    """
    if offset_hours is None:
        return WIB
    return timezone(timedelta(hours=offset_hours))


def to_local(dt: datetime, offset_hours: int | None = None) -> datetime:
    """UTC datetime을 영업 타임존으로 변환

    Args:
        dt: datetime 객체 (UTC 권장, naive면 UTC로 간주)
        offset_hours: UTC 오프셋 (None이면 WIB)

    Returns:
        영업 타임존의 datetime

    Example:
        >>> utc_dt = datetime(2026, 2, 20, 18, 0, 0, tzinfo=timezone.utc)
        >>> to_local(utc_dt).day
        21  # 다음날 01:00
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(business_tz(offset_hours))


def business_date(dt: datetime | None = None, offset_hours: int | None = None) -> date:
    """영업일 (현지 날짜) 반환

    Args:
        dt: 기준 시각 (None이면 현재)
        offset_hours: UTC 오프셋 (None이면 WIB)
    """
    if dt is None:
        dt = now_utc()
    return to_local(dt, offset_hours).date()


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.
    """
    return datetime.now(timezone.utc)


def parse_ts(value: str | datetime) -> datetime:
    """DB에 저장된 ISO 8601 문자열을 UTC datetime으로 변환"""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
