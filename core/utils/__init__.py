"""
유틸리티 패키지

타임존 처리, 재시도 등 공통 유틸리티
"""

from core.utils.retry import retry_on_unavailable
from core.utils.timezone import (
    WIB,
    business_date,
    business_tz,
    now_utc,
    parse_ts,
    to_local,
)

__all__ = [
    "WIB",
    "business_date",
    "business_tz",
    "now_utc",
    "parse_ts",
    "to_local",
    "retry_on_unavailable",
]
