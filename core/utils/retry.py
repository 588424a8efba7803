"""
재시도 유틸리티

StorageUnavailable(일시적 저장소 장애)에 대한 호출자 측 재시도.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from core.errors import StorageUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_on_unavailable(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 0.2,
) -> T:
    """StorageUnavailable 발생 시 선형 backoff로 재시도

    배치 append는 원자적이므로 실패한 시도는 아무것도 남기지 않음.
    따라서 동일 배치를 그대로 다시 호출해도 안전함.

    Args:
        operation: 인자 없는 코루틴 팩토리 (매 시도마다 새로 호출)
        max_retries: 최대 시도 횟수
        base_delay: 기본 대기 시간 (초), 시도마다 배수 증가

    Returns:
        operation 결과

    Raises:
        StorageUnavailable: 모든 재시도 실패
    """
    if max_retries < 1:
        raise ValueError("max_retries는 1 이상이어야 합니다")

    for attempt in range(max_retries):
        try:
            return await operation()
        except StorageUnavailable as e:
            logger.warning(
                "저장소 일시 장애, 재시도",
                extra={"attempt": attempt + 1, "error": str(e)},
            )
            if attempt < max_retries - 1:
                await asyncio.sleep(base_delay * (attempt + 1))
                continue
            raise

    # 루프는 return 또는 raise로 종료됨
    raise StorageUnavailable("All retries failed")
