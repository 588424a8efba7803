"""
헬스 체크 엔드포인트

GET /health - 서버 상태 확인
"""

from fastapi import APIRouter, Depends

from core.errors import StorageUnavailable
from core.utils.timezone import now_utc
from web.dependencies import LedgerServices, get_services
from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(services: LedgerServices = Depends(get_services)) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: status, version, database 정보
    """
    try:
        await services.db.fetchone("SELECT 1")
        database = "ok"
    except StorageUnavailable:
        database = "unavailable"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        version=API_VERSION,
        database=database,
        timestamp=now_utc(),
    )
