"""
리포트 라우트

GET /api/reports/classified - 분류된 이동 (내보내기용)
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from core.types import MovementType
from web.dependencies import LedgerServices, get_services
from web.models.responses import ClassifiedReportResponse
from web.services.movement_service import build_filter
from web.services.report_service import ReportService

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/classified", response_model=ClassifiedReportResponse)
async def classified_report(
    item_id: int | None = Query(default=None),
    location_id: int | None = Query(default=None),
    movement_type: list[MovementType] | None = Query(default=None),
    created_from: datetime | None = Query(default=None),
    created_to: datetime | None = Query(default=None),
    services: LedgerServices = Depends(get_services),
):
    """이동 분류 리포트 (수익/비용 합계 포함)"""
    movement_filter = build_filter(
        item_id=item_id,
        location_id=location_id,
        movement_types=movement_type,
        created_from=created_from,
        created_to=created_to,
    )
    return await ReportService(services).classified(movement_filter)
