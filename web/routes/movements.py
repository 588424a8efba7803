"""
재고 이동 라우트

GET /api/movements - 이동 목록 (필터 + 페이지)
POST /api/movements/batches - 이동 배치 저장
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from core.types import MovementType
from web.dependencies import LedgerServices, get_principal, get_services
from web.models.requests import MovementBatchRequest
from web.models.responses import MovementBatchResponse, MovementPageResponse
from web.services.movement_service import MovementService, build_filter

router = APIRouter(prefix="/api/movements", tags=["Movements"])


@router.get("", response_model=MovementPageResponse)
async def list_movements(
    item_id: int | None = Query(default=None),
    location_id: int | None = Query(default=None),
    movement_type: list[MovementType] | None = Query(default=None),
    reference_id: str | None = Query(default=None),
    document_number: str | None = Query(default=None),
    created_from: datetime | None = Query(default=None),
    created_to: datetime | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    services: LedgerServices = Depends(get_services),
):
    """이동 목록 조회 (시간 오름차순)"""
    movement_filter = build_filter(
        item_id=item_id,
        location_id=location_id,
        movement_types=movement_type,
        reference_id=reference_id,
        document_number=document_number,
        created_from=created_from,
        created_to=created_to,
    )
    return await MovementService(services).list_movements(movement_filter, limit, offset)


@router.post("/batches", response_model=MovementBatchResponse, status_code=201)
async def post_batch(
    request: MovementBatchRequest,
    principal: str = Depends(get_principal),
    services: LedgerServices = Depends(get_services),
):
    """이동 배치 저장 (전부 또는 전무)"""
    return await MovementService(services).post_batch(request, principal)
