"""
재고 조회 라우트

GET /api/stock/low - 부족 품목
GET /api/stock/summary - 재고 요약
GET /api/stock/{item_id} - 현재 재고
GET /api/stock/{item_id}/health - 재고 상태
"""

from fastapi import APIRouter, Depends, Query

from web.dependencies import LedgerServices, get_services
from web.models.responses import (
    StockHealthResponse,
    StockResponse,
    StockStatusResponse,
    StockSummaryResponse,
)
from web.services.stock_service import StockService

router = APIRouter(prefix="/api/stock", tags=["Stock"])


@router.get("/low", response_model=list[StockStatusResponse])
async def get_low_stock(
    category_id: int | None = Query(default=None),
    services: LedgerServices = Depends(get_services),
):
    """재고 부족 품목 (stock <= min_stock)"""
    return await StockService(services).get_low_stock(category_id)


@router.get("/summary", response_model=StockSummaryResponse)
async def get_stock_summary(
    category_id: int | None = Query(default=None),
    services: LedgerServices = Depends(get_services),
):
    """품목별 재고 / 상태 / 금액 요약"""
    return await StockService(services).get_summary(category_id)


@router.get("/{item_id}", response_model=StockResponse)
async def get_stock(
    item_id: int,
    location_id: int | None = Query(default=None),
    services: LedgerServices = Depends(get_services),
):
    """현재 재고 (위치 미지정 시 전체 합계)"""
    return await StockService(services).get_stock(item_id, location_id)


@router.get("/{item_id}/health", response_model=StockHealthResponse)
async def get_stock_health(
    item_id: int,
    services: LedgerServices = Depends(get_services),
):
    """재고 상태 (habis / menipis / aman)"""
    return await StockService(services).get_health(item_id)
