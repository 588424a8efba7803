"""
재고 조회 서비스

현재 재고, 재고 상태, 부족 품목, 재고 요약
"""

from decimal import Decimal

from core.errors import ItemNotFound
from core.ledger.projector import StockStatus
from core.types import StockHealth
from web.dependencies import LedgerServices
from web.models.responses import (
    StockHealthResponse,
    StockResponse,
    StockStatusResponse,
    StockSummaryResponse,
)


def status_to_response(status: StockStatus) -> StockStatusResponse:
    return StockStatusResponse(
        item_id=status.item.id,
        name=status.item.name,
        sku=status.item.sku,
        unit=status.item.unit,
        quantity=str(status.quantity),
        min_stock=str(status.item.min_stock),
        health=status.health.value,
        value=str(status.value),
    )


class StockService:
    """재고 조회 서비스

    Args:
        services: 앱 공유 서비스
    """

    def __init__(self, services: LedgerServices):
        self.services = services

    async def get_stock(self, item_id: int, location_id: int | None = None) -> StockResponse:
        """현재 재고"""
        quantity = await self.services.projector.current_stock(item_id, location_id)
        return StockResponse(item_id=item_id, location_id=location_id, quantity=str(quantity))

    async def get_health(self, item_id: int) -> StockHealthResponse:
        """재고 상태

        Raises:
            ItemNotFound: 카탈로그에 없는 품목
        """
        item = await self.services.catalog.get_item(item_id)
        if item is None:
            raise ItemNotFound(item_id)

        quantity = await self.services.projector.current_stock(item_id)
        health = await self.services.projector.stock_health(item, quantity)
        return StockHealthResponse(
            item_id=item_id,
            quantity=str(quantity),
            min_stock=str(item.min_stock),
            health=health.value,
        )

    async def get_low_stock(self, category_id: int | None = None) -> list[StockStatusResponse]:
        """부족 품목 (stock <= min_stock)"""
        items = await self.services.catalog.list_active_items(
            category_ids=[category_id] if category_id is not None else None,
        )
        low = await self.services.projector.low_stock_items(items)
        return [status_to_response(status) for status in low]

    async def get_summary(self, category_id: int | None = None) -> StockSummaryResponse:
        """품목별 재고 요약 + 전체 재고 금액"""
        items = await self.services.catalog.list_active_items(
            category_ids=[category_id] if category_id is not None else None,
        )
        summary = await self.services.projector.stock_summary(items)
        total_value = sum((status.value for status in summary), Decimal("0"))

        return StockSummaryResponse(
            items=[status_to_response(status) for status in summary],
            total_value=str(total_value),
            low_stock_count=sum(1 for s in summary if s.health != StockHealth.AMAN),
        )
