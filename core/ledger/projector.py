"""
재고 Projector

Ledger를 접어서(fold) 현재 재고와 재고 상태를 계산하는 읽기 전용 파생 값.
재고 수량은 어디에도 독립적으로 저장하지 않음.

캐시는 Ledger 커밋 후 리스너로 해당 키만 무효화되는 파생 값이며,
진실의 원천은 항상 stock_movements.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from core.domain.catalog import Item
from core.types import StockHealth

if TYPE_CHECKING:
    from core.ledger.store import LedgerStore, StockKey

logger = logging.getLogger(__name__)


def classify_health(stock: Decimal, min_stock: Decimal) -> StockHealth:
    """재고 수량 → 재고 상태

    - stock <= 0: HABIS
    - 0 < stock <= min_stock: MENIPIS (경계 포함)
    - 그 외: AMAN
    """
    if stock <= 0:
        return StockHealth.HABIS
    if stock <= min_stock:
        return StockHealth.MENIPIS
    return StockHealth.AMAN


@dataclass(frozen=True)
class StockStatus:
    """품목별 재고 현황 (리포트용)"""

    item: Item
    quantity: Decimal
    health: StockHealth

    @property
    def value(self) -> Decimal:
        """재고 금액 (수량 × 원가)"""
        return self.quantity * self.item.cost_price


class StockProjector:
    """재고 Projector

    Args:
        store: LedgerStore
        cache_enabled: 캐시 사용 여부 (다중 프로세스 쓰기 환경에서는 False)

    사용 예시:
    ```python
    projector = StockProjector(store)
    stock = await projector.current_stock(item_id=1)
    health = await projector.stock_health(item)
    ```
    """

    def __init__(self, store: LedgerStore, cache_enabled: bool = True):
        self.store = store
        self.cache_enabled = cache_enabled

        # (item_id, location_id) → 수량, (item_id, None) → 전체 위치 합계
        self._cache: dict[tuple[int, int | None], Decimal] = {}
        # 품목별 세대 번호 (무효화 후 이전 조회 결과가 캐시에 들어가는 것 방지)
        self._generations: dict[int, int] = {}

        store.add_listener(self.invalidate)

    def invalidate(self, keys: set[StockKey]) -> None:
        """영향받은 키 무효화 (Ledger 커밋 후 호출)"""
        for item_id, location_id in keys:
            self._cache.pop((item_id, location_id), None)
            self._cache.pop((item_id, None), None)
            self._generations[item_id] = self._generations.get(item_id, 0) + 1

        logger.debug("재고 캐시 무효화", extra={"keys": len(keys)})

    def invalidate_all(self) -> None:
        """전체 캐시 초기화"""
        for item_id, _ in self._cache:
            self._generations[item_id] = self._generations.get(item_id, 0) + 1
        self._cache.clear()

    async def current_stock(self, item_id: int, location_id: int | None = None) -> Decimal:
        """현재 재고 (quantity_change 합계)

        Args:
            item_id: 품목 ID
            location_id: 위치 ID (None이면 전체 위치 합계)

        Returns:
            현재 재고 (음수 가능)
        """
        key = (item_id, location_id)
        if self.cache_enabled:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        generation = self._generations.get(item_id, 0)
        stock = await self.store.sum_quantity(item_id, location_id)

        # 트랜잭션 내부 조회는 미커밋 행을 포함할 수 있으므로 캐시하지 않음
        if (
            self.cache_enabled
            and not self.store.db.in_transaction
            and self._generations.get(item_id, 0) == generation
        ):
            self._cache[key] = stock

        if stock < 0:
            logger.warning(
                "음수 재고",
                extra={"item_id": item_id, "location_id": location_id, "stock": str(stock)},
            )

        return stock

    async def stock_health(self, item: Item, stock: Decimal | None = None) -> StockHealth:
        """재고 상태 (habis / menipis / aman)

        Args:
            item: 품목 (min_stock 사용)
            stock: 이미 조회한 재고 (None이면 전체 위치 합계 조회)
        """
        if stock is None:
            stock = await self.current_stock(item.id)
        return classify_health(stock, item.min_stock)

    async def stock_levels(
        self,
        item_ids: list[int] | None = None,
        location_ids: list[int] | None = None,
    ) -> dict[StockKey, Decimal]:
        """(item_id, location_id)별 재고 (단일 조회)"""
        return await self.store.stock_levels(item_ids, location_ids)

    async def _totals(self, items: list[Item]) -> dict[int, Decimal]:
        levels = await self.store.stock_levels([item.id for item in items])
        totals = {item.id: Decimal("0") for item in items}
        for (item_id, _), quantity in levels.items():
            totals[item_id] += quantity
        return totals

    async def stock_summary(self, items: list[Item]) -> list[StockStatus]:
        """품목별 재고 / 상태 / 금액 (id 순)"""
        totals = await self._totals(items)
        return [
            StockStatus(
                item=item,
                quantity=totals[item.id],
                health=classify_health(totals[item.id], item.min_stock),
            )
            for item in sorted(items, key=lambda i: i.id)
        ]

    async def low_stock_items(self, items: list[Item]) -> list[StockStatus]:
        """재고 부족 품목 (stock <= min_stock), 수량 오름차순"""
        summary = await self.stock_summary(items)
        low = [status for status in summary if status.health != StockHealth.AMAN]
        return sorted(low, key=lambda s: (s.quantity, s.item.id))

    async def stock_value(self, items: list[Item]) -> Decimal:
        """전체 재고 금액 (Σ 재고 × 원가)"""
        summary = await self.stock_summary(items)
        return sum((status.value for status in summary), Decimal("0"))
