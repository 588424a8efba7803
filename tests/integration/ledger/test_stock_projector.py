"""
StockProjector 통합 테스트

Ledger 합계와의 일치, 캐시 무효화, 재고 상태 / 리포트 확인.
"""

import asyncio
from decimal import Decimal

import pytest

from adapters.catalog.sqlite_catalog import SQLiteCatalog
from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.movements import AdminAuthorization, MovementRecord
from core.ledger.projector import StockProjector
from core.ledger.store import LedgerStore
from core.types import MovementType, StockHealth
from tests.catalog_data import GULA, KOPI, OUTLET, SUSU, WAREHOUSE

pytestmark = pytest.mark.integration


def move(item_id: int, quantity: str, location_id: int = WAREHOUSE.id) -> MovementRecord:
    return MovementRecord.create(item_id, location_id, quantity, MovementType.MANUAL_ADJUSTMENT)


class TestCurrentStock:
    """current_stock 테스트"""

    @pytest.mark.asyncio
    async def test_no_history_is_zero(self, projector: StockProjector) -> None:
        assert await projector.current_stock(KOPI.id) == Decimal("0")

    @pytest.mark.asyncio
    async def test_total_and_per_location(self, store: LedgerStore, projector: StockProjector) -> None:
        await store.append([move(KOPI.id, "10"), move(KOPI.id, "-3"), move(KOPI.id, "4", OUTLET.id)])

        assert await projector.current_stock(KOPI.id) == Decimal("11")
        assert await projector.current_stock(KOPI.id, WAREHOUSE.id) == Decimal("7")
        assert await projector.current_stock(KOPI.id, OUTLET.id) == Decimal("4")

    @pytest.mark.asyncio
    async def test_cache_invalidated_after_append(self, store: LedgerStore, projector: StockProjector) -> None:
        """append 직후 조회는 새 이동을 반영"""
        await store.append([move(KOPI.id, "10")])
        assert await projector.current_stock(KOPI.id) == Decimal("10")
        assert await projector.current_stock(KOPI.id, WAREHOUSE.id) == Decimal("10")

        await store.append([move(KOPI.id, "-4")])

        assert await projector.current_stock(KOPI.id) == Decimal("6")
        assert await projector.current_stock(KOPI.id, WAREHOUSE.id) == Decimal("6")

    @pytest.mark.asyncio
    async def test_cache_untouched_for_other_items(self, store: LedgerStore, projector: StockProjector) -> None:
        await store.append([move(KOPI.id, "10"), move(GULA.id, "3")])
        await projector.current_stock(KOPI.id)

        await store.append([move(GULA.id, "1")])

        assert (KOPI.id, None) in projector._cache
        assert await projector.current_stock(GULA.id) == Decimal("4")

    @pytest.mark.asyncio
    async def test_no_caching_inside_transaction(
        self, store: LedgerStore, projector: StockProjector, db: SQLiteAdapter
    ) -> None:
        """롤백된 트랜잭션 안의 조회 결과가 캐시에 남지 않음"""
        await store.append([move(KOPI.id, "10")])

        with pytest.raises(RuntimeError):
            async with db.transaction():
                await store.append([move(KOPI.id, "5")])
                assert await projector.current_stock(KOPI.id) == Decimal("15")
                raise RuntimeError("abort")

        assert await projector.current_stock(KOPI.id) == Decimal("10")

    @pytest.mark.asyncio
    async def test_cache_disabled(self, store: LedgerStore) -> None:
        projector = StockProjector(store, cache_enabled=False)
        await store.append([move(KOPI.id, "2")])

        assert await projector.current_stock(KOPI.id) == Decimal("2")
        assert projector._cache == {}

    @pytest.mark.asyncio
    async def test_negative_stock_allowed(self, store: LedgerStore, projector: StockProjector) -> None:
        await store.append([move(SUSU.id, "-2")])

        assert await projector.current_stock(SUSU.id) == Decimal("-2")

    @pytest.mark.asyncio
    async def test_archive_resets_projection(self, store: LedgerStore, projector: StockProjector) -> None:
        await store.append([move(KOPI.id, "10")])
        assert await projector.current_stock(KOPI.id) == Decimal("10")

        await store.archive_item_history(KOPI.id, AdminAuthorization("admin", "reset"))

        assert await projector.current_stock(KOPI.id) == Decimal("0")

    @pytest.mark.asyncio
    async def test_matches_ledger_sum(self, store: LedgerStore, projector: StockProjector) -> None:
        """Projection은 언제나 Ledger 합계와 같음"""
        quantities = ["5", "-1.5", "2.25", "-0.75", "10"]
        for quantity in quantities:
            await store.append([move(KOPI.id, quantity)])
            expected = sum(
                [m.quantity_change async for m in store.query()],
                Decimal("0"),
            )
            assert await projector.current_stock(KOPI.id) == expected


class TestConcurrentAppends:
    """동시 배치 저장 중 조회 테스트"""

    @pytest.mark.asyncio
    async def test_opposite_batches_leave_stock_unchanged(
        self, store: LedgerStore, projector: StockProjector
    ) -> None:
        await store.append([move(KOPI.id, "20")])

        await asyncio.gather(
            store.append([move(KOPI.id, "5")]),
            store.append([move(KOPI.id, "-5")]),
        )

        assert await projector.current_stock(KOPI.id) == Decimal("20")

    @pytest.mark.asyncio
    async def test_reader_sees_only_whole_batches(
        self, store: LedgerStore, projector: StockProjector
    ) -> None:
        """+6 / -6 배치(두 줄씩)와 동시에 읽어도 중간 상태는 보이지 않음"""
        await store.append([move(KOPI.id, "20")])
        done = asyncio.Event()
        seen: list[Decimal] = []

        async def writers() -> None:
            batches = []
            for _ in range(10):
                batches.append(store.append([move(KOPI.id, "5"), move(KOPI.id, "1")]))
                batches.append(store.append([move(KOPI.id, "-5"), move(KOPI.id, "-1")]))
            try:
                await asyncio.gather(*batches)
            finally:
                done.set()

        async def reader() -> None:
            while not done.is_set():
                seen.append(await projector.current_stock(KOPI.id))
                await asyncio.sleep(0)

        await asyncio.gather(writers(), reader())

        assert seen
        # 완결된 배치만 반영된 값은 20 + 6k
        assert all((value - Decimal("20")) % 6 == 0 for value in seen), seen
        assert await projector.current_stock(KOPI.id) == Decimal("20")
        assert await store.count() == 41


class TestStockHealth:
    """stock_health 테스트"""

    @pytest.mark.asyncio
    async def test_transitions(self, store: LedgerStore, projector: StockProjector) -> None:
        assert await projector.stock_health(KOPI) == StockHealth.HABIS

        await store.append([move(KOPI.id, "10")])
        assert await projector.stock_health(KOPI) == StockHealth.MENIPIS

        await store.append([move(KOPI.id, "1")])
        assert await projector.stock_health(KOPI) == StockHealth.AMAN

    @pytest.mark.asyncio
    async def test_given_stock(self, projector: StockProjector) -> None:
        assert await projector.stock_health(KOPI, Decimal("50")) == StockHealth.AMAN


class TestSummaries:
    """stock_summary / low_stock_items / stock_value 테스트"""

    @pytest.mark.asyncio
    async def test_summary(
        self, store: LedgerStore, projector: StockProjector, catalog: SQLiteCatalog
    ) -> None:
        await store.append(
            [
                move(KOPI.id, "20"),
                move(KOPI.id, "5", OUTLET.id),
                move(GULA.id, "5"),
            ]
        )
        items = await catalog.list_active_items()

        summary = await projector.stock_summary(items)

        assert [(s.item.id, s.quantity, s.health) for s in summary] == [
            (KOPI.id, Decimal("25"), StockHealth.AMAN),
            (GULA.id, Decimal("5"), StockHealth.MENIPIS),
            (SUSU.id, Decimal("0"), StockHealth.HABIS),
        ]

    @pytest.mark.asyncio
    async def test_low_stock_sorted_by_quantity(
        self, store: LedgerStore, projector: StockProjector, catalog: SQLiteCatalog
    ) -> None:
        await store.append([move(KOPI.id, "20"), move(GULA.id, "5"), move(SUSU.id, "2")])
        items = await catalog.list_active_items()

        low = await projector.low_stock_items(items)

        assert [s.item.id for s in low] == [SUSU.id, GULA.id]

    @pytest.mark.asyncio
    async def test_stock_value(
        self, store: LedgerStore, projector: StockProjector, catalog: SQLiteCatalog
    ) -> None:
        await store.append([move(KOPI.id, "2"), move(GULA.id, "4")])
        items = await catalog.list_active_items()

        # 2 × 1000 + 4 × 500
        assert await projector.stock_value(items) == Decimal("4000")
