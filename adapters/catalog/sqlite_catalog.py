"""
SQLite 카탈로그

외부 카탈로그가 동기화해 둔 items / locations 테이블을 읽음.
ICatalogReader Protocol 구현.

save_item / save_location은 카탈로그 동기화와 초기 데이터 적재 전용.
"""

import logging
from decimal import Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.catalog import Item, Location

logger = logging.getLogger(__name__)


ITEM_COLUMNS = (
    "id, name, sku, category_id, unit, cost_price, selling_price, "
    "min_stock, default_location_id, is_active"
)


def _row_to_item(row: tuple[Any, ...]) -> Item:
    return Item(
        id=row[0],
        name=row[1],
        sku=row[2],
        category_id=row[3],
        unit=row[4],
        cost_price=Decimal(row[5]),
        selling_price=Decimal(row[6]) if row[6] is not None else None,
        min_stock=Decimal(row[7]),
        default_location_id=row[8],
        is_active=bool(row[9]),
    )


def _row_to_location(row: tuple[Any, ...]) -> Location:
    return Location(
        id=row[0],
        name=row[1],
        type=row[2],
        is_active=bool(row[3]),
    )


def _placeholders(values: list[int]) -> str:
    return ", ".join("?" for _ in values)


class SQLiteCatalog:
    """SQLite 기반 카탈로그 조회

    Args:
        adapter: 연결된 SQLiteAdapter
    """

    def __init__(self, adapter: SQLiteAdapter):
        self.adapter = adapter

    async def get_item(self, item_id: int) -> Item | None:
        row = await self.adapter.fetchone(
            f"SELECT {ITEM_COLUMNS} FROM items WHERE id = ?",
            (item_id,),
        )
        return _row_to_item(row) if row else None

    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        if not item_ids:
            return {}
        ids = sorted(set(item_ids))
        rows = await self.adapter.fetchall(
            f"SELECT {ITEM_COLUMNS} FROM items WHERE id IN ({_placeholders(ids)})",
            tuple(ids),
        )
        return {row[0]: _row_to_item(row) for row in rows}

    async def list_active_items(
        self,
        category_ids: list[int] | None = None,
        item_ids: list[int] | None = None,
    ) -> list[Item]:
        sql = f"SELECT {ITEM_COLUMNS} FROM items WHERE is_active = 1"
        params: list[Any] = []

        if category_ids is not None:
            if not category_ids:
                return []
            sql += f" AND category_id IN ({_placeholders(category_ids)})"
            params.extend(category_ids)

        if item_ids is not None:
            if not item_ids:
                return []
            sql += f" AND id IN ({_placeholders(item_ids)})"
            params.extend(item_ids)

        sql += " ORDER BY id"
        rows = await self.adapter.fetchall(sql, tuple(params))
        return [_row_to_item(row) for row in rows]

    async def get_location(self, location_id: int) -> Location | None:
        row = await self.adapter.fetchone(
            "SELECT id, name, type, is_active FROM locations WHERE id = ?",
            (location_id,),
        )
        return _row_to_location(row) if row else None

    async def list_locations(self, active_only: bool = True) -> list[Location]:
        sql = "SELECT id, name, type, is_active FROM locations"
        if active_only:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY id"
        rows = await self.adapter.fetchall(sql)
        return [_row_to_location(row) for row in rows]

    # -------------------------------------------------------------------------
    # 동기화 / 초기 적재
    # -------------------------------------------------------------------------

    async def save_location(self, location: Location) -> None:
        """위치 저장 (있으면 갱신)"""
        async with self.adapter.transaction():
            await self.adapter.execute(
                """
                INSERT INTO locations (id, name, type, is_active)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    type = excluded.type,
                    is_active = excluded.is_active
                """,
                (location.id, location.name, location.type, int(location.is_active)),
            )

    async def save_item(self, item: Item) -> None:
        """품목 저장 (있으면 갱신)"""
        async with self.adapter.transaction():
            await self.adapter.execute(
                """
                INSERT INTO items (
                    id, name, sku, category_id, unit, cost_price, selling_price,
                    min_stock, default_location_id, is_active
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    sku = excluded.sku,
                    category_id = excluded.category_id,
                    unit = excluded.unit,
                    cost_price = excluded.cost_price,
                    selling_price = excluded.selling_price,
                    min_stock = excluded.min_stock,
                    default_location_id = excluded.default_location_id,
                    is_active = excluded.is_active
                """,
                (
                    item.id,
                    item.name,
                    item.sku,
                    item.category_id,
                    item.unit,
                    str(item.cost_price),
                    str(item.selling_price) if item.selling_price is not None else None,
                    str(item.min_stock),
                    item.default_location_id,
                    int(item.is_active),
                ),
            )

        logger.debug("품목 저장", extra={"item_id": item.id, "sku": item.sku})
