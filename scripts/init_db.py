"""
DB 스키마 초기화

사용법:
    python -m scripts.init_db
    python -m scripts.init_db --db data/stockledger.db --seed
"""

import argparse
import asyncio
import logging
from decimal import Decimal
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.catalog.sqlite_catalog import SQLiteCatalog
from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path, init_schema
from core.domain.catalog import Item, Location
from core.logging import setup_logging

logger = logging.getLogger(__name__)


EXPECTED_TABLES = (
    "items",
    "locations",
    "stock_movements",
    "stock_movements_archive",
    "opname_sessions",
    "opname_lines",
    "document_sequence",
)

# 개발용 샘플 카탈로그
SAMPLE_LOCATIONS = [
    Location(id=1, name="Gudang Utama", type="warehouse"),
]

SAMPLE_ITEMS = [
    Item(
        id=1,
        name="Biji Kopi Arabica",
        sku="BK-ARA-001",
        category_id=1,
        unit="kg",
        cost_price=Decimal("120000"),
        selling_price=Decimal("150000"),
        min_stock=Decimal("10"),
        default_location_id=1,
    ),
    Item(
        id=2,
        name="Gula Aren",
        sku="GA-001",
        category_id=1,
        unit="kg",
        cost_price=Decimal("25000"),
        min_stock=Decimal("5"),
        default_location_id=1,
    ),
]


async def verify_schema(db: SQLiteAdapter) -> bool:
    """필수 테이블 존재 확인"""
    missing = [table for table in EXPECTED_TABLES if not await db.table_exists(table)]
    if missing:
        logger.error(f"누락된 테이블: {missing}")
        return False
    return True


async def main(db_path: Path, seed: bool) -> None:
    """스키마 초기화 실행

    Args:
        db_path: DB 파일 경로
        seed: 샘플 카탈로그 적재 여부
    """
    logger.info(f"스키마 초기화 시작: {db_path}")

    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)

        if seed:
            catalog = SQLiteCatalog(db)
            for location in SAMPLE_LOCATIONS:
                await catalog.save_location(location)
            for item in SAMPLE_ITEMS:
                await catalog.save_item(item)
            logger.info(f"샘플 카탈로그 적재: 위치 {len(SAMPLE_LOCATIONS)}, 품목 {len(SAMPLE_ITEMS)}")

        if await verify_schema(db):
            logger.info("스키마 초기화 완료 ✓")
        else:
            raise RuntimeError("스키마 검증 실패")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="DB 스키마 초기화")
    parser.add_argument("--db", type=Path, default=None, help="DB 파일 경로 (기본: data/stockledger.db)")
    parser.add_argument("--seed", action="store_true", help="샘플 카탈로그 적재")
    args = parser.parse_args()

    setup_logging("cli", log_to_file=False)
    asyncio.run(main(get_db_path(args.db), args.seed))
