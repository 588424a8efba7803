#!/usr/bin/env python3
"""Ledger 상태 확인 스크립트

사용법:
    python -m scripts.check_ledger
    python -m scripts.check_ledger --db data/stockledger.db
"""

import argparse
import asyncio
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.catalog.sqlite_catalog import SQLiteCatalog
from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path
from core.ledger.projector import StockProjector
from core.ledger.store import LedgerStore
from core.opname.manager import OpnameManager
from core.types import OpnameStatus, StockHealth


async def main(db_path: Path) -> None:
    async with SQLiteAdapter(db_path, readonly=True) as db:
        store = LedgerStore(db)
        projector = StockProjector(store, cache_enabled=False)
        catalog = SQLiteCatalog(db)
        opname = OpnameManager(db, store, projector, catalog)

        print(f"DB Path: {db_path}")
        print(f"Total movements: {await store.count()}")

        items = await catalog.list_active_items()
        summary = await projector.stock_summary(items)
        print(f"Active items: {len(items)}")
        print(f"Total stock value: {sum(s.value for s in summary)}")

        negative = [s for s in summary if s.quantity < 0]
        low = [s for s in summary if s.health != StockHealth.AMAN]
        print(f"\nLow stock ({len(low)}):")
        for status in low:
            print(f"  - {status.item.id} {status.item.name}: {status.quantity} {status.item.unit} ({status.health.value})")

        if negative:
            print(f"\n⚠ Negative stock ({len(negative)}):")
            for status in negative:
                print(f"  - {status.item.id} {status.item.name}: {status.quantity}")

        pending = await opname.list_sessions(status=OpnameStatus.PENDING)
        print(f"\nPending opname sessions: {len(pending)}")
        for session in pending:
            print(f"  - #{session.id} created {session.created_at.isoformat()} by {session.created_by}")

        rows = await db.fetchall(
            "SELECT scope_code, date_code, last_value FROM document_sequence "
            "ORDER BY updated_at DESC LIMIT 10"
        )
        print(f"\nRecent document counters ({len(rows)}):")
        for scope, dcode, last_value in rows:
            print(f"  - {scope}-{dcode}: {last_value}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ledger 상태 확인")
    parser.add_argument("--db", type=Path, default=None, help="DB 파일 경로")
    args = parser.parse_args()

    asyncio.run(main(get_db_path(args.db)))
