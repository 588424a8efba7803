"""
관리자 리셋: 품목 이동 이력 아카이브

Ledger 행을 제거하는 유일한 경로. 행은 stock_movements_archive로 복사된 뒤 삭제됨.

사용법:
    python -m scripts.archive_item --item-id 12 --by admin@example.com --reason "카탈로그 재등록"
"""

import argparse
import asyncio
import logging
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path
from core.domain.movements import AdminAuthorization
from core.ledger.store import LedgerStore
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def main(db_path: Path, item_id: int, authorization: AdminAuthorization, dry_run: bool) -> None:
    """아카이브 실행

    Args:
        db_path: DB 파일 경로
        item_id: 대상 품목 ID
        authorization: 관리자 승인 정보
        dry_run: True면 대상 행 수만 출력
    """
    async with SQLiteAdapter(db_path) as db:
        store = LedgerStore(db)

        if dry_run:
            stock = await store.sum_quantity(item_id)
            rows = await db.fetchone(
                "SELECT COUNT(*) FROM stock_movements WHERE item_id = ?",
                (item_id,),
            )
            logger.info(f"[dry-run] 품목 {item_id}: 이동 {rows[0] if rows else 0}건, 현재 재고 {stock}")
            return

        archived = await store.archive_item_history(item_id, authorization)
        logger.info(f"아카이브 완료: 품목 {item_id}, {archived}건")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="품목 이동 이력 아카이브 (관리자 전용)")
    parser.add_argument("--db", type=Path, default=None, help="DB 파일 경로")
    parser.add_argument("--item-id", type=int, required=True, help="대상 품목 ID")
    parser.add_argument("--by", required=True, help="승인자 principal id")
    parser.add_argument("--reason", required=True, help="리셋 사유")
    parser.add_argument("--dry-run", action="store_true", help="실행하지 않고 대상만 확인")
    args = parser.parse_args()

    setup_logging("cli")
    asyncio.run(
        main(
            get_db_path(args.db),
            args.item_id,
            AdminAuthorization(authorized_by=args.by, reason=args.reason),
            args.dry_run,
        )
    )
