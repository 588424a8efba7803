"""
Ledger 저장소

재고 이동(append-only) 저장 및 조회.
현재 재고는 저장하지 않으며 StockProjector가 이 저장소를 접어서 계산.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable

from core.constants import Defaults
from core.domain.movements import (
    AdminAuthorization,
    MovementContext,
    MovementFilter,
    MovementRecord,
)
from core.types import Destination, MovementType, PaymentMethod
from core.utils.timezone import now_utc, parse_ts

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


StockKey = tuple[int, int]  # (item_id, location_id)
AppendListener = Callable[[set[StockKey]], None]

MOVEMENT_COLUMNS = (
    "id, item_id, location_id, quantity_change, movement_type, note, reference_id, "
    "document_number, counterpart, payment_method, payment_terms_days, due_date, "
    "destination, created_by, created_at"
)


def format_ts(dt: datetime) -> str:
    """저장용 UTC ISO 문자열 (마이크로초 고정으로 사전순 = 시간순)"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def row_to_movement(row: tuple[Any, ...]) -> MovementRecord:
    """DB 행 → MovementRecord"""
    context = MovementContext(
        document_number=row[7],
        counterpart=row[8],
        payment_method=PaymentMethod(row[9]) if row[9] else None,
        payment_terms_days=row[10],
        due_date=date.fromisoformat(row[11]) if row[11] else None,
        destination=Destination(row[12]) if row[12] else None,
    )
    return MovementRecord(
        id=row[0],
        item_id=row[1],
        location_id=row[2],
        quantity_change=Decimal(row[3]),
        movement_type=MovementType(row[4]),
        note=row[5],
        reference_id=row[6],
        context=context,
        created_by=row[13],
        created_at=parse_ts(row[14]),
    )


def build_where(movement_filter: MovementFilter | None) -> tuple[str, list[Any]]:
    """MovementFilter → (WHERE 절, 파라미터)"""
    clauses: list[str] = []
    params: list[Any] = []

    if movement_filter is None:
        return "", params

    if movement_filter.item_id is not None:
        clauses.append("item_id = ?")
        params.append(movement_filter.item_id)
    if movement_filter.location_id is not None:
        clauses.append("location_id = ?")
        params.append(movement_filter.location_id)
    if movement_filter.movement_types:
        marks = ", ".join("?" for _ in movement_filter.movement_types)
        clauses.append(f"movement_type IN ({marks})")
        params.extend(MovementType(t).value for t in movement_filter.movement_types)
    if movement_filter.reference_id is not None:
        clauses.append("reference_id = ?")
        params.append(movement_filter.reference_id)
    if movement_filter.document_number is not None:
        clauses.append("document_number = ?")
        params.append(movement_filter.document_number)
    if movement_filter.created_from is not None:
        clauses.append("created_at >= ?")
        params.append(format_ts(movement_filter.created_from))
    if movement_filter.created_to is not None:
        clauses.append("created_at < ?")
        params.append(format_ts(movement_filter.created_to))

    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


class MovementQuery:
    """Ledger 조회 결과 (지연 평가, 재시작 가능)

    `async for`마다 처음부터 다시 조회하며 created_at, id 오름차순.
    내부적으로 keyset 페이지 단위로 읽음.

    사용 예시:
    ```python
    query = store.query(MovementFilter(item_id=1))
    async for movement in query:
        ...
    first_page = await query.page(limit=50)
    ```
    """

    def __init__(
        self,
        store: LedgerStore,
        movement_filter: MovementFilter | None,
        page_size: int,
    ):
        self._store = store
        self._filter = movement_filter
        self._page_size = page_size

    def __aiter__(self) -> AsyncIterator[MovementRecord]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[MovementRecord]:
        after: tuple[str, int] | None = None
        while True:
            rows = await self._store._fetch_page(self._filter, self._page_size, after=after)
            for movement in rows:
                yield movement
            if len(rows) < self._page_size:
                return
            last = rows[-1]
            assert last.created_at is not None and last.id is not None
            after = (format_ts(last.created_at), last.id)

    async def page(self, limit: int, offset: int = 0) -> list[MovementRecord]:
        """한 페이지 조회 (UI 페이징용)"""
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")
        return await self._store._fetch_page(self._filter, limit, offset=offset)

    async def to_list(self) -> list[MovementRecord]:
        """전체 결과를 리스트로 수집"""
        return [movement async for movement in self]

    async def count(self) -> int:
        return await self._store.count(self._filter)


class LedgerStore:
    """Ledger 저장소

    재고 이동 배치를 원자적으로 저장하고 조회하는 클래스.
    행은 추가만 되며 수정되지 않음 (관리자 아카이브 제외).

    Args:
        db: SQLite 어댑터
        page_size: 지연 조회 시 페이지 크기
    """

    def __init__(self, db: SQLiteAdapter, page_size: int = Defaults.QUERY_PAGE_SIZE):
        self.db = db
        self.page_size = page_size
        self._listeners: list[AppendListener] = []

    def add_listener(self, listener: AppendListener) -> None:
        """커밋 성공 후 영향받은 (item_id, location_id) 집합을 받을 리스너 등록"""
        self._listeners.append(listener)

    def remove_listener(self, listener: AppendListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, keys: set[StockKey]) -> None:
        for listener in self._listeners:
            listener(keys)

    def _committed(self, saved: list[MovementRecord]) -> None:
        """커밋 후 처리: 로그, 리스너 통지 (외부 트랜잭션에 합류한 경우 그 커밋 시점)"""
        logger.info(
            "배치 저장",
            extra={
                "batch_size": len(saved),
                "movement_types": sorted({m.movement_type.value for m in saved}),
                "reference_id": saved[0].reference_id,
            },
        )
        self._notify({(m.item_id, m.location_id) for m in saved})

    async def append(self, batch: list[MovementRecord]) -> list[MovementRecord]:
        """이동 배치 저장

        배치 전체가 하나의 트랜잭션으로 기록됨 (전부 또는 전무).
        호출자가 이미 트랜잭션 안에 있으면 그 트랜잭션에 합류.

        Args:
            batch: 저장할 이동 목록 (id는 None이어야 함)

        Returns:
            id가 할당된 MovementRecord 목록 (입력 순서 유지)

        Raises:
            ValueError: quantity_change가 0이거나 이미 저장된 레코드인 경우
            ConstraintViolation: 존재하지 않는 item / location 참조
            StorageUnavailable: 일시적 저장소 장애
        """
        if not batch:
            return []

        for record in batch:
            if record.quantity_change == 0:
                raise ValueError(f"quantity_change must be non-zero (item {record.item_id})")
            if record.id is not None:
                raise ValueError(f"Movement already persisted: {record.id}")

        saved: list[MovementRecord] = []
        try:
            async with self.db.transaction():
                for record in batch:
                    created_at = record.created_at or now_utc()
                    ctx = record.context
                    cursor = await self.db.execute(
                        """
                        INSERT INTO stock_movements (
                            item_id, location_id, quantity_change, movement_type,
                            note, reference_id,
                            document_number, counterpart, payment_method,
                            payment_terms_days, due_date, destination,
                            created_by, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            record.item_id,
                            record.location_id,
                            str(record.quantity_change),
                            record.movement_type.value,
                            record.note,
                            record.reference_id,
                            ctx.document_number,
                            ctx.counterpart,
                            ctx.payment_method.value if ctx.payment_method else None,
                            ctx.payment_terms_days,
                            ctx.due_date.isoformat() if ctx.due_date else None,
                            ctx.destination.value if ctx.destination else None,
                            record.created_by,
                            format_ts(created_at),
                        ),
                    )
                    saved.append(replace(record, id=cursor.lastrowid, created_at=created_at))

                self.db.after_commit(lambda: self._committed(saved))
        except Exception as e:
            logger.error(
                "배치 저장 실패 (롤백)",
                extra={"batch_size": len(batch), "error": str(e)},
            )
            raise

        return saved

    def query(self, movement_filter: MovementFilter | None = None) -> MovementQuery:
        """조건에 맞는 이동 조회 (지연 평가)"""
        return MovementQuery(self, movement_filter, self.page_size)

    async def _fetch_page(
        self,
        movement_filter: MovementFilter | None,
        limit: int,
        after: tuple[str, int] | None = None,
        offset: int = 0,
    ) -> list[MovementRecord]:
        where, params = build_where(movement_filter)
        if after is not None:
            keyset = "(created_at > ? OR (created_at = ? AND id > ?))"
            where = f"{where} AND {keyset}" if where else f" WHERE {keyset}"
            params.extend([after[0], after[0], after[1]])

        sql = f"SELECT {MOVEMENT_COLUMNS} FROM stock_movements{where} ORDER BY created_at, id LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        rows = await self.db.fetchall(sql, tuple(params))
        return [row_to_movement(row) for row in rows]

    async def get(self, movement_id: int) -> MovementRecord | None:
        """ID로 단건 조회"""
        row = await self.db.fetchone(
            f"SELECT {MOVEMENT_COLUMNS} FROM stock_movements WHERE id = ?",
            (movement_id,),
        )
        return row_to_movement(row) if row else None

    async def count(self, movement_filter: MovementFilter | None = None) -> int:
        """조건에 맞는 행 수"""
        where, params = build_where(movement_filter)
        row = await self.db.fetchone(
            f"SELECT COUNT(*) FROM stock_movements{where}",
            tuple(params),
        )
        return int(row[0]) if row else 0

    async def sum_quantity(self, item_id: int, location_id: int | None = None) -> Decimal:
        """quantity_change 합계 (단일 일관 조회)

        SQLite SUM은 TEXT를 REAL로 바꾸므로 Decimal로 직접 합산.
        """
        sql = "SELECT quantity_change FROM stock_movements WHERE item_id = ?"
        params: list[Any] = [item_id]
        if location_id is not None:
            sql += " AND location_id = ?"
            params.append(location_id)

        rows = await self.db.fetchall(sql, tuple(params))
        return sum((Decimal(row[0]) for row in rows), Decimal("0"))

    async def stock_levels(
        self,
        item_ids: list[int] | None = None,
        location_ids: list[int] | None = None,
    ) -> dict[StockKey, Decimal]:
        """(item_id, location_id)별 합계 (단일 일관 조회)

        Returns:
            {(item_id, location_id): 수량}
        """
        sql = "SELECT item_id, location_id, quantity_change FROM stock_movements"
        clauses: list[str] = []
        params: list[Any] = []
        if item_ids is not None:
            if not item_ids:
                return {}
            clauses.append(f"item_id IN ({', '.join('?' for _ in item_ids)})")
            params.extend(item_ids)
        if location_ids is not None:
            if not location_ids:
                return {}
            clauses.append(f"location_id IN ({', '.join('?' for _ in location_ids)})")
            params.extend(location_ids)
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)

        levels: dict[StockKey, Decimal] = {}
        for item_id, location_id, quantity in await self.db.fetchall(sql, tuple(params)):
            key = (item_id, location_id)
            levels[key] = levels.get(key, Decimal("0")) + Decimal(quantity)
        return levels

    async def archive_item_history(
        self,
        item_id: int,
        authorization: AdminAuthorization,
    ) -> int:
        """관리자 리셋: 품목의 이동 이력을 아카이브로 옮김

        Ledger에서 행을 제거하는 유일한 경로.
        아카이브 복사와 삭제는 하나의 트랜잭션.

        Args:
            item_id: 대상 품목 ID
            authorization: 관리자 승인 정보

        Returns:
            아카이브된 행 수
        """
        if not isinstance(authorization, AdminAuthorization):
            raise TypeError("archive_item_history requires AdminAuthorization")

        archived_at = format_ts(now_utc())
        async with self.db.transaction():
            rows = await self.db.fetchall(
                "SELECT DISTINCT location_id FROM stock_movements WHERE item_id = ?",
                (item_id,),
            )
            keys = {(item_id, row[0]) for row in rows}

            cursor = await self.db.execute(
                f"""
                INSERT INTO stock_movements_archive (
                    {MOVEMENT_COLUMNS}, archived_by, archive_reason, archived_at
                )
                SELECT {MOVEMENT_COLUMNS}, ?, ?, ?
                FROM stock_movements WHERE item_id = ?
                """,
                (authorization.authorized_by, authorization.reason, archived_at, item_id),
            )
            archived = cursor.rowcount

            await self.db.execute(
                "DELETE FROM stock_movements WHERE item_id = ?",
                (item_id,),
            )
            self.db.after_commit(lambda: self._notify(keys))

        logger.warning(
            "관리자 리셋: 이동 이력 아카이브",
            extra={
                "item_id": item_id,
                "archived": archived,
                "authorized_by": authorization.authorized_by,
                "reason": authorization.reason,
            },
        )
        return archived
