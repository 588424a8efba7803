"""
실사(Opname) 세션 관리자

상태 전이: pending → approved (단방향, approved는 종료 상태)

1. create_session: 범위 내 활성 품목의 현재 재고를 스냅샷으로 고정
2. record_count: 실사 수량 입력 (pending에서만)
3. approve: 차이가 있는 라인마다 opname_adjustment 이동 1건 기록 후 승인
   (보정 이동과 상태 전이는 하나의 트랜잭션)
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.domain.movements import MovementRecord
from core.domain.opname import (
    ApprovalResult,
    OpnameLineSnapshot,
    OpnameScope,
    OpnameSession,
    OpnameSessionReport,
)
from core.domain.state_machines import OpnameSessionStateMachine
from core.errors import (
    OpnameLineNotFound,
    SessionNotFound,
    SessionNotPending,
    UncountedLinesError,
)
from core.ledger.store import format_ts
from core.types import MovementType, OpnameStatus, UncountedPolicy
from core.utils.timezone import now_utc, parse_ts

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter
    from adapters.interfaces import ICatalogReader
    from core.ledger.projector import StockProjector
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


SESSION_COLUMNS = "id, status, created_at, created_by, notes, approved_at, approved_by"
LINE_COLUMNS = (
    "session_id, item_id, location_id, system_stock_at_start, "
    "physical_count, counted_by, counted_at"
)


def _row_to_session(row: tuple[Any, ...]) -> OpnameSession:
    return OpnameSession(
        id=row[0],
        status=OpnameStatus(row[1]),
        created_at=parse_ts(row[2]),
        created_by=row[3],
        notes=row[4],
        approved_at=parse_ts(row[5]) if row[5] else None,
        approved_by=row[6],
    )


def _row_to_line(row: tuple[Any, ...]) -> OpnameLineSnapshot:
    return OpnameLineSnapshot(
        session_id=row[0],
        item_id=row[1],
        location_id=row[2],
        system_stock_at_start=Decimal(row[3]),
        physical_count=Decimal(row[4]) if row[4] is not None else None,
        counted_by=row[5],
        counted_at=parse_ts(row[6]) if row[6] else None,
    )


class OpnameManager:
    """실사 세션 관리자

    Args:
        db: SQLite 어댑터
        store: LedgerStore (보정 이동 기록)
        projector: StockProjector (스냅샷 재고 계산)
        catalog: 카탈로그 조회 (활성 품목, 원가)
        uncounted_policy: 승인 시 미실사 라인 처리 정책
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        store: LedgerStore,
        projector: StockProjector,
        catalog: ICatalogReader,
        uncounted_policy: UncountedPolicy = UncountedPolicy.SKIP,
    ):
        self.db = db
        self.store = store
        self.projector = projector
        self.catalog = catalog
        self.uncounted_policy = uncounted_policy

        # 세션별 직렬화 (승인 / 카운트 입력 경합 방지), 사용 중인 락만 유지
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, session_id: int) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_session(self, session_id: int) -> OpnameSession | None:
        row = await self.db.fetchone(
            f"SELECT {SESSION_COLUMNS} FROM opname_sessions WHERE id = ?",
            (session_id,),
        )
        return _row_to_session(row) if row else None

    async def _require_session(self, session_id: int) -> OpnameSession:
        session = await self.get_session(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    async def list_sessions(
        self,
        status: OpnameStatus | None = None,
        limit: int = 100,
    ) -> list[OpnameSession]:
        """세션 목록 (최신순)"""
        sql = f"SELECT {SESSION_COLUMNS} FROM opname_sessions"
        params: list[Any] = []
        if status is not None:
            sql += " WHERE status = ?"
            params.append(OpnameStatus(status).value)
        sql += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        rows = await self.db.fetchall(sql, tuple(params))
        return [_row_to_session(row) for row in rows]

    async def get_lines(self, session_id: int) -> list[OpnameLineSnapshot]:
        """세션 스냅샷 라인 (item_id, location_id 순)"""
        rows = await self.db.fetchall(
            f"""
            SELECT {LINE_COLUMNS} FROM opname_lines
            WHERE session_id = ?
            ORDER BY item_id, location_id
            """,
            (session_id,),
        )
        return [_row_to_line(row) for row in rows]

    # -------------------------------------------------------------------------
    # 세션 생성
    # -------------------------------------------------------------------------

    async def create_session(
        self,
        scope: OpnameScope | None = None,
        created_by: str | None = None,
        notes: str | None = None,
    ) -> OpnameSession:
        """실사 세션 생성 및 스냅샷

        system_stock_at_start는 여기서 한 번만 계산.
        재고 조회와 스냅샷 저장은 같은 트랜잭션이라 그 사이에 이동이 끼어들지 않음.

        품목별 스냅샷 위치: 기본 위치 + 범위 내에서 이동 이력이 있는 위치.

        Args:
            scope: 대상 범위 (None이면 전체 활성 품목)
            created_by: 작성자 principal id
            notes: 메모

        Returns:
            생성된 OpnameSession (pending)
        """
        scope = scope or OpnameScope()
        items = await self.catalog.list_active_items(
            category_ids=list(scope.category_ids) if scope.category_ids is not None else None,
            item_ids=list(scope.item_ids) if scope.item_ids is not None else None,
        )
        location_filter = set(scope.location_ids) if scope.location_ids is not None else None

        created_at = format_ts(now_utc())
        async with self.db.transaction():
            levels = await self.projector.stock_levels(
                item_ids=[item.id for item in items],
                location_ids=list(location_filter) if location_filter is not None else None,
            )

            lines: list[tuple[int, int, Decimal]] = []
            for item in items:
                locations = {loc for (item_id, loc) in levels if item_id == item.id}
                if item.default_location_id is not None and (
                    location_filter is None or item.default_location_id in location_filter
                ):
                    locations.add(item.default_location_id)
                if not locations and item.default_location_id is None:
                    logger.warning(
                        "실사 대상 위치 없음 (기본 위치 미지정, 이동 이력 없음)",
                        extra={"item_id": item.id},
                    )

                for location_id in sorted(locations):
                    start = levels.get((item.id, location_id), Decimal("0"))
                    lines.append((item.id, location_id, start))

            cursor = await self.db.execute(
                """
                INSERT INTO opname_sessions (status, notes, created_by, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (OpnameStatus.PENDING.value, notes, created_by, created_at),
            )
            session_id = cursor.lastrowid
            assert session_id is not None

            if lines:
                await self.db.executemany(
                    """
                    INSERT INTO opname_lines (
                        session_id, item_id, location_id, system_stock_at_start
                    ) VALUES (?, ?, ?, ?)
                    """,
                    [(session_id, item_id, loc, str(start)) for item_id, loc, start in lines],
                )

        logger.info(
            "실사 세션 생성",
            extra={"session_id": session_id, "lines": len(lines), "created_by": created_by},
        )

        return OpnameSession(
            id=session_id,
            status=OpnameStatus.PENDING,
            created_at=parse_ts(created_at),
            created_by=created_by,
            notes=notes,
        )

    # -------------------------------------------------------------------------
    # 실사 수량 입력
    # -------------------------------------------------------------------------

    async def record_count(
        self,
        session_id: int,
        item_id: int,
        physical_count: Decimal | int | str,
        counted_by: str | None = None,
        location_id: int | None = None,
    ) -> OpnameLineSnapshot:
        """실사 수량 입력 (다시 입력하면 덮어씀)

        Args:
            session_id: 세션 ID
            item_id: 품목 ID
            physical_count: 실사 수량 (0 이상)
            counted_by: 실사자 principal id
            location_id: 위치 ID (품목 라인이 여러 위치면 필수)

        Returns:
            갱신된 스냅샷 라인

        Raises:
            SessionNotFound: 세션 없음
            SessionNotPending: 승인된 세션
            OpnameLineNotFound: 해당 라인 없음
            ValueError: 음수 수량, 또는 위치 지정이 필요한 경우
        """
        count = physical_count if isinstance(physical_count, Decimal) else Decimal(str(physical_count))
        if count < 0:
            raise ValueError(f"physical_count must be >= 0: {count}")

        counted_at = format_ts(now_utc())
        async with self._lock_for(session_id):
            async with self.db.transaction():
                session = await self._require_session(session_id)
                OpnameSessionStateMachine(session_id, session.status).require_pending()

                sql = "SELECT id, location_id FROM opname_lines WHERE session_id = ? AND item_id = ?"
                params: list[Any] = [session_id, item_id]
                if location_id is not None:
                    sql += " AND location_id = ?"
                    params.append(location_id)
                rows = await self.db.fetchall(sql, tuple(params))

                if not rows:
                    raise OpnameLineNotFound(session_id, item_id, location_id)
                if len(rows) > 1:
                    raise ValueError(
                        f"Item {item_id} has {len(rows)} lines in session {session_id}; "
                        "location_id is required"
                    )

                line_id, resolved_location = rows[0]
                await self.db.execute(
                    """
                    UPDATE opname_lines
                    SET physical_count = ?, counted_by = ?, counted_at = ?
                    WHERE id = ?
                    """,
                    (str(count), counted_by, counted_at, line_id),
                )

                row = await self.db.fetchone(
                    f"SELECT {LINE_COLUMNS} FROM opname_lines WHERE id = ?",
                    (line_id,),
                )

        assert row is not None
        line = _row_to_line(row)

        logger.info(
            "실사 수량 입력",
            extra={
                "session_id": session_id,
                "item_id": item_id,
                "location_id": resolved_location,
                "physical_count": str(count),
            },
        )
        return line

    # -------------------------------------------------------------------------
    # 승인
    # -------------------------------------------------------------------------

    def _adjustments(
        self,
        session_id: int,
        lines: list[OpnameLineSnapshot],
        approved_by: str | None,
    ) -> tuple[list[MovementRecord], int]:
        """라인별 보정 이동 생성 (차이 0이면 생략)

        Returns:
            (보정 이동 목록, 생략된 미실사 라인 수)
        """
        adjustments: list[MovementRecord] = []
        skipped = 0

        for line in lines:
            if line.physical_count is None:
                if self.uncounted_policy != UncountedPolicy.ZERO:
                    skipped += 1
                    continue
                counted = Decimal("0")
            else:
                counted = line.physical_count

            variance = counted - line.system_stock_at_start
            if variance == 0:
                continue

            adjustments.append(
                MovementRecord.create(
                    item_id=line.item_id,
                    location_id=line.location_id,
                    quantity_change=variance,
                    movement_type=MovementType.OPNAME_ADJUSTMENT,
                    created_by=approved_by,
                    note=f"Stock opname session #{session_id}",
                    reference_id=session_id,
                )
            )

        return adjustments, skipped

    async def approve(self, session_id: int, approved_by: str | None = None) -> ApprovalResult:
        """세션 승인

        보정 이동 기록과 approved 전이는 하나의 트랜잭션 (전부 또는 전무).

        Args:
            session_id: 세션 ID
            approved_by: 승인자 principal id

        Returns:
            ApprovalResult (승인된 세션, 기록된 보정 이동)

        Raises:
            SessionNotFound: 세션 없음
            SessionNotPending: 이미 승인된 세션
            UncountedLinesError: reject 정책에서 미실사 라인 존재
        """
        approved_at = format_ts(now_utc())
        async with self._lock_for(session_id):
            async with self.db.transaction():
                session = await self._require_session(session_id)
                machine = OpnameSessionStateMachine(session_id, session.status)
                machine.require_pending()

                lines = await self.get_lines(session_id)
                uncounted = sum(1 for line in lines if not line.is_counted)
                if uncounted and self.uncounted_policy == UncountedPolicy.REJECT:
                    raise UncountedLinesError(session_id, uncounted)

                adjustments, skipped = self._adjustments(session_id, lines, approved_by)
                saved = await self.store.append(adjustments)

                machine.approve()
                cursor = await self.db.execute(
                    """
                    UPDATE opname_sessions
                    SET status = ?, approved_by = ?, approved_at = ?
                    WHERE id = ? AND status = ?
                    """,
                    (
                        machine.status.value,
                        approved_by,
                        approved_at,
                        session_id,
                        OpnameStatus.PENDING.value,
                    ),
                )
                if cursor.rowcount != 1:
                    # 다른 프로세스가 먼저 승인
                    raise SessionNotPending(session_id, OpnameStatus.APPROVED.value)

        logger.info(
            "실사 세션 승인",
            extra={
                "session_id": session_id,
                "adjustments": len(saved),
                "skipped_uncounted": skipped,
                "approved_by": approved_by,
            },
        )

        approved = OpnameSession(
            id=session.id,
            status=OpnameStatus.APPROVED,
            created_at=session.created_at,
            created_by=session.created_by,
            notes=session.notes,
            approved_at=parse_ts(approved_at),
            approved_by=approved_by,
        )
        return ApprovalResult(session=approved, adjustments=saved, skipped_uncounted=skipped)

    # -------------------------------------------------------------------------
    # 리포트
    # -------------------------------------------------------------------------

    async def session_report(self, status: OpnameStatus | None = None) -> list[OpnameSessionReport]:
        """실사 이력 리포트 (세션별 차이 수량 / 차이 금액)

        차이 금액은 현재 카탈로그 원가 기준.
        """
        sessions = await self.list_sessions(status=status, limit=1000)
        if not sessions:
            return []

        rows = await self.db.fetchall(
            f"""
            SELECT {LINE_COLUMNS} FROM opname_lines
            WHERE session_id IN ({', '.join('?' for _ in sessions)})
            """,
            tuple(s.id for s in sessions),
        )
        lines = [_row_to_line(row) for row in rows]
        items = await self.catalog.get_items(sorted({line.item_id for line in lines}))

        report: list[OpnameSessionReport] = []
        for session in sessions:
            session_lines = [line for line in lines if line.session_id == session.id]
            total_variance = Decimal("0")
            variance_value = Decimal("0")
            counted = 0
            for line in session_lines:
                if line.variance is None:
                    continue
                counted += 1
                total_variance += line.variance
                item = items.get(line.item_id)
                if item is not None:
                    variance_value += line.variance * item.cost_price

            report.append(
                OpnameSessionReport(
                    session_id=session.id,
                    status=session.status,
                    created_at=session.created_at,
                    approved_at=session.approved_at,
                    line_count=len(session_lines),
                    counted_count=counted,
                    total_variance=total_variance,
                    variance_value=variance_value,
                )
            )
        return report
