"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Web과 배치 작업이 동시에 접근 가능하도록 설정.

하나의 연결을 여러 asyncio Task가 공유하므로, 트랜잭션이 진행 중인 동안
다른 Task의 문장은 트랜잭션 종료까지 대기함 (미완료 배치 노출 방지).

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import asyncio
import logging
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Iterator

import aiosqlite

from core.constants import Paths
from core.errors import ConstraintViolation, StorageUnavailable

logger = logging.getLogger(__name__)


# 일시적 장애로 간주하는 OperationalError 메시지
TRANSIENT_ERROR_MARKERS = (
    "locked",
    "busy",
    "disk i/o",
    "unable to open",
)


def get_db_path(path: Path | str | None = None) -> Path:
    """DB 경로 반환

    Args:
        path: 명시 경로 (None이면 기본 경로)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if path is None:
        return Paths.DEFAULT_DB
    return Path(path)


def translate_error(exc: Exception) -> Exception:
    """sqlite 예외를 도메인 예외로 변환

    - IntegrityError → ConstraintViolation
    - 일시적 OperationalError → StorageUnavailable
    - 그 외는 원본 그대로
    """
    if isinstance(exc, aiosqlite.IntegrityError):
        return ConstraintViolation(str(exc))
    if isinstance(exc, aiosqlite.OperationalError):
        message = str(exc).lower()
        if any(marker in message for marker in TRANSIENT_ERROR_MARKERS):
            return StorageUnavailable(str(exc))
    return exc


@contextmanager
def translated_errors() -> Iterator[None]:
    """블록 안에서 발생한 sqlite 예외를 translate_error로 변환해 다시 발생"""
    try:
        yield
    except aiosqlite.Error as e:
        translated = translate_error(e)
        if translated is e:
            raise
        raise translated from e


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    # pathlib.Path를 문자열로 변환
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    # 연결 생성
    if readonly:
        # 읽기 전용 모드
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    # WAL 모드 설정
    await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화 (item/location 참조 검증)
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저와 커밋 후 콜백 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (Web 조회용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute("INSERT INTO ...")
        adapter.after_commit(lambda: cache.clear())

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

        # 연결 단위 직렬화 (트랜잭션 소유 Task는 재진입 허용)
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None
        self._tx_task: asyncio.Task | None = None
        self._after_commit: list[Callable[[], None]] = []

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """현재 Task가 트랜잭션을 소유 중인지 여부"""
        return self._tx_task is not None and self._tx_task is asyncio.current_task()

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    @asynccontextmanager
    async def _exclusive(self) -> AsyncIterator[None]:
        """연결 독점 (현재 Task가 이미 소유 중이면 그대로 통과)"""
        task = asyncio.current_task()
        if self._owner is not None and self._owner is task:
            yield
            return

        async with self._lock:
            self._owner = task
            try:
                yield
            finally:
                self._owner = None

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()

        async with self._exclusive():
            with translated_errors():
                if parameters:
                    return await conn.execute(sql, parameters)
                return await conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        conn = self._require_conn()

        async with self._exclusive():
            with translated_errors():
                return await conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        async with self._exclusive():
            cursor = await self.execute(sql, parameters)
            with translated_errors():
                return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        async with self._exclusive():
            cursor = await self.execute(sql, parameters)
            with translated_errors():
                return list(await cursor.fetchall())

    async def commit(self) -> None:
        """커밋 (트랜잭션 밖에서 실행된 단독 문장용)"""
        if self._conn is not None and not self.in_transaction:
            async with self._exclusive():
                await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None and not self.in_transaction:
            async with self._exclusive():
                await self._conn.rollback()

    def after_commit(self, callback: Callable[[], None]) -> None:
        """커밋 후 콜백 등록

        트랜잭션 안이면 커밋 성공 후 실행, 롤백되면 폐기.
        트랜잭션 밖이면 즉시 실행.
        """
        if self.in_transaction:
            self._after_commit.append(callback)
        else:
            callback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        BEGIN IMMEDIATE로 쓰기 잠금을 먼저 확보.
        성공 시 자동 커밋, 예외 시 자동 롤백.
        같은 Task에서 중첩 호출하면 바깥 트랜잭션에 합류.

        사용 예시:
        ```python
        async with adapter.transaction():
            await adapter.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        conn = self._require_conn()

        if self.in_transaction:
            yield conn
            return

        async with self._exclusive():
            self._tx_task = asyncio.current_task()
            callbacks: list[Callable[[], None]] = []
            try:
                with translated_errors():
                    if conn.in_transaction:
                        # 트랜잭션 밖에서 실행 후 커밋되지 않은 문장 정리
                        await conn.commit()
                    await conn.execute("BEGIN IMMEDIATE")

                try:
                    yield conn
                    with translated_errors():
                        await conn.commit()
                except BaseException:
                    await conn.rollback()
                    self._after_commit.clear()
                    raise

                callbacks = self._after_commit[:]
                self._after_commit.clear()
            finally:
                self._tx_task = None

        for callback in callbacks:
            callback()

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    Args:
        adapter: 연결된 SQLiteAdapter

    주의: 앱 시작 시 또는 scripts/init_db.py에서 호출.
    """
    # locations (카탈로그 소유, 읽기 전용 참조)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS locations (
            id               INTEGER PRIMARY KEY,
            name             TEXT NOT NULL,
            type             TEXT,
            is_active        INTEGER NOT NULL DEFAULT 1,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # items (카탈로그 소유, 읽기 전용 참조)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS items (
            id                  INTEGER PRIMARY KEY,
            name                TEXT NOT NULL,
            sku                 TEXT UNIQUE,
            category_id         INTEGER,
            unit                TEXT NOT NULL DEFAULT 'pcs',
            cost_price          TEXT NOT NULL DEFAULT '0',
            selling_price       TEXT,
            min_stock           TEXT NOT NULL DEFAULT '0',
            default_location_id INTEGER REFERENCES locations(id),
            is_active           INTEGER NOT NULL DEFAULT 1,
            created_at          TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # stock_movements (append-only ledger)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS stock_movements (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            item_id          INTEGER NOT NULL REFERENCES items(id),
            location_id      INTEGER NOT NULL REFERENCES locations(id),
            quantity_change  TEXT NOT NULL,
            movement_type    TEXT NOT NULL CHECK (movement_type IN (
                'purchase', 'distribution', 'manual_adjustment',
                'opname_adjustment', 'initial_stock'
            )),
            note             TEXT,
            reference_id     TEXT,

            document_number  TEXT,
            counterpart      TEXT,
            payment_method   TEXT,
            payment_terms_days INTEGER,
            due_date         TEXT,
            destination      TEXT,

            created_by       TEXT,
            created_at       TEXT NOT NULL
        )
    """)

    # stock_movements_archive (관리자 리셋 시 보존용)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS stock_movements_archive (
            id               INTEGER PRIMARY KEY,
            item_id          INTEGER NOT NULL,
            location_id      INTEGER NOT NULL,
            quantity_change  TEXT NOT NULL,
            movement_type    TEXT NOT NULL,
            note             TEXT,
            reference_id     TEXT,
            document_number  TEXT,
            counterpart      TEXT,
            payment_method   TEXT,
            payment_terms_days INTEGER,
            due_date         TEXT,
            destination      TEXT,
            created_by       TEXT,
            created_at       TEXT NOT NULL,

            archived_by      TEXT NOT NULL,
            archive_reason   TEXT NOT NULL,
            archived_at      TEXT NOT NULL
        )
    """)

    # opname_sessions
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS opname_sessions (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            status           TEXT NOT NULL DEFAULT 'pending'
                             CHECK (status IN ('pending', 'approved')),
            notes            TEXT,
            created_by       TEXT,
            created_at       TEXT NOT NULL,
            approved_by      TEXT,
            approved_at      TEXT
        )
    """)

    # opname_lines (세션 시작 시점 스냅샷)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS opname_lines (
            id                    INTEGER PRIMARY KEY AUTOINCREMENT,
            session_id            INTEGER NOT NULL REFERENCES opname_sessions(id),
            item_id               INTEGER NOT NULL REFERENCES items(id),
            location_id           INTEGER NOT NULL REFERENCES locations(id),
            system_stock_at_start TEXT NOT NULL,
            physical_count        TEXT,
            counted_by            TEXT,
            counted_at            TEXT,
            UNIQUE(session_id, item_id, location_id)
        )
    """)

    # document_sequence (원자적 카운터)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS document_sequence (
            scope_code       TEXT NOT NULL,
            date_code        TEXT NOT NULL,
            last_value       INTEGER NOT NULL DEFAULT 0,
            updated_at       TEXT NOT NULL DEFAULT (datetime('now')),
            PRIMARY KEY (scope_code, date_code)
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_stock_movements_item_location
        ON stock_movements(item_id, location_id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_stock_movements_created
        ON stock_movements(created_at, id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_stock_movements_reference
        ON stock_movements(reference_id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_stock_movements_document
        ON stock_movements(document_number)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_opname_lines_session
        ON opname_lines(session_id)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
