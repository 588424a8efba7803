"""
SQLite 어댑터 테스트

SQLiteAdapter 트랜잭션 / 직렬화 / 예외 변환 및 스키마 테스트.
"""

import asyncio
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    get_db_path,
    init_schema,
    translate_error,
)
from core.constants import Paths
from core.errors import ConstraintViolation, StorageUnavailable


@pytest_asyncio.fixture
async def scratch(tmp_path: Path) -> SQLiteAdapter:
    """단순 테이블 하나가 있는 어댑터"""
    adapter = SQLiteAdapter(tmp_path / "scratch.db")
    await adapter.connect()
    await adapter.execute("CREATE TABLE t (v INTEGER PRIMARY KEY)")
    await adapter.commit()
    yield adapter
    await adapter.close()


async def count_rows(adapter: SQLiteAdapter) -> int:
    row = await adapter.fetchone("SELECT COUNT(*) FROM t")
    assert row is not None
    return row[0]


class TestGetDbPath:
    """get_db_path 테스트"""

    def test_default(self) -> None:
        path = get_db_path()

        assert path == Paths.DEFAULT_DB
        assert isinstance(path, Path)

    def test_explicit_string(self, tmp_path: Path) -> None:
        assert get_db_path(str(tmp_path / "x.db")) == tmp_path / "x.db"


class TestTranslateError:
    """translate_error 테스트"""

    def test_integrity(self) -> None:
        error = translate_error(aiosqlite.IntegrityError("FOREIGN KEY constraint failed"))

        assert isinstance(error, ConstraintViolation)

    @pytest.mark.parametrize(
        "message",
        ["database is locked", "database table is busy", "disk I/O error", "unable to open database file"],
    )
    def test_transient(self, message: str) -> None:
        error = translate_error(aiosqlite.OperationalError(message))

        assert isinstance(error, StorageUnavailable)

    def test_other_operational_unchanged(self) -> None:
        original = aiosqlite.OperationalError("no such table: nope")

        assert translate_error(original) is original


class TestCreateConnection:
    """create_connection 테스트"""

    @pytest.mark.asyncio
    async def test_wal_and_foreign_keys(self, tmp_path: Path) -> None:
        """WAL 모드와 외래 키 활성화"""
        conn = await create_connection(tmp_path / "sub" / "test.db")
        try:
            async with conn.execute("PRAGMA journal_mode") as cursor:
                assert (await cursor.fetchone())[0] == "wal"
            async with conn.execute("PRAGMA foreign_keys") as cursor:
                assert (await cursor.fetchone())[0] == 1
        finally:
            await conn.close()

        assert (tmp_path / "sub" / "test.db").exists()


class TestConnection:
    """연결 관리 테스트"""

    @pytest.mark.asyncio
    async def test_context_manager(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "ctx.db") as adapter:
            assert adapter.is_connected
        assert not adapter.is_connected

    @pytest.mark.asyncio
    async def test_not_connected(self, tmp_path: Path) -> None:
        adapter = SQLiteAdapter(tmp_path / "none.db")

        with pytest.raises(RuntimeError):
            await adapter.execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_missing_table_error_propagates(self, scratch: SQLiteAdapter) -> None:
        with pytest.raises(aiosqlite.OperationalError):
            await scratch.fetchone("SELECT * FROM nope")


class TestTransaction:
    """transaction 테스트"""

    @pytest.mark.asyncio
    async def test_commit(self, scratch: SQLiteAdapter) -> None:
        async with scratch.transaction():
            assert scratch.in_transaction
            await scratch.execute("INSERT INTO t (v) VALUES (1)")

        assert not scratch.in_transaction
        assert await count_rows(scratch) == 1

    @pytest.mark.asyncio
    async def test_rollback_on_error(self, scratch: SQLiteAdapter) -> None:
        """예외 시 전부 롤백"""
        with pytest.raises(ValueError):
            async with scratch.transaction():
                await scratch.execute("INSERT INTO t (v) VALUES (1)")
                raise ValueError("boom")

        assert await count_rows(scratch) == 0

    @pytest.mark.asyncio
    async def test_integrity_error_translated_and_rolled_back(self, scratch: SQLiteAdapter) -> None:
        with pytest.raises(ConstraintViolation):
            async with scratch.transaction():
                await scratch.execute("INSERT INTO t (v) VALUES (1)")
                await scratch.execute("INSERT INTO t (v) VALUES (1)")

        assert await count_rows(scratch) == 0

    @pytest.mark.asyncio
    async def test_nested_joins_outer(self, scratch: SQLiteAdapter) -> None:
        """같은 Task의 중첩 트랜잭션은 바깥 트랜잭션에 합류"""
        with pytest.raises(ValueError):
            async with scratch.transaction():
                async with scratch.transaction():
                    await scratch.execute("INSERT INTO t (v) VALUES (1)")
                # 안쪽 블록 종료 시 커밋되지 않음
                raise ValueError("outer fails")

        assert await count_rows(scratch) == 0

    @pytest.mark.asyncio
    async def test_stray_implicit_statement_committed_first(self, scratch: SQLiteAdapter) -> None:
        """트랜잭션 밖 미커밋 문장은 BEGIN 전에 정리"""
        await scratch.execute("INSERT INTO t (v) VALUES (1)")

        with pytest.raises(ValueError):
            async with scratch.transaction():
                await scratch.execute("INSERT INTO t (v) VALUES (2)")
                raise ValueError("boom")

        assert await count_rows(scratch) == 1


class TestAfterCommit:
    """after_commit 테스트"""

    @pytest.mark.asyncio
    async def test_runs_after_commit(self, scratch: SQLiteAdapter) -> None:
        calls: list[str] = []

        async with scratch.transaction():
            scratch.after_commit(lambda: calls.append("done"))
            assert calls == []

        assert calls == ["done"]

    @pytest.mark.asyncio
    async def test_discarded_on_rollback(self, scratch: SQLiteAdapter) -> None:
        calls: list[str] = []

        with pytest.raises(ValueError):
            async with scratch.transaction():
                scratch.after_commit(lambda: calls.append("done"))
                raise ValueError("boom")

        async with scratch.transaction():
            pass

        assert calls == []

    @pytest.mark.asyncio
    async def test_outside_transaction_runs_immediately(self, scratch: SQLiteAdapter) -> None:
        calls: list[str] = []

        scratch.after_commit(lambda: calls.append("now"))

        assert calls == ["now"]


class TestSerialization:
    """Task 간 직렬화 테스트"""

    @pytest.mark.asyncio
    async def test_reader_waits_for_open_transaction(self, scratch: SQLiteAdapter) -> None:
        """다른 Task는 진행 중인 배치의 일부만 보지 않음"""
        started = asyncio.Event()

        async def writer() -> None:
            async with scratch.transaction():
                await scratch.execute("INSERT INTO t (v) VALUES (1)")
                started.set()
                await asyncio.sleep(0.05)
                await scratch.execute("INSERT INTO t (v) VALUES (2)")

        async def reader() -> int:
            await started.wait()
            return await count_rows(scratch)

        _, seen = await asyncio.gather(writer(), reader())

        assert seen == 2

    @pytest.mark.asyncio
    async def test_concurrent_transactions(self, scratch: SQLiteAdapter) -> None:
        async def insert(value: int) -> None:
            async with scratch.transaction():
                await scratch.execute("INSERT INTO t (v) VALUES (?)", (value,))
                await asyncio.sleep(0)

        await asyncio.gather(*(insert(i) for i in range(10)))

        assert await count_rows(scratch) == 10


class TestInitSchema:
    """init_schema 테스트"""

    @pytest.mark.asyncio
    async def test_tables_created(self, db: SQLiteAdapter) -> None:
        for table in (
            "locations",
            "items",
            "stock_movements",
            "stock_movements_archive",
            "opname_sessions",
            "opname_lines",
            "document_sequence",
        ):
            assert await db.table_exists(table), table

    @pytest.mark.asyncio
    async def test_idempotent(self, db: SQLiteAdapter) -> None:
        await init_schema(db)

        assert await db.table_exists("stock_movements")

    @pytest.mark.asyncio
    async def test_movement_columns(self, db: SQLiteAdapter) -> None:
        columns = {c["name"]: c for c in await db.get_table_info("stock_movements")}

        assert columns["quantity_change"]["type"] == "TEXT"
        assert columns["quantity_change"]["notnull"]
        for name in ("document_number", "counterpart", "payment_method", "due_date", "destination"):
            assert name in columns

    @pytest.mark.asyncio
    async def test_movement_type_check(self, db: SQLiteAdapter) -> None:
        """허용되지 않은 유형은 DB 레벨에서도 거부"""
        await db.execute("INSERT INTO locations (id, name) VALUES (1, 'Gudang')")
        await db.execute("INSERT INTO items (id, name) VALUES (1, 'Kopi')")
        await db.commit()

        with pytest.raises(ConstraintViolation):
            async with db.transaction():
                await db.execute(
                    """
                    INSERT INTO stock_movements (item_id, location_id, quantity_change, movement_type, created_at)
                    VALUES (1, 1, '1', 'sale', '2026-10-19T00:00:00.000000+00:00')
                    """
                )
