"""
DocumentSequencer 통합 테스트

범위 / 날짜별 카운터, 동시 발급 유일성 확인.
"""

import asyncio
from datetime import date, datetime, timezone

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.sequencer import DocumentSequencer

pytestmark = pytest.mark.integration

OP_DATE = date(2026, 10, 19)


class TestAllocate:
    """allocate 테스트"""

    @pytest.mark.asyncio
    async def test_first_number(self, sequencer: DocumentSequencer) -> None:
        number = await sequencer.allocate("SJ", "Artirasa Joglo", OP_DATE)

        assert number == "SJ-ARJOG-191026-001"

    @pytest.mark.asyncio
    async def test_increments_per_scope_and_date(self, sequencer: DocumentSequencer) -> None:
        first = await sequencer.allocate("SJ", "Outlet Kemang", OP_DATE)
        second = await sequencer.allocate("SJ", "Outlet Kemang", OP_DATE)
        other_scope = await sequencer.allocate("SJ", "Artirasa Joglo", OP_DATE)
        next_day = await sequencer.allocate("SJ", "Outlet Kemang", date(2026, 10, 20))

        assert first == "SJ-OUKEM-191026-001"
        assert second == "SJ-OUKEM-191026-002"
        assert other_scope == "SJ-ARJOG-191026-001"
        assert next_day == "SJ-OUKEM-201026-001"

    @pytest.mark.asyncio
    async def test_counter_shared_across_prefixes(self, sequencer: DocumentSequencer) -> None:
        """카운터 키는 (범위, 날짜)"""
        await sequencer.allocate("SJ", "Kemang", OP_DATE)

        assert await sequencer.allocate("INV", "Kemang", OP_DATE) == "INV-KEMAN-191026-002"

    @pytest.mark.asyncio
    async def test_general_scope(self, sequencer: DocumentSequencer) -> None:
        assert await sequencer.allocate("INV", None, OP_DATE) == "INV-GENRL-191026-001"

    @pytest.mark.asyncio
    async def test_datetime_uses_wib_date(self, sequencer: DocumentSequencer) -> None:
        op_time = datetime(2026, 10, 18, 19, 30, tzinfo=timezone.utc)

        assert await sequencer.allocate("SJ", "Kemang", op_time) == "SJ-KEMAN-191026-001"

    @pytest.mark.asyncio
    async def test_invalid_prefix(self, sequencer: DocumentSequencer) -> None:
        with pytest.raises(ValueError):
            await sequencer.allocate("sj-x", "Kemang", OP_DATE)

    @pytest.mark.asyncio
    async def test_concurrent_allocations_unique(self, sequencer: DocumentSequencer) -> None:
        numbers = await asyncio.gather(
            *(sequencer.allocate("SJ", "Outlet Kemang", OP_DATE) for _ in range(20))
        )

        assert len(set(numbers)) == 20
        assert sorted(numbers)[-1] == "SJ-OUKEM-191026-020"

    @pytest.mark.asyncio
    async def test_separate_connections_unique(self, db: SQLiteAdapter) -> None:
        """같은 DB 파일을 쓰는 두 연결도 중복 번호를 받지 않음"""
        other = SQLiteAdapter(db.db_path)
        await other.connect()
        try:
            first = DocumentSequencer(db)
            second = DocumentSequencer(other)

            numbers = await asyncio.gather(
                *(s.allocate("SJ", "Kemang", OP_DATE) for s in [first, second] * 5)
            )
        finally:
            await other.close()

        assert len(set(numbers)) == 10

    @pytest.mark.asyncio
    async def test_sequence_width(self, db: SQLiteAdapter) -> None:
        sequencer = DocumentSequencer(db, sequence_width=5, scope_code_width=3)

        assert await sequencer.allocate("SJ", "Kemang", OP_DATE) == "SJ-KEM-191026-00001"


class TestPreview:
    """preview 테스트"""

    @pytest.mark.asyncio
    async def test_does_not_reserve(self, sequencer: DocumentSequencer) -> None:
        preview = await sequencer.preview("SJ", "Kemang", OP_DATE)
        again = await sequencer.preview("SJ", "Kemang", OP_DATE)
        allocated = await sequencer.allocate("SJ", "Kemang", OP_DATE)

        assert preview == again == allocated == "SJ-KEMAN-191026-001"
        assert await sequencer.preview("SJ", "Kemang", OP_DATE) == "SJ-KEMAN-191026-002"

    @pytest.mark.asyncio
    async def test_parse_allocated(self, sequencer: DocumentSequencer) -> None:
        number = sequencer.parse(await sequencer.allocate("INV", "PT Sumber", OP_DATE))

        assert number.scope_code == "PTSUM"
        assert number.operation_date == OP_DATE
