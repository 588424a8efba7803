"""
pytest 공통 fixture 정의

임시 SQLite DB, 샘플 카탈로그, Ledger 구성 요소 fixture
"""

import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from adapters.catalog.sqlite_catalog import SQLiteCatalog
from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.ledger.projector import StockProjector
from core.ledger.sequencer import DocumentSequencer
from core.ledger.store import LedgerStore
from core.opname.manager import OpnameManager
from tests.catalog_data import SAMPLE_ITEMS, SAMPLE_LOCATIONS


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "test_stockledger.db")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def catalog(db: SQLiteAdapter) -> SQLiteCatalog:
    """샘플 카탈로그가 적재된 SQLiteCatalog"""
    catalog = SQLiteCatalog(db)
    for location in SAMPLE_LOCATIONS:
        await catalog.save_location(location)
    for item in SAMPLE_ITEMS:
        await catalog.save_item(item)
    return catalog


@pytest_asyncio.fixture
async def store(db: SQLiteAdapter, catalog: SQLiteCatalog) -> LedgerStore:
    """LedgerStore (카탈로그 적재 후)"""
    return LedgerStore(db, page_size=3)


@pytest.fixture
def projector(store: LedgerStore) -> StockProjector:
    return StockProjector(store)


@pytest.fixture
def sequencer(db: SQLiteAdapter) -> DocumentSequencer:
    return DocumentSequencer(db)


@pytest.fixture
def opname(
    db: SQLiteAdapter,
    store: LedgerStore,
    projector: StockProjector,
    catalog: SQLiteCatalog,
) -> OpnameManager:
    return OpnameManager(db, store, projector, catalog)
