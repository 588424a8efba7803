"""
Web 테스트 픽스처

임시 DB 경로로 앱 서비스 / TestClient 구성.
"""

import asyncio
from pathlib import Path
from typing import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from adapters.catalog.sqlite_catalog import SQLiteCatalog
from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import AppConfig
from tests.catalog_data import SAMPLE_ITEMS, SAMPLE_LOCATIONS
from web.app import create_app
from web.dependencies import LedgerServices, build_services


async def seed_catalog(db_path: Path) -> None:
    """별도 연결로 샘플 카탈로그 적재"""
    async with SQLiteAdapter(db_path) as adapter:
        await init_schema(adapter)
        catalog = SQLiteCatalog(adapter)
        for location in SAMPLE_LOCATIONS:
            await catalog.save_location(location)
        for item in SAMPLE_ITEMS:
            await catalog.save_item(item)


@pytest.fixture
def web_config(tmp_path: Path) -> AppConfig:
    return AppConfig(db_path=tmp_path / "web_stockledger.db")


@pytest_asyncio.fixture
async def services(web_config: AppConfig) -> AsyncGenerator[LedgerServices, None]:
    """샘플 카탈로그가 적재된 앱 서비스"""
    await seed_catalog(web_config.db_path)
    services = await build_services(web_config)
    yield services
    await services.close()


@pytest.fixture
def client(web_config: AppConfig) -> Iterator[TestClient]:
    """lifespan이 실행된 TestClient"""
    asyncio.run(seed_catalog(web_config.db_path))
    app = create_app(web_config)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def principal() -> dict[str, str]:
    return {"X-Principal-Id": "user-1"}
