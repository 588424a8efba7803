"""
어댑터 테스트 픽스처

Mock 카탈로그 등 어댑터 공통 픽스처 제공.
"""

import pytest

from adapters.mock.catalog import MockCatalog
from tests.catalog_data import SAMPLE_ITEMS, SAMPLE_LOCATIONS


@pytest.fixture
def mock_catalog() -> MockCatalog:
    """샘플 데이터가 들어 있는 Mock 카탈로그"""
    return MockCatalog(items=SAMPLE_ITEMS, locations=SAMPLE_LOCATIONS)
