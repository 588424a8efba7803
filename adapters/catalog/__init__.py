"""
카탈로그 어댑터

items / locations 테이블 읽기 (카탈로그 동기화용 저장 포함).
"""

from adapters.catalog.sqlite_catalog import SQLiteCatalog

__all__ = [
    "SQLiteCatalog",
]
