"""
카탈로그 도메인 모델

Item / Location은 외부 카탈로그가 소유하며 여기서는 읽기 전용.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Item:
    """품목 (읽기 전용)"""

    id: int
    name: str
    sku: str | None = None
    category_id: int | None = None
    unit: str = "pcs"
    cost_price: Decimal = Decimal("0")
    selling_price: Decimal | None = None
    min_stock: Decimal = Decimal("0")
    default_location_id: int | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Location:
    """재고 위치 (창고, 아울렛 등)"""

    id: int
    name: str
    type: str | None = None
    is_active: bool = True
