"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from typing import Protocol, runtime_checkable

from core.domain.catalog import Item, Location


@runtime_checkable
class ICatalogReader(Protocol):
    """카탈로그 조회 인터페이스

    품목/위치는 외부 카탈로그가 소유하며 Ledger는 읽기만 함.
    금액/수량은 반드시 Decimal 타입 사용.
    """

    async def get_item(self, item_id: int) -> Item | None:
        """품목 조회

        Args:
            item_id: 품목 ID

        Returns:
            Item 또는 None (없음)
        """
        ...

    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        """여러 품목 일괄 조회

        Returns:
            {item_id: Item} (없는 ID는 제외)
        """
        ...

    async def list_active_items(
        self,
        category_ids: list[int] | None = None,
        item_ids: list[int] | None = None,
    ) -> list[Item]:
        """활성 품목 목록 (id 오름차순)

        Args:
            category_ids: 카테고리 필터 (None이면 전체)
            item_ids: 품목 필터 (None이면 전체)
        """
        ...

    async def get_location(self, location_id: int) -> Location | None:
        """위치 조회"""
        ...

    async def list_locations(self, active_only: bool = True) -> list[Location]:
        """위치 목록 (id 오름차순)"""
        ...
