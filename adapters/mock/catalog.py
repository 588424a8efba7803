"""
Mock 카탈로그

테스트용 인메모리 카탈로그.
ICatalogReader Protocol 준수.
"""

from core.domain.catalog import Item, Location


class MockCatalog:
    """Mock 카탈로그

    ICatalogReader Protocol 구현.

    사용 예시:
    ```python
    catalog = MockCatalog(
        items=[Item(id=1, name="Kopi", min_stock=Decimal("10"), default_location_id=1)],
        locations=[Location(id=1, name="Gudang")],
    )
    item = await catalog.get_item(1)
    ```
    """

    def __init__(
        self,
        items: list[Item] | None = None,
        locations: list[Location] | None = None,
    ):
        self.items: dict[int, Item] = {item.id: item for item in items or []}
        self.locations: dict[int, Location] = {loc.id: loc for loc in locations or []}

    def add_item(self, item: Item) -> None:
        self.items[item.id] = item

    def add_location(self, location: Location) -> None:
        self.locations[location.id] = location

    async def get_item(self, item_id: int) -> Item | None:
        return self.items.get(item_id)

    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        return {i: self.items[i] for i in item_ids if i in self.items}

    async def list_active_items(
        self,
        category_ids: list[int] | None = None,
        item_ids: list[int] | None = None,
    ) -> list[Item]:
        result = []
        for item_id in sorted(self.items):
            item = self.items[item_id]
            if not item.is_active:
                continue
            if category_ids is not None and item.category_id not in category_ids:
                continue
            if item_ids is not None and item.id not in item_ids:
                continue
            result.append(item)
        return result

    async def get_location(self, location_id: int) -> Location | None:
        return self.locations.get(location_id)

    async def list_locations(self, active_only: bool = True) -> list[Location]:
        return [
            self.locations[i]
            for i in sorted(self.locations)
            if self.locations[i].is_active or not active_only
        ]
