from collections.abc import Iterable
from uuid import UUID

from stockroom.core.helpers.misc import normalize_name
from stockroom.domain.models.inventory_item import InventoryItem
from stockroom.domain.repositories.inventory_item_repository import InventoryItemRepository
from stockroom.domain.schemas import ById, ByName, SupplyRequestLine


class CatalogIndex:
    """
    Lookup of catalog items by id and by case-insensitive name.

    An index is a snapshot, build a new one inside every transaction that resolves lines.
    """

    def __init__(self, items: Iterable[InventoryItem]) -> None:
        self._by_id: dict[UUID, InventoryItem] = {}
        self._by_name: dict[str, InventoryItem] = {}

        for item in items:
            self._by_id[item.id] = item
            self._by_name.setdefault(normalize_name(item.name), item)

    @classmethod
    async def build(cls, repository: InventoryItemRepository) -> "CatalogIndex":
        """Load the whole catalog as currently stored."""
        return cls(await repository.list_items(fresh=True))

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, item_id: UUID) -> InventoryItem | None:
        return self._by_id.get(item_id)

    def find_by_name(self, name: str) -> InventoryItem | None:
        key = normalize_name(name)
        return self._by_name.get(key) if key else None

    def resolve(self, reference: ById | ByName) -> InventoryItem | None:
        if isinstance(reference, ById):
            return self.get(reference.item_id)

        return self.find_by_name(reference.name)

    def resolve_line(self, line: SupplyRequestLine) -> InventoryItem | None:
        """Resolve a stored line by its item id, falling back to its name."""
        return self.get(line.item_id) or self.find_by_name(line.name)
