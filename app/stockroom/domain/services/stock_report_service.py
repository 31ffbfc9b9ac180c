from collections.abc import Iterable

from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.constants import DEFAULT_CATEGORY, DEFAULT_CATEGORY_LABEL
from stockroom.core.helpers.misc import to_csv
from stockroom.core.logging import get_logger
from stockroom.domain.enums import StockSortOrder
from stockroom.domain.models.inventory_item import InventoryItem
from stockroom.domain.repositories.inventory_item_repository import InventoryItemRepository

logger = get_logger(__name__)

ITEMS_CSV_HEADER = ("name", "unit", "qty", "min_qty", "reserved_qty")
REORDER_CSV_HEADER = ("name", "unit", "current_qty", "reserved_qty", "min_qty", "qty_to_order")


class StockReportService:
    """
    Read-only views over the catalog: filtered listings, category groups,
    the reorder list and their CSV exports.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.item_repository = InventoryItemRepository(session)

    async def search_items(
        self,
        search: str | None = None,
        low_only: bool = False,
        sort_by: StockSortOrder = StockSortOrder.MIN_GAP,
        category: str | None = None,
    ) -> list[InventoryItem]:
        """
        List catalog items for the stock room view.

        Args:
            search: case-insensitive substring matched against "name unit category"
            low_only: keep only items at or below their minimum
            sort_by: listing order, items closest to their minimum first by default
            category: restrict to one category

        Returns:
            list[InventoryItem]: the matching items
        """
        items = await self.item_repository.list_items(category=category or None, fresh=True)

        if low_only:
            items = [item for item in items if item.is_low]

        needle = (search or "").strip().lower()
        if needle:
            items = [item for item in items if needle in f"{item.name} {item.unit} {item.category}".lower()]

        return self._sort(items, StockSortOrder(sort_by))

    @staticmethod
    def _sort(items: list[InventoryItem], sort_by: StockSortOrder) -> list[InventoryItem]:
        match sort_by:
            case StockSortOrder.QTY_ASC:
                return sorted(items, key=lambda item: item.qty)
            case StockSortOrder.QTY_DESC:
                return sorted(items, key=lambda item: item.qty, reverse=True)
            case StockSortOrder.NAME:
                return sorted(items, key=lambda item: item.name.lower())
            case _:
                return sorted(items, key=lambda item: item.qty - item.min_qty)

    @staticmethod
    def category_label(category: str | None) -> str:
        """Display label of a category, blank and default categories file under "General"."""
        value = (category or "").strip()
        if not value or value.lower() == DEFAULT_CATEGORY:
            return DEFAULT_CATEGORY_LABEL

        return value

    @classmethod
    def group_by_category(cls, items: Iterable[InventoryItem]) -> list[tuple[str, list[InventoryItem]]]:
        """
        Group items by category label, keeping the order of `items` inside each group.

        Groups are sorted by label.
        """
        groups: dict[str, list[InventoryItem]] = {}
        for item in items:
            groups.setdefault(cls.category_label(item.category), []).append(item)

        return sorted(groups.items(), key=lambda group: group[0].lower())

    async def reorder_list(self) -> list[InventoryItem]:
        """Items with a minimum set whose available stock has fallen below it."""
        items = await self.item_repository.list_items(fresh=True)
        return [item for item in items if item.min_qty > 0 and item.reorder_qty > 0]

    @staticmethod
    def export_items_csv(items: Iterable[InventoryItem]) -> str:
        return to_csv(
            ITEMS_CSV_HEADER,
            ((item.name, item.unit, item.qty, item.min_qty, item.reserved_qty) for item in items),
        )

    async def export_reorder_csv(self) -> str:
        items = await self.reorder_list()

        logger.info(f"stockroom.domain.services.stock_report_service.export_reorder_csv:: exporting {len(items)} item(s)")

        return to_csv(
            REORDER_CSV_HEADER,
            (
                (item.name, item.unit, item.qty, item.reserved_qty, item.min_qty, item.reorder_qty)
                for item in items
            ),
        )
