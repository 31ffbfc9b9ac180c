import pytest
from stockroom.domain.enums import StockSortOrder
from stockroom.domain.schemas import ById, SupplyRequestLineInput
from stockroom.domain.services.inventory_service import InventoryService
from stockroom.domain.services.stock_report_service import StockReportService
from stockroom.domain.services.supply_request_service import SupplyRequestService


@pytest.fixture
async def stocked(session, live_query):
    inventory_service = InventoryService(session, live_query=live_query)

    await inventory_service.create_item("Gloves", unit="box", category="ppe", min_qty=10, initial_qty=4)
    await inventory_service.create_item("Bleach", unit="bottle", category="chemicals", min_qty=2, initial_qty=8)
    await inventory_service.create_item("Mop Heads", unit="pcs", min_qty=0, initial_qty=1)
    sponges = await inventory_service.create_item("Sponges, large", unit="pack", min_qty=5, initial_qty=6)
    return {"sponges": sponges.id}


class TestStockReportService:
    """Test cases for StockReportService"""

    @pytest.fixture(autouse=True)
    def setup_service(self, session, live_query, stocked):
        self.session = session
        self.live_query = live_query
        self.report_service = StockReportService(session)
        self.sponges_id = stocked["sponges"]

    async def test_default_order_is_gap_to_minimum(self):
        items = await self.report_service.search_items()

        assert [item.name for item in items] == ["Gloves", "Mop Heads", "Sponges, large", "Bleach"]

    async def test_sort_orders(self):
        by_qty = await self.report_service.search_items(sort_by=StockSortOrder.QTY_ASC)
        assert [item.qty for item in by_qty] == [1, 4, 6, 8]

        by_qty_desc = await self.report_service.search_items(sort_by=StockSortOrder.QTY_DESC)
        assert [item.qty for item in by_qty_desc] == [8, 6, 4, 1]

        by_name = await self.report_service.search_items(sort_by="name")
        assert [item.name for item in by_name] == ["Bleach", "Gloves", "Mop Heads", "Sponges, large"]

    async def test_low_only(self):
        items = await self.report_service.search_items(low_only=True)

        assert [item.name for item in items] == ["Gloves"]

    async def test_search_matches_name_unit_and_category(self):
        assert [item.name for item in await self.report_service.search_items(search="BOTTLE")] == ["Bleach"]
        assert [item.name for item in await self.report_service.search_items(search="ppe")] == ["Gloves"]
        assert [item.name for item in await self.report_service.search_items(search=" mop ")] == ["Mop Heads"]
        assert await self.report_service.search_items(search="nothing like it") == []

    async def test_category_filter(self):
        items = await self.report_service.search_items(category="chemicals")

        assert [item.name for item in items] == ["Bleach"]

    async def test_group_by_category(self):
        items = await self.report_service.search_items(sort_by=StockSortOrder.NAME)

        groups = self.report_service.group_by_category(items)

        assert [(label, [item.name for item in grouped]) for label, grouped in groups] == [
            ("chemicals", ["Bleach"]),
            ("General", ["Mop Heads", "Sponges, large"]),
            ("ppe", ["Gloves"]),
        ]

    async def test_reorder_list_counts_reserved_stock(self):
        """Test that reserved units do not count towards the minimum."""
        supply_request_service = SupplyRequestService(self.session, live_query=self.live_query)
        request = await supply_request_service.create_supply_request(
            track_id="track-1",
            items=[SupplyRequestLineInput(item=ById(item_id=self.sponges_id), qty=3)],
        )
        await supply_request_service.approve(request.id)

        items = await self.report_service.reorder_list()

        assert [(item.name, item.reorder_qty) for item in items] == [("Gloves", 6), ("Sponges, large", 2)]

    async def test_export_items_csv(self):
        items = await self.report_service.search_items(sort_by=StockSortOrder.NAME)

        content = self.report_service.export_items_csv(items)

        assert content == (
            "name,unit,qty,min_qty,reserved_qty\n"
            "Bleach,bottle,8,2,0\n"
            "Gloves,box,4,10,0\n"
            "Mop Heads,pcs,1,0,0\n"
            '"Sponges, large",pack,6,5,0\n'
        )

    async def test_export_reorder_csv(self):
        content = await self.report_service.export_reorder_csv()

        assert content == "name,unit,current_qty,reserved_qty,min_qty,qty_to_order\nGloves,box,4,0,10,6\n"

    async def test_export_items_csv_with_no_items(self):
        assert self.report_service.export_items_csv([]) == "name,unit,qty,min_qty,reserved_qty\n"
