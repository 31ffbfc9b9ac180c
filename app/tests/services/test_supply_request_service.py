from uuid import uuid4

import pytest
from stockroom.core.exceptions import errors
from stockroom.domain.enums import SupplyRequestStatus
from stockroom.domain.schemas import ById, ByName, SupplyRequestLineInput
from stockroom.domain.services.inventory_service import InventoryService
from stockroom.domain.services.supply_request_service import SupplyRequestService


@pytest.fixture
async def catalog(session, live_query):
    inventory_service = InventoryService(session, live_query=live_query)

    gloves = await inventory_service.create_item("Gloves", unit="box", initial_qty=10)
    bleach = await inventory_service.create_item("Bleach", unit="bottle", initial_qty=5)
    return {"gloves": gloves.id, "bleach": bleach.id}


class TestSupplyRequestService:
    """Test cases for SupplyRequestService"""

    @pytest.fixture(autouse=True)
    def setup_service(self, session, live_query, catalog):
        self.inventory_service = InventoryService(session, live_query=live_query)
        self.supply_request_service = SupplyRequestService(session, live_query=live_query)
        self.gloves_id = catalog["gloves"]
        self.bleach_id = catalog["bleach"]

    async def test_create_resolves_lines_by_id_and_name(self):
        request = await self.supply_request_service.create_supply_request(
            track_id="track-7",
            items=[
                SupplyRequestLineInput(item=ById(item_id=self.gloves_id), qty=2),
                SupplyRequestLineInput(item=ByName(name="  BLEACH"), qty=1),
            ],
            note="for the weekend",
            requested_by="dana",
        )

        assert request.status == SupplyRequestStatus.PENDING
        assert request.track_id == "track-7"
        assert request.requested_by == "dana"
        assert request.reserved_items == []
        assert request.items == [
            {"item_id": str(self.gloves_id), "name": "Gloves", "unit": "box", "qty": 2},
            {"item_id": str(self.bleach_id), "name": "Bleach", "unit": "bottle", "qty": 1},
        ]

    async def test_create_accepts_plain_dicts(self):
        request = await self.supply_request_service.create_supply_request(
            track_id="track-1",
            items=[{"item": {"kind": "name", "name": "gloves"}, "qty": 3}],
        )

        assert request.items[0]["item_id"] == str(self.gloves_id)
        assert request.items[0]["qty"] == 3

    async def test_create_merges_duplicate_items(self):
        """Test that lines for the same item are summed in the position of the first one."""
        request = await self.supply_request_service.create_supply_request(
            track_id="track-1",
            items=[
                SupplyRequestLineInput(item=ByName(name="Gloves"), qty=2),
                SupplyRequestLineInput(item=ById(item_id=self.bleach_id), qty=1),
                SupplyRequestLineInput(item=ById(item_id=self.gloves_id), qty=3),
            ],
        )

        assert [(line["name"], line["qty"]) for line in request.items] == [("Gloves", 5), ("Bleach", 1)]

    async def test_create_drops_unknown_and_non_positive_lines(self):
        request = await self.supply_request_service.create_supply_request(
            track_id="track-1",
            items=[
                SupplyRequestLineInput(item=ByName(name="Unicorn Dust"), qty=2),
                SupplyRequestLineInput(item=ById(item_id=uuid4()), qty=2),
                SupplyRequestLineInput(item=ById(item_id=self.bleach_id), qty=0),
                SupplyRequestLineInput(item=ById(item_id=self.gloves_id), qty=1),
            ],
        )

        assert [line["name"] for line in request.items] == ["Gloves"]

    async def test_create_drops_malformed_lines(self):
        request = await self.supply_request_service.create_supply_request(
            track_id="track-1",
            items=[
                {"item": {"kind": "id", "item_id": "nope"}, "qty": 1},
                {"item": {"name": "Bleach"}, "qty": 1},
                {"item": {"kind": "name", "name": "gloves"}, "qty": 2},
            ],
        )

        assert [(line["name"], line["qty"]) for line in request.items] == [("Gloves", 2)]

    async def test_create_rejects_when_every_line_is_malformed(self):
        with pytest.raises(errors.ValidationError) as exc_info:
            await self.supply_request_service.create_supply_request(
                track_id="track-1",
                items=[{"item": {"kind": "id", "item_id": "nope"}, "qty": 1}],
            )

        assert exc_info.value.detail == "No items in request."
        assert await self.supply_request_service.list_requests() == []

    async def test_create_rejects_empty_list(self):
        with pytest.raises(errors.ValidationError) as exc_info:
            await self.supply_request_service.create_supply_request(track_id="track-1", items=[])

        assert exc_info.value.detail == "No items in request."

    async def test_create_rejects_when_nothing_survives_cleaning(self):
        with pytest.raises(errors.ValidationError):
            await self.supply_request_service.create_supply_request(
                track_id="track-1",
                items=[SupplyRequestLineInput(item=ByName(name="Nothing"), qty=4)],
            )

        assert await self.supply_request_service.list_requests() == []

    async def test_create_requires_a_track(self):
        with pytest.raises(errors.ValidationError):
            await self.supply_request_service.create_supply_request(
                track_id="  ",
                items=[SupplyRequestLineInput(item=ById(item_id=self.gloves_id), qty=1)],
            )

    async def test_cancel_pending_request(self):
        request = await self.supply_request_service.create_supply_request(
            track_id="track-1",
            items=[SupplyRequestLineInput(item=ById(item_id=self.gloves_id), qty=4)],
        )

        cancelled = await self.supply_request_service.cancel(request.id, actor="erin")

        assert cancelled.status == SupplyRequestStatus.CANCELLED
        assert cancelled.cancelled_by == "erin"
        assert cancelled.cancelled_at is not None

        gloves = await self.inventory_service.get_item(self.gloves_id)
        assert gloves.qty == 10
        assert gloves.reserved_qty == 0

    async def test_cancel_is_only_allowed_from_pending(self):
        request = await self.supply_request_service.create_supply_request(
            track_id="track-1",
            items=[SupplyRequestLineInput(item=ById(item_id=self.gloves_id), qty=4)],
        )
        request_id = request.id
        await self.supply_request_service.approve(request_id)

        with pytest.raises(errors.StateError) as exc_info:
            await self.supply_request_service.cancel(request_id)

        assert exc_info.value.detail == "Request is already approved."

    async def test_cancelled_request_cannot_be_approved(self):
        request = await self.supply_request_service.create_supply_request(
            track_id="track-1",
            items=[SupplyRequestLineInput(item=ById(item_id=self.gloves_id), qty=4)],
        )
        request_id = request.id
        await self.supply_request_service.cancel(request_id)

        with pytest.raises(errors.StateError):
            await self.supply_request_service.approve(request_id)

        stored = await self.supply_request_service.get_request(request_id)
        assert stored.status == SupplyRequestStatus.CANCELLED

    async def test_list_requests_filters(self):
        first = await self.supply_request_service.create_supply_request(
            track_id="track-1",
            items=[SupplyRequestLineInput(item=ById(item_id=self.gloves_id), qty=1)],
        )
        second = await self.supply_request_service.create_supply_request(
            track_id="track-2",
            items=[SupplyRequestLineInput(item=ById(item_id=self.bleach_id), qty=1)],
        )
        first_id, second_id = first.id, second.id
        await self.supply_request_service.approve(second_id)

        by_track = await self.supply_request_service.list_requests(track_id="track-1")
        assert [request.id for request in by_track] == [first_id]

        approved = await self.supply_request_service.list_requests(status=SupplyRequestStatus.APPROVED)
        assert [request.id for request in approved] == [second_id]

        assert {request.id for request in await self.supply_request_service.list_requests()} == {first_id, second_id}

    async def test_get_unknown_request(self):
        with pytest.raises(errors.NotFoundError):
            await self.supply_request_service.get_request(uuid4())
