import asyncio

import pytest
from stockroom.core.exceptions import errors
from stockroom.domain.enums import MovementType, SupplyRequestStatus
from stockroom.domain.schemas import ById, ByName, SupplyRequestLineInput
from stockroom.domain.services.inventory_service import InventoryService
from stockroom.domain.services.supply_request_service import SupplyRequestService


def line(item_id, qty):
    return SupplyRequestLineInput(item=ById(item_id=item_id), qty=qty)


class TestReservationService:
    """Test cases for the approve, dispatch and unapprove protocols"""

    @pytest.fixture(autouse=True)
    def setup_service(self, session, live_query):
        self.session = session
        self.live_query = live_query
        self.inventory_service = InventoryService(session, live_query=live_query)
        self.supply_request_service = SupplyRequestService(session, live_query=live_query)

    async def _item(self, name, qty, unit=""):
        item = await self.inventory_service.create_item(name, unit=unit, initial_qty=qty)
        return item.id

    async def _request(self, *lines, track_id="track-1"):
        request = await self.supply_request_service.create_supply_request(track_id=track_id, items=list(lines))
        return request.id

    async def test_approve_reserves_every_line(self):
        a_id = await self._item("A", 10)
        b_id = await self._item("B", 5)
        request_id = await self._request(line(a_id, 3), line(b_id, 5))

        approved = await self.supply_request_service.approve(request_id, actor="manager")

        assert approved.status == SupplyRequestStatus.APPROVED
        assert approved.approved_by == "manager"
        assert approved.approved_at is not None
        assert [(entry["name"], entry["qty"]) for entry in approved.reserved_items] == [("A", 3), ("B", 5)]

        a = await self.inventory_service.get_item(a_id)
        b = await self.inventory_service.get_item(b_id)
        assert (a.qty, a.reserved_qty) == (10, 3)
        assert (b.qty, b.reserved_qty) == (5, 5)

    async def test_approve_is_all_or_nothing(self):
        """Test that a short line leaves every item and the request untouched."""
        a_id = await self._item("A", 2)
        b_id = await self._item("B", 10)
        request_id = await self._request(line(b_id, 4), line(a_id, 5))

        with pytest.raises(errors.InsufficientStockError) as exc_info:
            await self.supply_request_service.approve(request_id)

        assert exc_info.value.detail == "A: need 5, only 2 available"
        assert exc_info.value.item_name == "A"

        a = await self.inventory_service.get_item(a_id)
        b = await self.inventory_service.get_item(b_id)
        assert a.reserved_qty == 0
        assert b.reserved_qty == 0

        request = await self.supply_request_service.get_request(request_id)
        assert request.status == SupplyRequestStatus.PENDING
        assert request.reserved_items == []

    async def test_insufficient_stock_message_includes_unit(self):
        item_id = await self._item("Gloves", 1, unit="box")
        request_id = await self._request(line(item_id, 3))

        with pytest.raises(errors.InsufficientStockError) as exc_info:
            await self.supply_request_service.approve(request_id)

        assert exc_info.value.detail == "Gloves: need 3 box, only 1 available"

    async def test_approve_counts_reservations_of_other_requests(self):
        a_id = await self._item("A", 5)
        first_id = await self._request(line(a_id, 4))
        second_id = await self._request(line(a_id, 2))

        await self.supply_request_service.approve(first_id)

        with pytest.raises(errors.InsufficientStockError) as exc_info:
            await self.supply_request_service.approve(second_id)

        assert exc_info.value.available == 1

    async def test_approve_fails_when_item_was_removed_from_catalog(self):
        a_id = await self._item("A", 0)
        request_id = await self._request(line(a_id, 1))

        a = await self.inventory_service.get_item(a_id)
        await self.session.delete(a)
        await self.session.commit()

        with pytest.raises(errors.ResolutionError) as exc_info:
            await self.supply_request_service.approve(request_id)

        assert exc_info.value.detail == 'Cannot resolve inventory item for "A".'

    async def test_approve_falls_back_to_name(self):
        """Test that a line whose item was re-created under the same name still resolves."""
        old_id = await self._item("Mop", 0)
        request_id = await self._request(SupplyRequestLineInput(item=ByName(name="mop"), qty=2))

        old = await self.inventory_service.get_item(old_id)
        await self.session.delete(old)
        await self.session.commit()
        new_id = await self._item("Mop", 3)

        approved = await self.supply_request_service.approve(request_id)

        assert approved.reserved_items[0]["item_id"] == str(new_id)
        new = await self.inventory_service.get_item(new_id)
        assert new.reserved_qty == 2

    async def test_approve_twice_is_a_state_error(self):
        a_id = await self._item("A", 5)
        request_id = await self._request(line(a_id, 1))
        await self.supply_request_service.approve(request_id)

        with pytest.raises(errors.StateError) as exc_info:
            await self.supply_request_service.approve(request_id)

        assert exc_info.value.detail == "Request is already approved."
        a = await self.inventory_service.get_item(a_id)
        assert a.reserved_qty == 1

    async def test_dispatch_conserves_stock(self):
        """Test that dispatch removes the reserved units from both on-hand and reserved."""
        a_id = await self._item("A", 10)
        request_id = await self._request(line(a_id, 3), track_id="north")
        await self.supply_request_service.approve(request_id)

        dispatched = await self.supply_request_service.dispatch(request_id, actor="storekeeper")

        assert dispatched.status == SupplyRequestStatus.DISPATCHED
        assert dispatched.dispatched_by == "storekeeper"
        assert dispatched.dispatched_at is not None

        a = await self.inventory_service.get_item(a_id)
        assert (a.qty, a.reserved_qty) == (7, 0)

        movements = await self.inventory_service.list_movements(a_id)
        issues = [movement for movement in movements if movement.movement_type == MovementType.ISSUE]
        assert len(issues) == 1
        assert issues[0].qty == 3
        assert issues[0].reason == "dispatch:north"
        assert issues[0].actor_id == "storekeeper"

    async def test_dispatch_requires_approval(self):
        a_id = await self._item("A", 10)
        request_id = await self._request(line(a_id, 3))

        with pytest.raises(errors.StateError) as exc_info:
            await self.supply_request_service.dispatch(request_id)

        assert exc_info.value.detail == "Request is pending."
        a = await self.inventory_service.get_item(a_id)
        assert a.qty == 10
        assert len(await self.inventory_service.list_movements(a_id)) == 1

    async def test_dispatched_request_is_final(self):
        a_id = await self._item("A", 10)
        request_id = await self._request(line(a_id, 3))
        await self.supply_request_service.approve(request_id)
        await self.supply_request_service.dispatch(request_id)

        for transition in (
            self.supply_request_service.dispatch,
            self.supply_request_service.unapprove,
            self.supply_request_service.approve,
            self.supply_request_service.cancel,
        ):
            with pytest.raises(errors.StateError):
                await transition(request_id)

        a = await self.inventory_service.get_item(a_id)
        assert (a.qty, a.reserved_qty) == (7, 0)

    async def test_dispatch_underflow(self):
        """Test that dispatch refuses to drive reserved stock negative."""
        a_id = await self._item("A", 10)
        request_id = await self._request(line(a_id, 3))
        await self.supply_request_service.approve(request_id)

        a = await self.inventory_service.get_item(a_id)
        a.reserved_qty = 1
        self.session.add(a)
        await self.session.commit()

        with pytest.raises(errors.StockUnderflowError) as exc_info:
            await self.supply_request_service.dispatch(request_id)

        assert exc_info.value.detail == "A: reservation underflow."
        assert exc_info.value.status == 500

        request = await self.supply_request_service.get_request(request_id)
        assert request.status == SupplyRequestStatus.APPROVED

    async def test_unapprove_restores_pre_approval_state(self):
        a_id = await self._item("A", 10)
        b_id = await self._item("B", 4)
        request_id = await self._request(line(a_id, 3), line(b_id, 4))
        await self.supply_request_service.approve(request_id, actor="manager")

        released = await self.supply_request_service.unapprove(request_id)

        assert released.status == SupplyRequestStatus.PENDING
        assert released.approved_at is None
        assert released.approved_by is None
        assert released.reserved_items == []

        a = await self.inventory_service.get_item(a_id)
        b = await self.inventory_service.get_item(b_id)
        assert (a.qty, a.reserved_qty) == (10, 0)
        assert (b.qty, b.reserved_qty) == (4, 0)

        reapproved = await self.supply_request_service.approve(request_id)
        assert reapproved.status == SupplyRequestStatus.APPROVED

    async def test_unapprove_requires_approval(self):
        a_id = await self._item("A", 10)
        request_id = await self._request(line(a_id, 3))

        with pytest.raises(errors.StateError):
            await self.supply_request_service.unapprove(request_id)

    async def test_unapprove_underflow(self):
        a_id = await self._item("A", 10)
        request_id = await self._request(line(a_id, 3))
        await self.supply_request_service.approve(request_id)

        a = await self.inventory_service.get_item(a_id)
        a.reserved_qty = 2
        self.session.add(a)
        await self.session.commit()

        with pytest.raises(errors.StockUnderflowError) as exc_info:
            await self.supply_request_service.unapprove(request_id)

        assert exc_info.value.detail == "A: reservation underflow on release."

    async def test_issue_cannot_take_reserved_stock(self):
        a_id = await self._item("A", 10)
        request_id = await self._request(line(a_id, 8))
        await self.supply_request_service.approve(request_id)

        with pytest.raises(errors.InsufficientStockError):
            await self.inventory_service.issue_stock(a_id, 3)

        a = await self.inventory_service.get_item(a_id)
        assert (a.qty, a.reserved_qty) == (10, 8)


class TestConcurrentApprovals:
    """Two clients approving against the same stock at the same time"""

    async def test_only_one_of_two_competing_approvals_wins(self, session, other_session, live_query):
        inventory_service = InventoryService(session, live_query=live_query)
        supply_request_service = SupplyRequestService(session, live_query=live_query)

        item = await inventory_service.create_item("A", unit="", initial_qty=5)
        item_id = item.id
        first = await supply_request_service.create_supply_request("track-1", [line(item_id, 4)])
        second = await supply_request_service.create_supply_request("track-2", [line(item_id, 4)])
        first_id, second_id = first.id, second.id

        results = await asyncio.gather(
            SupplyRequestService(session, live_query=live_query).approve(first_id),
            SupplyRequestService(other_session, live_query=live_query).approve(second_id),
            return_exceptions=True,
        )

        failures = [result for result in results if isinstance(result, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], errors.InsufficientStockError)
        assert str(failures[0]) == "A: need 4, only 1 available"

        stored = await inventory_service.get_item(item_id)
        assert stored.qty == 5
        assert stored.reserved_qty == 4

        statuses = sorted(
            [
                (await supply_request_service.get_request(first_id)).status,
                (await supply_request_service.get_request(second_id)).status,
            ]
        )
        assert statuses == ["approved", "pending"]

    async def test_competing_approvals_that_both_fit(self, session, other_session, live_query):
        inventory_service = InventoryService(session, live_query=live_query)
        supply_request_service = SupplyRequestService(session, live_query=live_query)

        item = await inventory_service.create_item("A", initial_qty=10)
        item_id = item.id
        first = await supply_request_service.create_supply_request("track-1", [line(item_id, 4)])
        second = await supply_request_service.create_supply_request("track-2", [line(item_id, 5)])
        first_id, second_id = first.id, second.id

        await asyncio.gather(
            SupplyRequestService(session, live_query=live_query).approve(first_id),
            SupplyRequestService(other_session, live_query=live_query).approve(second_id),
        )

        stored = await inventory_service.get_item(item_id)
        assert stored.reserved_qty == 9
        assert stored.version == 3
