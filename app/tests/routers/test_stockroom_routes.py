from uuid import uuid4

import pytest

API = "/api/v1"
ACTOR = {"X-Stockroom-Actor": "manager-1"}


class TestInventoryRoutes:
    """Test cases for the inventory endpoints"""

    @pytest.fixture(autouse=True)
    def setup_client(self, client):
        self.client = client

    async def _create(self, **payload):
        response = await self.client.post(f"{API}/inventory/items", json=payload, headers=ACTOR)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    async def test_create_and_get_item(self):
        item = await self._create(name="Gloves", unit="box", min_qty=10, initial_qty=4)

        assert item["qty"] == 4
        assert item["available_qty"] == 4
        assert item["is_low"] is True
        assert item["reorder_qty"] == 6

        response = await self.client.get(f"{API}/inventory/items/{item['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Gloves"

        movements = await self.client.get(f"{API}/inventory/items/{item['id']}/movements")
        assert movements.status_code == 200
        assert movements.json()["data"][0]["actor_id"] == "manager-1"
        assert movements.json()["data"][0]["reason"] == "initial stock"

    async def test_receive_and_issue(self):
        item = await self._create(name="Bleach", unit="bottle", initial_qty=2)

        received = await self.client.post(f"{API}/inventory/items/{item['id']}/receive", json={"qty": 8})
        assert received.status_code == 200
        assert received.json()["data"]["qty"] == 10

        issued = await self.client.post(f"{API}/inventory/items/{item['id']}/issue", json={"qty": 3, "reason": "spill"})
        assert issued.status_code == 200
        assert issued.json()["data"]["qty"] == 7

    async def test_receive_zero_is_a_validation_problem(self):
        item = await self._create(name="Bleach", initial_qty=2)

        response = await self.client.post(f"{API}/inventory/items/{item['id']}/receive", json={"qty": 0})

        assert response.status_code == 422
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["type"].endswith("/errors/validation_error")

    async def test_issue_more_than_available_is_a_conflict(self):
        item = await self._create(name="A", unit="", initial_qty=2)

        response = await self.client.post(f"{API}/inventory/items/{item['id']}/issue", json={"qty": 5})

        assert response.status_code == 409
        problem = response.json()
        assert problem["type"].endswith("/errors/insufficient_stock_error")
        assert problem["detail"] == "A: need 5, only 2 available"
        assert problem["item_name"] == "A"

    async def test_unknown_item_is_not_found(self):
        response = await self.client.get(f"{API}/inventory/items/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["status"] == 404

    async def test_malformed_body(self):
        response = await self.client.post(f"{API}/inventory/items", json={"unit": "box"})

        assert response.status_code == 422
        assert response.headers["content-type"].startswith("application/problem+json")
        problem = response.json()
        assert problem["type"].endswith("/errors/request-validation-failed")
        assert problem["errors"][0]["loc"] == ["body", "name"]

    async def test_list_and_reports(self):
        await self._create(name="Gloves", unit="box", category="ppe", min_qty=10, initial_qty=4)
        await self._create(name="Bleach", unit="bottle", category="chemicals", min_qty=2, initial_qty=8)

        listing = await self.client.get(f"{API}/inventory/items", params={"sort_by": "name"})
        assert listing.status_code == 200
        assert [item["name"] for item in listing.json()["data"]] == ["Bleach", "Gloves"]
        assert listing.json()["meta"] == {"count": 2}

        low = await self.client.get(f"{API}/inventory/items", params={"low_only": "true"})
        assert [item["name"] for item in low.json()["data"]] == ["Gloves"]

        categories = await self.client.get(f"{API}/inventory/categories")
        assert [group["category"] for group in categories.json()["data"]] == ["chemicals", "ppe"]

        reorder = await self.client.get(f"{API}/inventory/reorder")
        assert [item["name"] for item in reorder.json()["data"]] == ["Gloves"]

        export = await self.client.get(f"{API}/inventory/export.csv", params={"sort_by": "name"})
        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/csv")
        assert export.text == "name,unit,qty,min_qty,reserved_qty\nBleach,bottle,8,2,0\nGloves,box,4,10,0\n"

        reorder_export = await self.client.get(f"{API}/inventory/reorder.csv")
        assert reorder_export.text.splitlines() == [
            "name,unit,current_qty,reserved_qty,min_qty,qty_to_order",
            "Gloves,box,4,0,10,6",
        ]

    async def test_unknown_sort_order_is_rejected(self):
        response = await self.client.get(f"{API}/inventory/items", params={"sort_by": "colour"})

        assert response.status_code == 422


class TestSupplyRequestRoutes:
    """Test cases for the supply request endpoints"""

    @pytest.fixture(autouse=True)
    def setup_client(self, client):
        self.client = client

    async def _item(self, name, qty):
        response = await self.client.post(
            f"{API}/inventory/items", json={"name": name, "unit": "", "initial_qty": qty}, headers=ACTOR
        )
        return response.json()["data"]["id"]

    async def _request(self, *lines, track_id="track-1"):
        response = await self.client.post(
            f"{API}/supply-requests",
            json={"track_id": track_id, "items": list(lines), "note": "weekly"},
            headers={"X-Stockroom-Actor": "cleaner-7"},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    async def test_full_workflow(self):
        item_id = await self._item("A", 10)
        request = await self._request({"item": {"kind": "id", "item_id": item_id}, "qty": 3})

        assert request["status"] == "pending"
        assert request["requested_by"] == "cleaner-7"
        assert request["items"] == [{"item_id": item_id, "name": "A", "unit": "", "qty": 3}]

        approved = await self.client.post(f"{API}/supply-requests/{request['id']}/approve", headers=ACTOR)
        assert approved.status_code == 200
        assert approved.json()["data"]["status"] == "approved"
        assert approved.json()["data"]["approved_by"] == "manager-1"

        item = (await self.client.get(f"{API}/inventory/items/{item_id}")).json()["data"]
        assert (item["qty"], item["reserved_qty"], item["available_qty"]) == (10, 3, 7)

        dispatched = await self.client.post(f"{API}/supply-requests/{request['id']}/dispatch", headers=ACTOR)
        assert dispatched.status_code == 200
        assert dispatched.json()["data"]["status"] == "dispatched"

        item = (await self.client.get(f"{API}/inventory/items/{item_id}")).json()["data"]
        assert (item["qty"], item["reserved_qty"]) == (7, 0)

        again = await self.client.post(f"{API}/supply-requests/{request['id']}/dispatch", headers=ACTOR)
        assert again.status_code == 409
        assert again.json()["type"].endswith("/errors/state_error")
        assert again.json()["detail"] == "Request is dispatched."

    async def test_approve_failure_leaves_stock_untouched(self):
        item_id = await self._item("A", 2)
        request = await self._request({"item": {"kind": "name", "name": "a"}, "qty": 5})

        response = await self.client.post(f"{API}/supply-requests/{request['id']}/approve", headers=ACTOR)

        assert response.status_code == 409
        assert response.json()["detail"] == "A: need 5, only 2 available"

        item = (await self.client.get(f"{API}/inventory/items/{item_id}")).json()["data"]
        assert item["reserved_qty"] == 0

    async def test_unapprove_and_cancel(self):
        item_id = await self._item("A", 10)
        request = await self._request({"item": {"kind": "id", "item_id": item_id}, "qty": 4})

        await self.client.post(f"{API}/supply-requests/{request['id']}/approve", headers=ACTOR)
        released = await self.client.post(f"{API}/supply-requests/{request['id']}/unapprove", headers=ACTOR)
        assert released.status_code == 200
        assert released.json()["data"]["status"] == "pending"
        assert released.json()["data"]["reserved_items"] == []

        cancelled = await self.client.post(f"{API}/supply-requests/{request['id']}/cancel", headers=ACTOR)
        assert cancelled.status_code == 200
        assert cancelled.json()["data"]["status"] == "cancelled"
        assert cancelled.json()["data"]["cancelled_by"] == "manager-1"

        item = (await self.client.get(f"{API}/inventory/items/{item_id}")).json()["data"]
        assert (item["qty"], item["reserved_qty"]) == (10, 0)

    async def test_empty_request_is_rejected(self):
        response = await self.client.post(f"{API}/supply-requests", json={"track_id": "track-1", "items": []})

        assert response.status_code == 422
        assert response.json()["detail"] == "No items in request."

    async def test_list_and_get(self):
        item_id = await self._item("A", 10)
        first = await self._request({"item": {"kind": "id", "item_id": item_id}, "qty": 1}, track_id="north")
        await self._request({"item": {"kind": "id", "item_id": item_id}, "qty": 1}, track_id="south")

        listing = await self.client.get(f"{API}/supply-requests", params={"track_id": "north"})
        assert [request["id"] for request in listing.json()["data"]] == [first["id"]]

        pending = await self.client.get(f"{API}/supply-requests", params={"status": "pending"})
        assert pending.json()["meta"] == {"count": 2}

        detail = await self.client.get(f"{API}/supply-requests/{first['id']}")
        assert detail.status_code == 200
        assert detail.json()["data"]["note"] == "weekly"

        missing = await self.client.get(f"{API}/supply-requests/{uuid4()}")
        assert missing.status_code == 404


class TestHealthRoute:
    async def test_health(self, client):
        response = await client.get("/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == {"status": "ok"}
