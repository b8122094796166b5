"""Sales plans and shipments."""

import json
from datetime import date

import pytest
from sqlmodel import select

from battery_scm.errors import InvalidInputError, InvalidTransitionError, NotFoundError
from battery_scm.models import Event, FinishedGoods, Product
from battery_scm.services import dispatch, sales_plans, shipments
from battery_scm.services.status import check_transition


@pytest.fixture
def products(session):
    session.add(Product(code="EV-100", name="EV Battery Module", category="EV", destination="Ulsan"))
    session.add(Product(code="ESS-001", name="ESS Rack", category="ESS"))
    session.commit()
    return session


def _plan(session, year_month="2025-12", customer="Hyundai Motor", product_code="EV-100", qty=100):
    return sales_plans.create_sales_plan(
        session,
        {"year_month": year_month, "customer": customer, "product_code": product_code,
         "planned_quantity": qty, "planned_revenue": qty * 8_000_000.0},
    )


class TestSalesPlans:
    def test_create_derives_id_and_product(self, products):
        plan = _plan(products)
        assert plan.id == "SP-2025-12-Hyundai Motor-EV-100"
        assert plan.product == "EV Battery Module"
        assert plan.category == "EV"
        assert plan.status == "draft"

    def test_duplicate_rejected(self, products):
        _plan(products)
        with pytest.raises(InvalidInputError):
            _plan(products)

    def test_unknown_product(self, products):
        with pytest.raises(NotFoundError):
            _plan(products, product_code="NOPE")

    def test_list_filters(self, products):
        _plan(products, year_month="2025-11")
        _plan(products, year_month="2025-12")
        _plan(products, year_month="2026-01", customer="Kia")
        _plan(products, year_month="2025-12", product_code="ESS-001")

        assert len(sales_plans.list_sales_plans(products, year_month="2025-12")) == 2
        assert len(sales_plans.list_sales_plans(products, year=2025)) == 3
        assert [p.customer for p in sales_plans.list_sales_plans(products, customer="Kia")] == ["Kia"]
        assert sales_plans.list_sales_plans(products, status="approved") == []

    def test_update_records_history(self, products):
        plan = _plan(products, qty=100)
        sales_plans.update_sales_plan(
            products, plan.id, {"planned_quantity": 120, "planned_revenue": 960_000_000.0},
            changed_by="kim", change_reason="customer forecast raised",
        )

        [row] = sales_plans.list_history(products, sales_plan_id=plan.id)
        assert (row.previous_quantity, row.new_quantity) == (100, 120)
        assert row.new_revenue == 960_000_000.0
        assert row.changed_by == "kim"
        assert row.change_reason == "customer forecast raised"

    def test_update_rejects_negative_and_null(self, products):
        plan = _plan(products)
        with pytest.raises(InvalidInputError):
            sales_plans.update_sales_plan(products, plan.id, {"planned_quantity": -1})
        with pytest.raises(InvalidInputError):
            sales_plans.update_sales_plan(products, plan.id, {"planned_revenue": None})

    def test_bulk_approve_takes_drafts_only(self, products):
        a = _plan(products, year_month="2025-11")
        b = _plan(products, year_month="2025-12")
        sales_plans.approve_sales_plans(products, [a.id])

        outcome = sales_plans.approve_sales_plans(
            products, [a.id, b.id, "SP-NOPE"], approval_comment="Q4 volumes agreed"
        )

        assert [p.id for p in outcome["approved"]] == [b.id]
        assert outcome["approved"][0].approval_comment == "Q4 volumes agreed"
        reasons = {s["id"]: s["reason"] for s in outcome["skipped"]}
        assert reasons == {a.id: "status_approved", "SP-NOPE": "not_found"}

    def test_approval_is_logged_with_ids(self, products):
        plan = _plan(products)
        sales_plans.approve_sales_plans(products, [plan.id], approval_comment="ok")

        [event] = products.exec(select(Event).where(Event.event_type == "SALES_PLAN_APPROVED")).all()
        assert json.loads(event.metadata_json) == {"ids": [plan.id], "approval_comment": "ok"}
        [row] = sales_plans.list_history(products, year_month="2025-12")
        assert row.change_reason == "approved"
        assert row.approval_comment == "ok"

    def test_approved_plan_is_frozen(self, products):
        plan = _plan(products)
        sales_plans.approve_sales_plans(products, [plan.id])
        with pytest.raises(InvalidInputError):
            sales_plans.update_sales_plan(products, plan.id, {"planned_quantity": 1})

    def test_approve_needs_ids(self, products):
        with pytest.raises(InvalidInputError):
            sales_plans.approve_sales_plans(products, [])

    def test_flow_is_forward_only(self):
        check_transition("SalesPlan", "draft", "approved")
        with pytest.raises(InvalidTransitionError):
            check_transition("SalesPlan", "approved", "draft")


class TestShipments:
    @pytest.fixture
    def load(self, products):
        products.add(FinishedGoods(product_code="EV-100", category="EV", quantity=50))
        products.commit()
        return dispatch.create_dispatch(
            products,
            {"vehicle_number": "82GA1234", "vehicle_size": "11t", "destination": "Ulsan",
             "products": [{"product_code": "EV-100", "quantity": 10}]},
        )

    def _request(self, **extra):
        data = {
            "customer": "Hyundai Motor",
            "destination": "Ulsan",
            "shipment_date": date(2025, 12, 15),
            "products": [{"product_code": "EV-100", "quantity": 10}],
        }
        data.update(extra)
        return data

    def test_create_linked_to_dispatch(self, products, load):
        s = shipments.create_shipment(products, self._request(dispatch_id=load["id"]))
        assert s["id"] == "SHP-000001"
        assert s["shipment_number"] == "SH-20251215-000001"
        assert s["status"] == "registered"
        assert s["products"] == [{"product_code": "EV-100", "quantity": 10}]
        assert s["dispatch_info"]["vehicle_number"] == "82GA1234"

    def test_create_with_unknown_dispatch(self, products):
        with pytest.raises(NotFoundError):
            shipments.create_shipment(products, self._request(dispatch_id="DSP-999999"))

    def test_list_by_month_and_dispatch(self, products, load):
        shipments.create_shipment(products, self._request(dispatch_id=load["id"]))
        shipments.create_shipment(products, self._request(shipment_date=date(2026, 1, 5)))

        assert [s["id"] for s in shipments.list_shipments(products, month="2025-12")] == ["SHP-000001"]
        assert [s["id"] for s in shipments.list_shipments(products, dispatch_id=load["id"])] == ["SHP-000001"]
        assert len(shipments.list_shipments(products)) == 2

    def test_reschedule_is_recorded(self, products):
        s = shipments.create_shipment(products, self._request())
        shipments.update_shipment(products, s["id"], {"shipment_date": date(2025, 12, 20)},
                                  change_reason="customer dock closed")

        rows = shipments.list_history(products, shipment_id=s["id"])
        assert [r.change_type for r in rows] == ["created", "updated"]
        assert rows[1].previous_shipment_date == date(2025, 12, 15)
        assert rows[1].new_shipment_date == date(2025, 12, 20)
        assert rows[1].change_reason == "customer dock closed"

    def test_dispatching_needs_a_dispatch(self, products, load):
        s = shipments.create_shipment(products, self._request())
        with pytest.raises(InvalidInputError):
            shipments.transition_shipment(products, s["id"], "dispatched")

        shipments.update_shipment(products, s["id"], {"dispatch_id": load["id"]})
        s = shipments.transition_shipment(products, s["id"], "dispatched")
        assert s["status"] == "dispatched"

    def test_status_flow_guarded(self, products, load):
        s = shipments.create_shipment(products, self._request(dispatch_id=load["id"]))
        with pytest.raises(InvalidTransitionError):
            shipments.transition_shipment(products, s["id"], "delivered")
        shipments.transition_shipment(products, s["id"], "dispatched")
        shipments.transition_shipment(products, s["id"], "delivered")

        statuses = [(r.previous_status, r.new_status)
                    for r in shipments.list_history(products, customer="Hyundai Motor")
                    if r.change_type == "status"]
        assert statuses == [("registered", "dispatched"), ("dispatched", "delivered")]

    def test_dispatched_shipment_is_frozen(self, products, load):
        s = shipments.create_shipment(products, self._request(dispatch_id=load["id"]))
        shipments.transition_shipment(products, s["id"], "dispatched")
        with pytest.raises(InvalidInputError):
            shipments.update_shipment(products, s["id"], {"destination": "Busan"})

    def test_null_date_rejected(self, products):
        s = shipments.create_shipment(products, self._request())
        with pytest.raises(InvalidInputError):
            shipments.update_shipment(products, s["id"], {"shipment_date": None})


class TestSalesRoutes:
    def test_sales_plan_lifecycle(self, client, products):
        resp = client.post(
            "/api/sales-plans",
            json={"year_month": "2025-12", "customer": "Kia", "product_code": "EV-100",
                  "planned_quantity": 40},
        )
        assert resp.status_code == 200
        plan_id = resp.json()["id"]

        resp = client.patch(f"/api/sales-plans/{plan_id}",
                            json={"planned_quantity": 45, "change_reason": "revised"})
        assert resp.json()["planned_quantity"] == 45

        resp = client.post("/api/sales-plans/approve",
                           json={"ids": [plan_id], "approval_comment": "agreed"})
        assert resp.status_code == 200
        assert resp.json()["approved"][0]["status"] == "approved"

        assert client.patch(f"/api/sales-plans/{plan_id}", json={"planned_quantity": 50}).status_code == 400
        history = client.get("/api/sales-plans/history", params={"sales_plan_id": plan_id}).json()
        assert [h["change_reason"] for h in history] == ["revised", "approved"]
        assert len(client.get("/api/sales-plans", params={"year": 2025, "status": "approved"}).json()) == 1

    def test_sales_plan_patch_with_null_is_bad_request(self, client, products):
        _plan(products)
        resp = client.patch("/api/sales-plans/SP-2025-12-Hyundai Motor-EV-100",
                            json={"planned_quantity": None})
        assert resp.status_code == 400

    def test_approve_without_ids_is_bad_request(self, client):
        assert client.post("/api/sales-plans/approve", json={"ids": []}).status_code == 400

    def test_shipment_routes(self, client, products):
        resp = client.post(
            "/api/shipments",
            json={"customer": "Hyundai Motor", "destination": "Ulsan", "shipment_date": "2025-12-15",
                  "products": [{"product_code": "EV-100", "quantity": 5}]},
        )
        assert resp.status_code == 200
        shipment_id = resp.json()["id"]

        assert client.post(f"/api/shipments/{shipment_id}/status",
                           json={"status": "delivered"}).status_code == 409
        assert client.post(f"/api/shipments/{shipment_id}/status",
                           json={"status": "dispatched"}).status_code == 400
        resp = client.patch(f"/api/shipments/{shipment_id}", json={"dispatch_id": "DSP-999999"})
        assert resp.status_code == 404

        assert [s["id"] for s in client.get("/api/shipments", params={"month": "2025-12"}).json()] == [shipment_id]
        history = client.get("/api/shipments/history", params={"shipment_id": shipment_id}).json()
        assert [h["change_type"] for h in history] == ["created"]
