"""Order, production, inventory and dispatch flows."""

import pytest
from sqlmodel import select

from battery_scm.errors import (
    InsufficientStockError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)
from battery_scm.models import Event, FinishedGoods, Product
from battery_scm.services import dispatch, inventory, orders, productions
from battery_scm.services.status import check_transition, next_status

from .factories import add_cell_scenario


class TestStatusMachines:
    def test_production_forward_path(self):
        assert next_status("Production", "planned") == "in_progress"
        assert next_status("Production", "in_progress") == "completed"
        assert next_status("Production", "completed") == "inspected"
        assert next_status("Production", "inspected") is None

    @pytest.mark.parametrize(
        "current,target",
        [
            ("planned", "completed"),    # skip
            ("completed", "in_progress"),  # backwards
            ("inspected", "planned"),
            ("planned", "planned"),
            ("planned", "cancelled"),
        ],
    )
    def test_production_rejects(self, current, target):
        with pytest.raises(InvalidTransitionError):
            check_transition("Production", current, target)

    def test_order_cannot_skip_approval(self):
        with pytest.raises(InvalidTransitionError):
            check_transition("Order", "confirmed", "in_production")
        check_transition("Order", "confirmed", "approved")


class TestOrders:
    def test_create_derives_product_fields(self, session, store):
        session.add(Product(code="SV-001", name="Service Module A", category="SV", destination="Ulsan"))
        session.commit()

        order = orders.create_order(
            store,
            {"order_date": "2025-12", "customer": "Hyundai Motor", "product_code": "SV-001",
             "predicted_quantity": 30, "unit_price": 5_000_000},
        )
        assert order.id == "ORD-000001"
        assert order.category == "SV"
        assert order.destination == "Ulsan"
        assert order.status == "predicted"
        assert order.total_amount == 30 * 5_000_000

    def test_create_unknown_product(self, store):
        with pytest.raises(NotFoundError):
            orders.create_order(store, {"order_date": "2025-12", "customer": "x", "product_code": "NOPE"})

    def test_status_is_not_patchable(self, session, store):
        add_cell_scenario(session)
        with pytest.raises(InvalidInputError):
            orders.update_order(store, "ORD-000001", {"status": "delivered"})

    def test_confirm_then_approve_creates_production(self, session, store):
        session.add(Product(code="EV-200", name="EV Pack Assembly", category="EV"))
        session.commit()
        order = orders.create_order(
            store,
            {"order_date": "2025-12", "customer": "Samsung SDI", "product_code": "EV-200",
             "predicted_quantity": 400, "unit_price": 8_000_000},
        )

        confirmed = orders.transition_order(store, order.id, "confirmed", confirmed_quantity=380)
        assert confirmed["order"].confirmed_quantity == 380
        assert confirmed["production"] is None

        approved = orders.transition_order(store, order.id, "approved")
        production = approved["production"]
        assert approved["order"].status == "approved"
        assert production.planned_quantity == 380
        assert production.status == "planned"
        assert production.production_line == "Gwangju Plant 1"

    def test_approve_requires_confirmed_quantity(self, session, store):
        add_cell_scenario(session)
        store.update_order("ORD-000001", status="confirmed", confirmed_quantity=0)
        with pytest.raises(InvalidInputError):
            orders.transition_order(store, "ORD-000001", "approved")

    def test_null_required_field_rejected(self, session, store):
        add_cell_scenario(session)
        with pytest.raises(InvalidInputError):
            orders.update_order(store, "ORD-000001", {"confirmed_quantity": None})
        assert orders.get_order(store, "ORD-000001").confirmed_quantity == 120

    def test_null_clears_optional_field(self, session, store):
        add_cell_scenario(session)
        orders.update_order(store, "ORD-000001", {"special_notes": "rush"})
        order = orders.update_order(store, "ORD-000001", {"special_notes": None})
        assert order.special_notes is None

    @pytest.mark.parametrize(
        "field", ["predicted_quantity", "confirmed_quantity", "unit_price", "lead_time_days"]
    )
    def test_negative_values_rejected(self, session, store, field):
        add_cell_scenario(session)
        with pytest.raises(InvalidInputError):
            orders.update_order(store, "ORD-000001", {field: -50})

    def test_patch_recomputes_total(self, session, store):
        add_cell_scenario(session)
        order = orders.update_order(store, "ORD-000001", {"confirmed_quantity": 100})
        assert order.total_amount == 100 * 8_000_000

    def test_list_by_month(self, session, store):
        add_cell_scenario(session)
        assert [o.id for o in orders.list_orders(session, month="2025-12")] == ["ORD-000001"]
        assert orders.list_orders(session, month="2024-01") == []


class TestProductions:
    def test_inspection_books_finished_goods(self, session, store):
        add_cell_scenario(session, planned_quantity=120)
        for target in ("in_progress", "completed"):
            productions.transition_production(store, "PROD-000001", target)
        p = productions.transition_production(store, "PROD-000001", "inspected", inspected_quantity=117)

        assert p.status == "inspected"
        assert p.inspected_quantity == 117
        assert inventory.get_finished_goods(session, "EV-100").quantity == 117

    def test_inspected_quantity_bounded_by_plan(self, session, store):
        add_cell_scenario(session, planned_quantity=10)
        productions.transition_production(store, "PROD-000001", "in_progress")
        productions.transition_production(store, "PROD-000001", "completed")
        with pytest.raises(InvalidInputError):
            productions.transition_production(store, "PROD-000001", "inspected", inspected_quantity=11)

    def test_cannot_skip(self, session, store):
        add_cell_scenario(session)
        with pytest.raises(InvalidTransitionError):
            productions.transition_production(store, "PROD-000001", "inspected")

    def test_create_for_order(self, session, store):
        add_cell_scenario(session, planned_quantity=40)
        p = productions.create_production(store, {"order_id": "ORD-000001"})
        assert p.id == "PROD-000002"
        assert p.planned_quantity == 40


class TestMaterials:
    def test_receive(self, session, store):
        add_cell_scenario(session)
        result = inventory.receive_material(store, "CELL-001", 250)
        assert result["previous_stock"] == 15000
        assert result["new_stock"] == 15250

    def test_receive_unknown(self, store):
        with pytest.raises(NotFoundError):
            inventory.receive_material(store, "NOPE", 1)

    def test_negative_stock_rejected(self, session, store):
        add_cell_scenario(session)
        with pytest.raises(InvalidInputError):
            inventory.update_material(store, "CELL-001", {"current_stock": -1})

    def test_null_field_rejected(self, session, store):
        add_cell_scenario(session)
        with pytest.raises(InvalidInputError):
            inventory.update_material(store, "CELL-001", {"current_stock": None})
        assert store.get_material_by_code("CELL-001").current_stock == 15000

    def test_receipt_is_logged(self, session, store):
        add_cell_scenario(session)
        inventory.receive_material(store, "CELL-001", 250)
        events = session.exec(select(Event).where(Event.event_type == "MATERIAL_RECEIVED")).all()
        assert len(events) == 1

    def test_view_flags_low_stock(self, session, store):
        add_cell_scenario(session, cell_stock=9000)
        view = {m["code"]: m for m in inventory.get_material_view(store)}
        assert view["CELL-001"]["below_min_stock"] is True
        assert view["BMS-001"]["below_min_stock"] is False


class TestDispatch:
    @pytest.fixture
    def stocked(self, session):
        session.add(Product(code="SV-001", name="Service Module A", category="SV"))
        session.add(Product(code="PLBM-A01", name="PLBM Spec A1", category="PLBM"))
        session.add(FinishedGoods(product_code="SV-001", category="SV", quantity=20))
        session.add(FinishedGoods(product_code="PLBM-A01", category="PLBM", quantity=5))
        session.commit()
        return session

    def _request(self, *lines):
        return {
            "vehicle_number": "82GA1234",
            "vehicle_size": "11t",
            "destination": "Ulsan",
            "products": [{"product_code": c, "quantity": q, "weight": 10.0 * q} for c, q in lines],
        }

    def test_mixed_load_decrements_inventory(self, stocked):
        d = dispatch.create_dispatch(stocked, self._request(("SV-001", 8), ("PLBM-A01", 5)))

        assert d["status"] == "planned"
        assert d["is_mixed_load"] is True
        assert d["estimated_weight"] == 130.0
        assert len(d["products"]) == 2
        assert inventory.get_finished_goods(stocked, "SV-001").quantity == 12
        assert inventory.get_finished_goods(stocked, "PLBM-A01").quantity == 0

    def test_short_load_leaves_inventory_untouched(self, stocked):
        with pytest.raises(InsufficientStockError) as exc:
            dispatch.create_dispatch(stocked, self._request(("SV-001", 8), ("PLBM-A01", 6)))
        assert exc.value.available == 5
        assert inventory.get_finished_goods(stocked, "SV-001").quantity == 20
        assert dispatch.list_dispatches(stocked) == []

    def test_status_flow(self, stocked):
        d = dispatch.create_dispatch(stocked, self._request(("SV-001", 1)))
        d = dispatch.transition_dispatch(stocked, d["id"], "dispatched", actual_weight=9.5)
        assert d["status"] == "dispatched"
        assert d["actual_weight"] == 9.5
        with pytest.raises(InvalidTransitionError):
            dispatch.transition_dispatch(stocked, d["id"], "planned")
