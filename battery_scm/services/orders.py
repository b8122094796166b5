# battery_scm/services/orders.py

import logging
from typing import List, Optional

from sqlmodel import Session, select

from ..errors import InvalidInputError, NotFoundError
from ..models.master import Order
from ..models.production import Production
from ..store import ScmStore
from ..utils.helpers import next_sequence_id
from .event_logger import log_event
from .status import check_transition

logger = logging.getLogger(__name__)

# fields a caller may patch directly; status goes through transition_order
EDITABLE_ORDER_FIELDS = {
    "customer",
    "destination",
    "predicted_quantity",
    "confirmed_quantity",
    "unit_price",
    "lead_time_days",
    "expected_delivery_date",
    "special_notes",
}
NULLABLE_ORDER_FIELDS = {"expected_delivery_date", "special_notes"}
NON_NEGATIVE_ORDER_FIELDS = ("predicted_quantity", "confirmed_quantity", "unit_price", "lead_time_days")


def production_line_for(category: str) -> str:
    return "Gwangju Plant 1" if category == "EV" else "Gwangju Plant 2"


def _total_amount(order: Order) -> float:
    qty = order.confirmed_quantity or order.predicted_quantity
    return qty * order.unit_price


def list_orders(session: Session, month: Optional[str] = None, status: Optional[str] = None) -> List[Order]:
    query = select(Order)
    if month:
        query = query.where(Order.order_date == month)
    if status:
        query = query.where(Order.status == status)
    return list(session.exec(query.order_by(Order.id)).all())


def get_order(store: ScmStore, order_id: str) -> Order:
    order = store.get_order_by_id(order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    return order


def create_order(store: ScmStore, data: dict) -> Order:
    product = store.get_product_by_code(data["product_code"])
    if product is None:
        raise NotFoundError("Product", data["product_code"])

    existing = store.session.exec(select(Order.id)).all()
    order = Order(
        id=data.get("id") or next_sequence_id("ORD", existing),
        order_date=data["order_date"],
        customer=data["customer"],
        product_code=product.code,
        category=product.category,
        destination=data.get("destination") or product.destination,
        predicted_quantity=data.get("predicted_quantity", 0),
        confirmed_quantity=data.get("confirmed_quantity", 0),
        unit_price=data.get("unit_price", 0.0),
        lead_time_days=data.get("lead_time_days", 30),
        expected_delivery_date=data.get("expected_delivery_date"),
        special_notes=data.get("special_notes"),
    )
    if store.session.get(Order, order.id) is not None:
        raise InvalidInputError(f"Order {order.id} already exists")
    order.total_amount = _total_amount(order)

    store.session.add(order)
    log_event(store.session, "ORDER_CREATED", f"{order.id} {order.customer} {order.product_code}")
    store.session.commit()
    store.session.refresh(order)
    return order


def update_order(store: ScmStore, order_id: str, changes: dict) -> Order:
    unknown = set(changes) - EDITABLE_ORDER_FIELDS
    if unknown:
        raise InvalidInputError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    nulls = sorted(
        k for k, v in changes.items() if v is None and k not in NULLABLE_ORDER_FIELDS
    )
    if nulls:
        raise InvalidInputError(f"Field(s) cannot be null: {', '.join(nulls)}")
    for key in NON_NEGATIVE_ORDER_FIELDS:
        if key in changes and changes[key] < 0:
            raise InvalidInputError(f"{key} cannot be negative")

    order = get_order(store, order_id)
    for key, value in changes.items():
        setattr(order, key, value)
    return store.update_order(order_id, total_amount=_total_amount(order))


def transition_order(
    store: ScmStore,
    order_id: str,
    target: str,
    confirmed_quantity: Optional[int] = None,
) -> dict:
    """
    Move an order one step forward.

    Confirming fixes the confirmed quantity (predicted quantity if none is
    given). Approving creates the planned production for that quantity.
    Returns {"order": ..., "production": ... or None}.
    """
    order = get_order(store, order_id)
    check_transition("Order", order.status, target)

    changes = {"status": target}
    if target == "confirmed":
        qty = confirmed_quantity if confirmed_quantity is not None else order.predicted_quantity
        if qty <= 0:
            raise InvalidInputError("Confirmed quantity must be positive")
        changes["confirmed_quantity"] = qty
        changes["total_amount"] = qty * order.unit_price
    elif target == "approved" and order.confirmed_quantity <= 0:
        raise InvalidInputError(f"Order {order.id} has no confirmed quantity")

    previous = order.status
    order = store.update_order(order_id, **changes)

    production = None
    if target == "approved":
        existing = store.session.exec(select(Production.id)).all()
        production = Production(
            id=next_sequence_id("PROD", existing),
            order_id=order.id,
            production_line=production_line_for(order.category),
            planned_quantity=order.confirmed_quantity,
            production_date=order.order_date,
            status="planned",
        )
        store.session.add(production)

    log_event(store.session, "ORDER_STATUS", f"{order.id}: {previous} -> {target}")
    store.session.commit()
    store.session.refresh(order)
    if production is not None:
        store.session.refresh(production)
        logger.info("Order %s approved, created %s", order.id, production.id)

    return {"order": order, "production": production}
