# battery_scm/services/shipments.py
"""
Customer shipments and their link to dispatches.

A shipment is registered with its product lines, assigned to a dispatch
(truck load), and moves registered -> dispatched -> delivered. Date,
dispatch and status changes are kept in ShipmentPlanHistory.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from ..errors import InvalidInputError, NotFoundError
from ..models.master import Product
from ..models.production import Dispatch
from ..models.sales import Shipment, ShipmentLine, ShipmentPlanHistory
from ..utils.helpers import next_sequence_id, today
from .event_logger import log_event
from .status import check_transition

logger = logging.getLogger(__name__)

EDITABLE_SHIPMENT_FIELDS = {"customer", "destination", "shipment_date", "dispatch_id", "total_amount"}
NULLABLE_SHIPMENT_FIELDS = {"dispatch_id"}


def _shipment_view(session: Session, s: Shipment) -> dict:
    lines = session.exec(
        select(ShipmentLine).where(ShipmentLine.shipment_id == s.id).order_by(ShipmentLine.id)
    ).all()
    dispatch_info = None
    if s.dispatch_id:
        d = session.get(Dispatch, s.dispatch_id)
        if d is not None:
            dispatch_info = {
                "dispatch_number": d.dispatch_number,
                "vehicle_number": d.vehicle_number,
                "status": d.status,
            }
    return {
        **s.model_dump(),
        "products": [{"product_code": ln.product_code, "quantity": ln.quantity} for ln in lines],
        "dispatch_info": dispatch_info,
    }


def _require_dispatch(session: Session, dispatch_id: Optional[str]) -> None:
    if dispatch_id and session.get(Dispatch, dispatch_id) is None:
        raise NotFoundError("Dispatch", dispatch_id)


def list_shipments(
    session: Session, month: Optional[str] = None, dispatch_id: Optional[str] = None
) -> List[dict]:
    """Shipments, optionally for one month (YYYY-MM) and/or one dispatch."""
    query = select(Shipment)
    if dispatch_id:
        query = query.where(Shipment.dispatch_id == dispatch_id)
    rows = session.exec(query.order_by(Shipment.id)).all()
    if month:
        rows = [s for s in rows if s.shipment_date.isoformat().startswith(month)]
    return [_shipment_view(session, s) for s in rows]


def get_shipment(session: Session, shipment_id: str) -> Shipment:
    s = session.get(Shipment, shipment_id)
    if s is None:
        raise NotFoundError("Shipment", shipment_id)
    return s


def get_shipment_view(session: Session, shipment_id: str) -> dict:
    return _shipment_view(session, get_shipment(session, shipment_id))


def create_shipment(session: Session, data: dict) -> dict:
    products = data.get("products") or []
    if not products:
        raise InvalidInputError("A shipment needs at least one product line")
    for ln in products:
        if ln["quantity"] <= 0:
            raise InvalidInputError("Shipment quantities must be positive")
        if session.get(Product, ln["product_code"]) is None:
            raise NotFoundError("Product", ln["product_code"])
    if data.get("total_amount", 0.0) < 0:
        raise InvalidInputError("total_amount cannot be negative")
    _require_dispatch(session, data.get("dispatch_id"))

    existing = session.exec(select(Shipment.id)).all()
    shipment_id = next_sequence_id("SHP", existing)
    shipment_date = data.get("shipment_date") or today()
    s = Shipment(
        id=shipment_id,
        shipment_number=data.get("shipment_number") or f"SH-{shipment_date.strftime('%Y%m%d')}-{shipment_id[-6:]}",
        customer=data["customer"],
        destination=data["destination"],
        shipment_date=shipment_date,
        dispatch_id=data.get("dispatch_id"),
        total_amount=data.get("total_amount", 0.0),
    )
    session.add(s)
    for ln in products:
        session.add(ShipmentLine(shipment_id=s.id, product_code=ln["product_code"], quantity=ln["quantity"]))
    session.add(
        ShipmentPlanHistory(
            shipment_id=s.id,
            customer=s.customer,
            change_type="created",
            new_shipment_date=s.shipment_date,
            new_status=s.status,
            dispatch_id=s.dispatch_id,
        )
    )
    log_event(session, "SHIPMENT_CREATED", f"{s.id} for {s.customer} on {s.shipment_date.isoformat()}")
    session.commit()
    session.refresh(s)
    logger.info("Shipment %s registered for %s", s.id, s.customer)
    return _shipment_view(session, s)


def update_shipment(session: Session, shipment_id: str, changes: dict,
                    change_reason: Optional[str] = None) -> dict:
    unknown = set(changes) - EDITABLE_SHIPMENT_FIELDS
    if unknown:
        raise InvalidInputError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    nulls = sorted(
        k for k, v in changes.items() if v is None and k not in NULLABLE_SHIPMENT_FIELDS
    )
    if nulls:
        raise InvalidInputError(f"Field(s) cannot be null: {', '.join(nulls)}")
    if changes.get("total_amount", 0.0) < 0:
        raise InvalidInputError("total_amount cannot be negative")

    s = get_shipment(session, shipment_id)
    if s.status != "registered":
        raise InvalidInputError(f"Shipment {s.id} is {s.status} and can no longer be edited")
    _require_dispatch(session, changes.get("dispatch_id"))

    previous_date = s.shipment_date
    for key, value in changes.items():
        setattr(s, key, value)
    s.updated_at = datetime.utcnow()
    session.add(s)
    session.add(
        ShipmentPlanHistory(
            shipment_id=s.id,
            customer=s.customer,
            change_type="updated",
            previous_shipment_date=previous_date,
            new_shipment_date=s.shipment_date,
            previous_status=s.status,
            new_status=s.status,
            dispatch_id=s.dispatch_id,
            change_reason=change_reason,
        )
    )
    session.commit()
    session.refresh(s)
    return _shipment_view(session, s)


def transition_shipment(session: Session, shipment_id: str, target: str) -> dict:
    s = get_shipment(session, shipment_id)
    check_transition("Shipment", s.status, target)
    if target == "dispatched" and not s.dispatch_id:
        raise InvalidInputError(f"Shipment {s.id} has no dispatch assigned")

    previous = s.status
    s.status = target
    s.updated_at = datetime.utcnow()
    session.add(s)
    session.add(
        ShipmentPlanHistory(
            shipment_id=s.id,
            customer=s.customer,
            change_type="status",
            previous_shipment_date=s.shipment_date,
            new_shipment_date=s.shipment_date,
            previous_status=previous,
            new_status=target,
            dispatch_id=s.dispatch_id,
        )
    )
    log_event(session, "SHIPMENT_STATUS", f"{s.id}: {previous} -> {target}")
    session.commit()
    session.refresh(s)
    return _shipment_view(session, s)


def list_history(
    session: Session, shipment_id: Optional[str] = None, customer: Optional[str] = None
) -> List[ShipmentPlanHistory]:
    query = select(ShipmentPlanHistory)
    if shipment_id:
        query = query.where(ShipmentPlanHistory.shipment_id == shipment_id)
    elif customer:
        query = query.where(ShipmentPlanHistory.customer == customer)
    return list(session.exec(query.order_by(ShipmentPlanHistory.id)).all())
