# battery_scm/services/dispatch.py

import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from ..errors import InsufficientStockError, InvalidInputError, NotFoundError
from ..models.master import Product
from ..models.production import Dispatch, DispatchLine, FinishedGoods
from ..utils.helpers import next_sequence_id, today
from .event_logger import log_event
from .status import check_transition

logger = logging.getLogger(__name__)


def _dispatch_view(session: Session, d: Dispatch) -> dict:
    lines = session.exec(
        select(DispatchLine).where(DispatchLine.dispatch_id == d.id).order_by(DispatchLine.id)
    ).all()
    return {
        **d.model_dump(),
        "products": [
            {"product_code": ln.product_code, "quantity": ln.quantity, "weight": ln.weight}
            for ln in lines
        ],
    }


def list_dispatches(session: Session) -> List[dict]:
    rows = session.exec(select(Dispatch).order_by(Dispatch.id)).all()
    return [_dispatch_view(session, d) for d in rows]


def get_dispatch(session: Session, dispatch_id: str) -> Dispatch:
    d = session.get(Dispatch, dispatch_id)
    if d is None:
        raise NotFoundError("Dispatch", dispatch_id)
    return d


def create_dispatch(session: Session, data: dict) -> dict:
    """
    Plan a truck load and take its products out of finished-goods stock.

    Every line is checked before anything is written, so a load that can't
    be covered leaves inventory untouched.
    """
    products = data.get("products") or []
    if not products:
        raise InvalidInputError("A dispatch needs at least one product line")

    # several lines may name the same product
    wanted = {}
    for ln in products:
        if ln["quantity"] <= 0:
            raise InvalidInputError("Dispatch quantities must be positive")
        if session.get(Product, ln["product_code"]) is None:
            raise NotFoundError("Product", ln["product_code"])
        wanted[ln["product_code"]] = wanted.get(ln["product_code"], 0) + ln["quantity"]

    stock = {}
    for code, qty in wanted.items():
        row = session.exec(select(FinishedGoods).where(FinishedGoods.product_code == code)).first()
        available = row.quantity if row else 0
        if qty > available:
            raise InsufficientStockError(code, qty, available)
        stock[code] = row

    existing = session.exec(select(Dispatch.id)).all()
    dispatch_id = next_sequence_id("DSP", existing)
    dispatch_date = data.get("dispatch_date") or today()
    d = Dispatch(
        id=dispatch_id,
        dispatch_number=data.get("dispatch_number") or f"{dispatch_id}-{dispatch_date.strftime('%Y%m%d')}",
        vehicle_number=data["vehicle_number"],
        vehicle_size=data["vehicle_size"],
        destination=data["destination"],
        is_mixed_load=data.get("is_mixed_load", len(wanted) > 1),
        estimated_weight=sum(ln.get("weight", 0.0) for ln in products),
        dispatch_date=dispatch_date,
    )
    session.add(d)
    for ln in products:
        session.add(
            DispatchLine(
                dispatch_id=d.id,
                product_code=ln["product_code"],
                quantity=ln["quantity"],
                weight=ln.get("weight", 0.0),
            )
        )

    for code, qty in wanted.items():
        row = stock[code]
        row.quantity -= qty
        row.updated_at = datetime.utcnow()
        session.add(row)

    log_event(
        session,
        "DISPATCH_CREATED",
        f"{d.id} to {d.destination}: "
        + ", ".join(f"{qty} x {code}" for code, qty in wanted.items()),
        metadata={"dispatch_id": d.id, "products": wanted},
    )
    session.commit()
    session.refresh(d)
    logger.info("Dispatch %s planned for %s", d.id, d.destination)
    return _dispatch_view(session, d)


def transition_dispatch(
    session: Session, dispatch_id: str, target: str, actual_weight: Optional[float] = None
) -> dict:
    d = get_dispatch(session, dispatch_id)
    check_transition("Dispatch", d.status, target)

    previous = d.status
    d.status = target
    if actual_weight is not None:
        d.actual_weight = actual_weight
    session.add(d)
    log_event(session, "DISPATCH_STATUS", f"{d.id}: {previous} -> {target}")
    session.commit()
    session.refresh(d)
    return _dispatch_view(session, d)
