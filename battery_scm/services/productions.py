# battery_scm/services/productions.py

import logging
from typing import List, Optional

from sqlmodel import select

from ..errors import InvalidInputError, NotFoundError
from ..models.production import Production
from ..store import ScmStore
from ..utils.helpers import next_sequence_id
from . import inventory
from .event_logger import log_event
from .orders import production_line_for
from .status import check_transition

logger = logging.getLogger(__name__)


def get_production(store: ScmStore, production_id: str) -> Production:
    production = store.get_production_by_id(production_id)
    if production is None:
        raise NotFoundError("Production", production_id)
    return production


def create_production(store: ScmStore, data: dict) -> Production:
    order = store.get_order_by_id(data["order_id"])
    if order is None:
        raise NotFoundError("Order", data["order_id"])

    planned = data.get("planned_quantity") or order.confirmed_quantity
    if planned <= 0:
        raise InvalidInputError("Planned quantity must be positive")

    existing = store.session.exec(select(Production.id)).all()
    production = Production(
        id=next_sequence_id("PROD", existing),
        order_id=order.id,
        production_line=data.get("production_line") or production_line_for(order.category),
        planned_quantity=planned,
        production_date=data.get("production_date") or order.order_date,
        estimated_start_date=data.get("estimated_start_date"),
        status="planned",
    )
    store.session.add(production)
    log_event(store.session, "PRODUCTION_CREATED", f"{production.id} for {order.id} ({planned} units)")
    store.session.commit()
    store.session.refresh(production)
    return production


def transition_production(
    store: ScmStore,
    production_id: str,
    target: str,
    inspected_quantity: Optional[int] = None,
) -> Production:
    """
    Move a production one step forward.

    The inspected step records the inspected (good) output and books it into
    finished-goods stock for the order's product.
    """
    production = get_production(store, production_id)
    check_transition("Production", production.status, target)

    changes = {"status": target}
    if target == "inspected":
        qty = production.planned_quantity if inspected_quantity is None else inspected_quantity
        if qty < 0 or qty > production.planned_quantity:
            raise InvalidInputError(
                f"Inspected quantity must be between 0 and {production.planned_quantity}"
            )
        order = store.get_order_by_id(production.order_id)
        if order is None:
            raise NotFoundError("Order", production.order_id)
        changes["inspected_quantity"] = qty
        inventory.add_finished_goods(store.session, order.product_code, order.category, qty)

    previous = production.status
    log_event(store.session, "PRODUCTION_STATUS", f"{production.id}: {previous} -> {target}")
    production = store.update_production(production_id, **changes)
    logger.info("Production %s moved %s -> %s", production.id, previous, target)
    return production


def list_productions(store: ScmStore, status: Optional[str] = None) -> List[Production]:
    return store.get_all_productions(status)
