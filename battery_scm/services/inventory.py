# battery_scm/services/inventory.py
"""
Raw material stock and finished-goods stock.

Raw material stock changes go through ScmStore.adjust_material_stock /
stock_lock so concurrent receipts and order confirmations can't lose
updates.
"""

import logging
from datetime import datetime
from typing import List

from sqlmodel import Session, select

from ..errors import InvalidInputError, NotFoundError
from ..models.production import FinishedGoods
from ..models.supply import Material
from ..store import ScmStore, stock_lock
from .event_logger import log_event

logger = logging.getLogger(__name__)

EDITABLE_MATERIAL_FIELDS = {
    "name",
    "category",
    "unit",
    "unit_price",
    "current_stock",
    "min_stock",
    "supplier",
    "lead_time_days",
}


# ---------- materials ----------

def get_material(store: ScmStore, code: str) -> Material:
    material = store.get_material_by_code(code)
    if material is None:
        raise NotFoundError("Material", code)
    return material


def get_material_view(store: ScmStore) -> List[dict]:
    """Materials with a below-minimum flag for the stock screen."""
    return [
        {**m.model_dump(), "below_min_stock": m.current_stock < m.min_stock}
        for m in store.get_all_materials()
    ]


def update_material(store: ScmStore, code: str, changes: dict) -> Material:
    unknown = set(changes) - EDITABLE_MATERIAL_FIELDS
    if unknown:
        raise InvalidInputError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    nulls = sorted(k for k, v in changes.items() if v is None)
    if nulls:
        raise InvalidInputError(f"Field(s) cannot be null: {', '.join(nulls)}")
    for key in ("current_stock", "min_stock", "lead_time_days", "unit_price"):
        if key in changes and changes[key] < 0:
            raise InvalidInputError(f"{key} cannot be negative")

    get_material(store, code)
    if "current_stock" in changes:
        with stock_lock(code):
            material = store.update_material(code, **changes)
    else:
        material = store.update_material(code, **changes)
    return material


def receive_material(store: ScmStore, code: str, quantity: int) -> dict:
    if quantity <= 0:
        raise InvalidInputError("Received quantity must be positive")
    def record(material, previous):
        log_event(
            store.session,
            "MATERIAL_RECEIVED",
            f"{quantity} of {code} received, stock {previous} -> {material.current_stock}",
        )

    adjusted = store.adjust_material_stock(code, quantity, on_adjust=record)
    if adjusted is None:
        raise NotFoundError("Material", code)

    material, previous = adjusted
    return {
        "material_code": code,
        "previous_stock": previous,
        "received_quantity": quantity,
        "new_stock": material.current_stock,
    }


# ---------- finished goods ----------

def list_finished_goods(session: Session) -> List[FinishedGoods]:
    return list(session.exec(select(FinishedGoods).order_by(FinishedGoods.product_code)).all())


def get_finished_goods(session: Session, product_code: str) -> FinishedGoods:
    row = session.exec(
        select(FinishedGoods).where(FinishedGoods.product_code == product_code)
    ).first()
    if row is None:
        raise NotFoundError("Inventory", product_code)
    return row


def add_finished_goods(session: Session, product_code: str, category: str, quantity: int) -> FinishedGoods:
    """Add inspected output to stock. Caller commits."""
    row = session.exec(
        select(FinishedGoods).where(FinishedGoods.product_code == product_code)
    ).first()
    if row is None:
        row = FinishedGoods(product_code=product_code, category=category, quantity=0)
    row.quantity += quantity
    row.updated_at = datetime.utcnow()
    session.add(row)
    return row


def set_finished_goods(session: Session, product_code: str, quantity: int) -> FinishedGoods:
    if quantity < 0:
        raise InvalidInputError("Inventory quantity cannot be negative")
    row = get_finished_goods(session, product_code)
    previous = row.quantity
    row.quantity = quantity
    row.updated_at = datetime.utcnow()
    session.add(row)
    log_event(session, "INVENTORY_ADJUSTED", f"{product_code}: {previous} -> {quantity}")
    session.commit()
    session.refresh(row)
    return row
