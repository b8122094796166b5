# battery_scm/api/data.py

from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from ..database import get_session
from ..errors import NotFoundError
from ..models.events import Event
from ..models.master import Product
from ..models.supply import PurchaseOrder
from ..store import ScmStore, get_store

router = APIRouter(prefix="/api/data", tags=["data"])


# ---------- master lookups ----------

@router.get("/products")
def get_products(session: Session = Depends(get_session)):
    return session.exec(select(Product).order_by(Product.code)).all()


@router.get("/boms/{product_code}")
def get_bom(product_code: str, store: ScmStore = Depends(get_store)):
    bom = store.get_bom_by_product_code(product_code)
    if bom is None:
        raise NotFoundError("BOM", product_code)
    return {
        "product_code": product_code,
        "materials": [
            {"material_code": b.material_code, "quantity_per_unit": b.quantity_per_unit}
            for b in bom
        ],
    }


@router.get("/purchase_orders")
def get_purchase_orders(session: Session = Depends(get_session)):
    return session.exec(select(PurchaseOrder).order_by(PurchaseOrder.order_date.desc())).all()


# ---------- events (event log) ----------

@router.get("/events")
def get_events(session: Session = Depends(get_session), limit: int = 100,
               event_type: Optional[str] = None):
    """
    Recent events from the Event table (used as event log), optionally of one type.
    """
    query = select(Event)
    if event_type:
        query = query.where(Event.event_type == event_type)
    return session.exec(query.order_by(Event.event_date.desc()).limit(limit)).all()
