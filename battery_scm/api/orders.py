# battery_scm/api/orders.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..services import orders as order_service
from ..store import ScmStore, get_store

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderCreate(BaseModel):
    id: Optional[str] = None
    order_date: str
    customer: str
    product_code: str
    destination: Optional[str] = None
    predicted_quantity: int = 0
    confirmed_quantity: int = 0
    unit_price: float = 0.0
    lead_time_days: int = 30
    expected_delivery_date: Optional[date] = None
    special_notes: Optional[str] = None


class OrderUpdate(BaseModel):
    customer: Optional[str] = None
    destination: Optional[str] = None
    predicted_quantity: Optional[int] = None
    confirmed_quantity: Optional[int] = None
    unit_price: Optional[float] = None
    lead_time_days: Optional[int] = None
    expected_delivery_date: Optional[date] = None
    special_notes: Optional[str] = None


class OrderTransition(BaseModel):
    status: str
    confirmed_quantity: Optional[int] = None


@router.get("")
def list_orders(month: Optional[str] = None, status: Optional[str] = None,
                store: ScmStore = Depends(get_store)):
    """Orders, optionally filtered by month (YYYY-MM) and status."""
    return order_service.list_orders(store.session, month=month, status=status)


@router.post("")
def create_order(request: OrderCreate, store: ScmStore = Depends(get_store)):
    return order_service.create_order(store, request.model_dump())


@router.get("/{order_id}")
def get_order(order_id: str, store: ScmStore = Depends(get_store)):
    return order_service.get_order(store, order_id)


@router.patch("/{order_id}")
def update_order(order_id: str, request: OrderUpdate, store: ScmStore = Depends(get_store)):
    return order_service.update_order(store, order_id, request.model_dump(exclude_unset=True))


@router.post("/{order_id}/status")
def transition_order(order_id: str, request: OrderTransition, store: ScmStore = Depends(get_store)):
    """
    Advance an order one step:
    predicted -> confirmed -> approved -> in_production -> shipped -> delivered

    Approval also creates the planned production.
    """
    return order_service.transition_order(
        store, order_id, request.status, confirmed_quantity=request.confirmed_quantity
    )
