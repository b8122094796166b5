# battery_scm/api/inventory.py

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from ..database import get_session
from ..services import inventory

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


class InventoryUpdate(BaseModel):
    quantity: int


@router.get("")
def list_inventory(session: Session = Depends(get_session)):
    """Finished-goods stock per product."""
    return inventory.list_finished_goods(session)


@router.get("/{product_code}")
def get_inventory(product_code: str, session: Session = Depends(get_session)):
    return inventory.get_finished_goods(session, product_code)


@router.put("/{product_code}")
def set_inventory(product_code: str, request: InventoryUpdate, session: Session = Depends(get_session)):
    return inventory.set_finished_goods(session, product_code, request.quantity)
