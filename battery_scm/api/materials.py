# battery_scm/api/materials.py

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..services import inventory
from ..store import ScmStore, get_store

router = APIRouter(prefix="/api/materials", tags=["materials"])


class MaterialUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    unit_price: Optional[float] = None
    current_stock: Optional[int] = None
    min_stock: Optional[int] = None
    supplier: Optional[str] = None
    lead_time_days: Optional[int] = None


class MaterialReceipt(BaseModel):
    quantity: int


@router.get("")
def list_materials(store: ScmStore = Depends(get_store)):
    return inventory.get_material_view(store)


@router.get("/{code}")
def get_material(code: str, store: ScmStore = Depends(get_store)):
    return inventory.get_material(store, code)


@router.patch("/{code}")
def update_material(code: str, request: MaterialUpdate, store: ScmStore = Depends(get_store)):
    return inventory.update_material(store, code, request.model_dump(exclude_unset=True))


@router.post("/{code}/receipts")
def receive_material(code: str, request: MaterialReceipt, store: ScmStore = Depends(get_store)):
    return inventory.receive_material(store, code, request.quantity)
