# battery_scm/api/productions.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..services import productions as production_service
from ..store import ScmStore, get_store

router = APIRouter(prefix="/api/productions", tags=["productions"])


class ProductionCreate(BaseModel):
    order_id: str
    planned_quantity: Optional[int] = None
    production_line: Optional[str] = None
    production_date: Optional[str] = None
    estimated_start_date: Optional[date] = None


class ProductionTransition(BaseModel):
    status: str
    inspected_quantity: Optional[int] = None


@router.get("")
def list_productions(status: Optional[str] = None, store: ScmStore = Depends(get_store)):
    return production_service.list_productions(store, status)


@router.post("")
def create_production(request: ProductionCreate, store: ScmStore = Depends(get_store)):
    return production_service.create_production(store, request.model_dump())


@router.get("/{production_id}")
def get_production(production_id: str, store: ScmStore = Depends(get_store)):
    return production_service.get_production(store, production_id)


@router.post("/{production_id}/status")
def transition_production(production_id: str, request: ProductionTransition,
                          store: ScmStore = Depends(get_store)):
    """planned -> in_progress -> completed -> inspected, one step at a time."""
    return production_service.transition_production(
        store, production_id, request.status, inspected_quantity=request.inspected_quantity
    )
