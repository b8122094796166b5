# battery_scm/api/mrp.py

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..services.mrp import MRPEngine
from ..store import ScmStore, get_store

router = APIRouter(prefix="/api/mrp", tags=["mrp"])


class MaterialOrderLine(BaseModel):
    material_code: Optional[str] = None
    order_quantity: Optional[int] = None


class ConfirmMaterialOrdersRequest(BaseModel):
    materials: List[MaterialOrderLine]


@router.get("/requirements")
def get_requirements(store: ScmStore = Depends(get_store)):
    """
    Material demand of all planned / in-progress productions vs stock.

    One row per material:
      material, material_name, unit, required, available,
      shortage, order_needed, data_incomplete
    """
    return MRPEngine(store).calculate_requirements()


@router.get("/productions/{production_id}")
def get_production_requirements(production_id: str, store: ScmStore = Depends(get_store)):
    """
    BOM explosion for one production, with shortage cost and the earliest
    start date the shortages allow. Also stores the production's
    material_shortage flag.
    """
    return MRPEngine(store).calculate_requirements_for_production(production_id)


@router.post("/orders")
def confirm_material_orders(request: ConfirmMaterialOrdersRequest, store: ScmStore = Depends(get_store)):
    """
    Confirm purchase of materials; stock is increased immediately.

    Returns {"success": true, "results": [...], "rejected": [...]}.
    """
    outcome = MRPEngine(store).confirm_material_orders(
        [line.model_dump() for line in request.materials]
    )
    return {"success": True, **outcome}
