# battery_scm/api/sales_plans.py

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from ..database import get_session
from ..services import sales_plans as sales_plan_service

router = APIRouter(prefix="/api/sales-plans", tags=["sales-plans"])


class SalesPlanCreate(BaseModel):
    id: Optional[str] = None
    year_month: str
    customer: str
    product_code: str
    product: Optional[str] = None
    category: Optional[str] = None
    planned_quantity: int = 0
    planned_revenue: float = 0.0


class SalesPlanUpdate(BaseModel):
    customer: Optional[str] = None
    planned_quantity: Optional[int] = None
    planned_revenue: Optional[float] = None
    changed_by: str = "system"
    change_reason: Optional[str] = None


class SalesPlanApproval(BaseModel):
    ids: List[str]
    approval_comment: Optional[str] = None
    approved_by: str = "system"


@router.get("")
def list_sales_plans(year_month: Optional[str] = None, year: Optional[int] = None,
                     customer: Optional[str] = None, status: Optional[str] = None,
                     session: Session = Depends(get_session)):
    return sales_plan_service.list_sales_plans(
        session, year_month=year_month, year=year, customer=customer, status=status
    )


@router.post("")
def create_sales_plan(request: SalesPlanCreate, session: Session = Depends(get_session)):
    return sales_plan_service.create_sales_plan(session, request.model_dump(exclude_none=True))


@router.get("/history")
def get_history(sales_plan_id: Optional[str] = None, year_month: Optional[str] = None,
                session: Session = Depends(get_session)):
    return sales_plan_service.list_history(session, sales_plan_id=sales_plan_id, year_month=year_month)


@router.post("/approve")
def approve_sales_plans(request: SalesPlanApproval, session: Session = Depends(get_session)):
    """Approve the draft plans among ids; others come back under "skipped"."""
    outcome = sales_plan_service.approve_sales_plans(
        session, request.ids, approval_comment=request.approval_comment,
        approved_by=request.approved_by,
    )
    return {"success": True, **outcome}


@router.get("/{plan_id}")
def get_sales_plan(plan_id: str, session: Session = Depends(get_session)):
    return sales_plan_service.get_sales_plan(session, plan_id)


@router.patch("/{plan_id}")
def update_sales_plan(plan_id: str, request: SalesPlanUpdate, session: Session = Depends(get_session)):
    changes = request.model_dump(exclude_unset=True, exclude={"changed_by", "change_reason"})
    return sales_plan_service.update_sales_plan(
        session, plan_id, changes, changed_by=request.changed_by, change_reason=request.change_reason
    )
