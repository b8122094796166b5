# battery_scm/services/sales_plans.py
"""
Monthly sales plans per customer and product.

Plans are edited while in draft and frozen once approved. Every quantity or
revenue change, and every approval, leaves a SalesPlanHistory row.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from ..errors import InvalidInputError, NotFoundError
from ..models.master import Product
from ..models.sales import SalesPlan, SalesPlanHistory
from .event_logger import log_event
from .status import check_transition

logger = logging.getLogger(__name__)

EDITABLE_SALES_PLAN_FIELDS = {"customer", "planned_quantity", "planned_revenue"}


def _record_history(session: Session, plan: SalesPlan, previous_quantity: int, previous_revenue: float,
                    changed_by: str = "system", change_reason: Optional[str] = None,
                    approval_comment: Optional[str] = None) -> None:
    session.add(
        SalesPlanHistory(
            sales_plan_id=plan.id,
            year_month=plan.year_month,
            changed_by=changed_by,
            previous_quantity=previous_quantity,
            new_quantity=plan.planned_quantity,
            previous_revenue=previous_revenue,
            new_revenue=plan.planned_revenue,
            change_reason=change_reason,
            approval_comment=approval_comment,
        )
    )


def list_sales_plans(
    session: Session,
    year_month: Optional[str] = None,
    year: Optional[int] = None,
    customer: Optional[str] = None,
    status: Optional[str] = None,
) -> List[SalesPlan]:
    """year_month wins over year when both are given."""
    query = select(SalesPlan)
    if year_month:
        query = query.where(SalesPlan.year_month == year_month)
    elif year:
        query = query.where(SalesPlan.year_month.startswith(f"{year}-"))
    if customer:
        query = query.where(SalesPlan.customer == customer)
    if status:
        query = query.where(SalesPlan.status == status)
    return list(session.exec(query.order_by(SalesPlan.id)).all())


def get_sales_plan(session: Session, plan_id: str) -> SalesPlan:
    plan = session.get(SalesPlan, plan_id)
    if plan is None:
        raise NotFoundError("SalesPlan", plan_id)
    return plan


def create_sales_plan(session: Session, data: dict) -> SalesPlan:
    product = session.get(Product, data["product_code"])
    if product is None:
        raise NotFoundError("Product", data["product_code"])
    for key in ("planned_quantity", "planned_revenue"):
        if data.get(key, 0) < 0:
            raise InvalidInputError(f"{key} cannot be negative")

    plan_id = data.get("id") or f"SP-{data['year_month']}-{data['customer']}-{product.code}"
    if session.get(SalesPlan, plan_id) is not None:
        raise InvalidInputError(f"Sales plan {plan_id} already exists")

    plan = SalesPlan(
        id=plan_id,
        year_month=data["year_month"],
        customer=data["customer"],
        product_code=product.code,
        product=data.get("product") or product.name,
        category=data.get("category") or product.category,
        planned_quantity=data.get("planned_quantity", 0),
        planned_revenue=data.get("planned_revenue", 0.0),
    )
    session.add(plan)
    log_event(session, "SALES_PLAN_CREATED", f"{plan.id}: {plan.planned_quantity} planned")
    session.commit()
    session.refresh(plan)
    return plan


def update_sales_plan(
    session: Session,
    plan_id: str,
    changes: dict,
    changed_by: str = "system",
    change_reason: Optional[str] = None,
) -> SalesPlan:
    unknown = set(changes) - EDITABLE_SALES_PLAN_FIELDS
    if unknown:
        raise InvalidInputError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    nulls = sorted(k for k, v in changes.items() if v is None)
    if nulls:
        raise InvalidInputError(f"Field(s) cannot be null: {', '.join(nulls)}")
    for key in ("planned_quantity", "planned_revenue"):
        if key in changes and changes[key] < 0:
            raise InvalidInputError(f"{key} cannot be negative")

    plan = get_sales_plan(session, plan_id)
    if plan.status != "draft":
        raise InvalidInputError(f"Sales plan {plan.id} is {plan.status} and can no longer be edited")

    previous_quantity = plan.planned_quantity
    previous_revenue = plan.planned_revenue
    for key, value in changes.items():
        setattr(plan, key, value)
    plan.updated_at = datetime.utcnow()
    session.add(plan)

    if (plan.planned_quantity, plan.planned_revenue) != (previous_quantity, previous_revenue):
        _record_history(session, plan, previous_quantity, previous_revenue,
                        changed_by=changed_by, change_reason=change_reason)
    session.commit()
    session.refresh(plan)
    return plan


def approve_sales_plans(
    session: Session,
    ids: List[str],
    approval_comment: Optional[str] = None,
    approved_by: str = "system",
) -> dict:
    """
    Approve every draft plan among ids in one commit.

    Unknown ids and plans that are not in draft are returned under
    "skipped" rather than failing the batch.
    """
    if not ids:
        raise InvalidInputError("At least one sales plan id is required")

    approved = []
    skipped = []
    for plan_id in ids:
        plan = session.get(SalesPlan, plan_id)
        if plan is None:
            skipped.append({"id": plan_id, "reason": "not_found"})
            continue
        if plan.status != "draft":
            skipped.append({"id": plan_id, "reason": f"status_{plan.status}"})
            continue

        check_transition("SalesPlan", plan.status, "approved")
        plan.status = "approved"
        plan.approval_comment = approval_comment
        plan.updated_at = datetime.utcnow()
        session.add(plan)
        _record_history(session, plan, plan.planned_quantity, plan.planned_revenue,
                        changed_by=approved_by, change_reason="approved",
                        approval_comment=approval_comment)
        approved.append(plan)

    if approved:
        log_event(
            session,
            "SALES_PLAN_APPROVED",
            f"{len(approved)} sales plan(s) approved by {approved_by}",
            metadata={"ids": [p.id for p in approved], "approval_comment": approval_comment},
        )
    session.commit()
    for plan in approved:
        session.refresh(plan)
    logger.info("Approved %d sales plan(s), skipped %d", len(approved), len(skipped))
    return {"approved": approved, "skipped": skipped}


def list_history(
    session: Session, sales_plan_id: Optional[str] = None, year_month: Optional[str] = None
) -> List[SalesPlanHistory]:
    query = select(SalesPlanHistory)
    if sales_plan_id:
        query = query.where(SalesPlanHistory.sales_plan_id == sales_plan_id)
    elif year_month:
        query = query.where(SalesPlanHistory.year_month == year_month)
    return list(session.exec(query.order_by(SalesPlanHistory.id)).all())
