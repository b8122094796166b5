# battery_scm/api/dispatch.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from ..database import get_session
from ..services import dispatch as dispatch_service

router = APIRouter(prefix="/api/dispatch", tags=["dispatch"])


class DispatchProduct(BaseModel):
    product_code: str
    quantity: int
    weight: float = 0.0


class DispatchCreate(BaseModel):
    vehicle_number: str
    vehicle_size: str
    destination: str
    products: List[DispatchProduct]
    dispatch_number: Optional[str] = None
    dispatch_date: Optional[date] = None
    is_mixed_load: Optional[bool] = None


class DispatchTransition(BaseModel):
    status: str
    actual_weight: Optional[float] = None


@router.get("")
def list_dispatches(session: Session = Depends(get_session)):
    return dispatch_service.list_dispatches(session)


@router.post("")
def create_dispatch(request: DispatchCreate, session: Session = Depends(get_session)):
    """Plan a load; the products are taken out of finished-goods stock."""
    return dispatch_service.create_dispatch(session, request.model_dump(exclude_none=True))


@router.post("/{dispatch_id}/status")
def transition_dispatch(dispatch_id: str, request: DispatchTransition,
                        session: Session = Depends(get_session)):
    return dispatch_service.transition_dispatch(
        session, dispatch_id, request.status, actual_weight=request.actual_weight
    )
