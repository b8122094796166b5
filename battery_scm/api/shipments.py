# battery_scm/api/shipments.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from ..database import get_session
from ..services import shipments as shipment_service

router = APIRouter(prefix="/api/shipments", tags=["shipments"])


class ShipmentProduct(BaseModel):
    product_code: str
    quantity: int


class ShipmentCreate(BaseModel):
    customer: str
    destination: str
    products: List[ShipmentProduct]
    shipment_date: Optional[date] = None
    shipment_number: Optional[str] = None
    dispatch_id: Optional[str] = None
    total_amount: float = 0.0


class ShipmentUpdate(BaseModel):
    customer: Optional[str] = None
    destination: Optional[str] = None
    shipment_date: Optional[date] = None
    dispatch_id: Optional[str] = None
    total_amount: Optional[float] = None
    change_reason: Optional[str] = None


class ShipmentTransition(BaseModel):
    status: str


@router.get("")
def list_shipments(month: Optional[str] = None, dispatch_id: Optional[str] = None,
                   session: Session = Depends(get_session)):
    return shipment_service.list_shipments(session, month=month, dispatch_id=dispatch_id)


@router.post("")
def create_shipment(request: ShipmentCreate, session: Session = Depends(get_session)):
    return shipment_service.create_shipment(session, request.model_dump(exclude_none=True))


@router.get("/history")
def get_history(shipment_id: Optional[str] = None, customer: Optional[str] = None,
                session: Session = Depends(get_session)):
    return shipment_service.list_history(session, shipment_id=shipment_id, customer=customer)


@router.get("/{shipment_id}")
def get_shipment(shipment_id: str, session: Session = Depends(get_session)):
    return shipment_service.get_shipment_view(session, shipment_id)


@router.patch("/{shipment_id}")
def update_shipment(shipment_id: str, request: ShipmentUpdate, session: Session = Depends(get_session)):
    changes = request.model_dump(exclude_unset=True, exclude={"change_reason"})
    return shipment_service.update_shipment(
        session, shipment_id, changes, change_reason=request.change_reason
    )


@router.post("/{shipment_id}/status")
def transition_shipment(shipment_id: str, request: ShipmentTransition,
                        session: Session = Depends(get_session)):
    """registered -> dispatched -> delivered; dispatching needs an assigned dispatch."""
    return shipment_service.transition_shipment(session, shipment_id, request.status)
