from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field


class SalesPlan(SQLModel, table=True):
    """Monthly planned volume per customer and product."""
    id: str = Field(primary_key=True)  # SP-{year_month}-{customer}-{product_code}
    year_month: str = Field(index=True)  # YYYY-MM
    customer: str
    product_code: str = Field(foreign_key="product.code")
    product: str = ""
    category: str = ""
    planned_quantity: int = 0
    planned_revenue: float = 0.0
    status: str = "draft"  # draft -> approved
    approval_comment: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SalesPlanHistory(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    sales_plan_id: str = Field(foreign_key="salesplan.id", index=True)
    year_month: str
    changed_by: str = "system"
    previous_quantity: int
    new_quantity: int
    previous_revenue: float
    new_revenue: float
    change_reason: Optional[str] = None
    approval_comment: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Shipment(SQLModel, table=True):
    """Customer shipment; assigned to a dispatch (truck load) before it leaves."""
    id: str = Field(primary_key=True)
    shipment_number: str
    customer: str
    destination: str
    shipment_date: date
    dispatch_id: Optional[str] = Field(default=None, foreign_key="dispatch.id", index=True)
    total_amount: float = 0.0
    status: str = "registered"  # registered -> dispatched -> delivered
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ShipmentLine(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    shipment_id: str = Field(foreign_key="shipment.id", index=True)
    product_code: str = Field(foreign_key="product.code")
    quantity: int


class ShipmentPlanHistory(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    shipment_id: str = Field(foreign_key="shipment.id", index=True)
    customer: str
    change_type: str  # created, updated, status
    previous_shipment_date: Optional[date] = None
    new_shipment_date: Optional[date] = None
    previous_status: Optional[str] = None
    new_status: Optional[str] = None
    dispatch_id: Optional[str] = None
    change_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
