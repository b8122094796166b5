from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    code: str = Field(primary_key=True)
    name: str
    category: str  # ESS, EV, SV, PLBM
    destination: str = ""


class BOMItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    product_code: str = Field(foreign_key="product.code", index=True)
    material_code: str = Field(foreign_key="material.code")
    quantity_per_unit: int


class Order(SQLModel, table=True):
    id: str = Field(primary_key=True)
    order_date: str  # YYYY-MM
    customer: str
    product_code: str = Field(foreign_key="product.code")
    category: str
    destination: str = ""
    predicted_quantity: int = 0
    confirmed_quantity: int = 0
    unit_price: float = 0.0
    total_amount: float = 0.0
    # predicted -> confirmed -> approved -> in_production -> shipped -> delivered
    status: str = "predicted"
    lead_time_days: int = 30
    expected_delivery_date: Optional[date] = None
    special_notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
