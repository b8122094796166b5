from typing import Optional
from datetime import date
from sqlmodel import SQLModel, Field


class Material(SQLModel, table=True):
    code: str = Field(primary_key=True)
    name: str
    category: str = ""
    unit: str = "EA"
    unit_price: float = 0.0
    current_stock: int = 0
    min_stock: int = 0
    supplier: str = ""
    lead_time_days: int = 0


class PurchaseOrder(SQLModel, table=True):
    po_id: str = Field(primary_key=True)
    material_code: str = Field(foreign_key="material.code")
    supplier: str
    quantity: int
    order_date: date
    eta_date: date
    status: str = "CONFIRMED"
