from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field


class Production(SQLModel, table=True):
    id: str = Field(primary_key=True)
    order_id: str = Field(foreign_key="order.id", index=True)
    production_line: str
    planned_quantity: int
    inspected_quantity: int = 0
    production_date: str  # YYYY-MM
    estimated_start_date: Optional[date] = None
    status: str = "planned"  # planned -> in_progress -> completed -> inspected
    material_shortage: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)


class FinishedGoods(SQLModel, table=True):
    """On-hand finished product stock, one row per product."""
    id: Optional[int] = Field(default=None, primary_key=True)
    product_code: str = Field(foreign_key="product.code", unique=True)
    category: str
    quantity: int = 0
    location: str = "Gwangju Warehouse"
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Dispatch(SQLModel, table=True):
    id: str = Field(primary_key=True)
    dispatch_number: str
    vehicle_number: str
    vehicle_size: str  # 5t, 11t, 25t
    destination: str
    is_mixed_load: bool = False
    estimated_weight: float = 0.0
    actual_weight: Optional[float] = None
    dispatch_date: date
    status: str = "planned"  # planned -> dispatched -> completed
    created_at: datetime = Field(default_factory=datetime.utcnow)


class DispatchLine(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    dispatch_id: str = Field(foreign_key="dispatch.id", index=True)
    product_code: str = Field(foreign_key="product.code")
    quantity: int
    weight: float = 0.0
