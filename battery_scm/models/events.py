from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class Event(SQLModel, table=True):
    """Business event log: order/production/stock changes, MRP outcomes."""
    event_id: str = Field(primary_key=True)
    event_type: str = Field(index=True)  # e.g. MATERIAL_ORDER_CONFIRMED, SALES_PLAN_APPROVED
    description: str
    event_date: datetime
    metadata_json: Optional[str] = None  # JSON object, see services.event_logger
