from .master import Product, BOMItem, Order
from .supply import Material, PurchaseOrder
from .production import Production, FinishedGoods, Dispatch, DispatchLine
from .sales import SalesPlan, SalesPlanHistory, Shipment, ShipmentLine, ShipmentPlanHistory
from .events import Event

__all__ = [
    "Product",
    "BOMItem",
    "Order",
    "Material",
    "PurchaseOrder",
    "Production",
    "FinishedGoods",
    "Dispatch",
    "DispatchLine",
    "SalesPlan",
    "SalesPlanHistory",
    "Shipment",
    "ShipmentLine",
    "ShipmentPlanHistory",
    "Event",
]
