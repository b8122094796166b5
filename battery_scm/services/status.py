# battery_scm/services/status.py
"""
Forward-only status machines for productions, orders, dispatches,
sales plans and shipments.
"""

from ..errors import InvalidTransitionError

PRODUCTION_FLOW = ["planned", "in_progress", "completed", "inspected"]
ORDER_FLOW = ["predicted", "confirmed", "approved", "in_production", "shipped", "delivered"]
DISPATCH_FLOW = ["planned", "dispatched", "completed"]
SALES_PLAN_FLOW = ["draft", "approved"]
SHIPMENT_FLOW = ["registered", "dispatched", "delivered"]

_FLOWS = {
    "Production": PRODUCTION_FLOW,
    "Order": ORDER_FLOW,
    "Dispatch": DISPATCH_FLOW,
    "SalesPlan": SALES_PLAN_FLOW,
    "Shipment": SHIPMENT_FLOW,
}


def next_status(kind: str, current: str):
    flow = _FLOWS[kind]
    if current not in flow:
        return None
    idx = flow.index(current)
    return flow[idx + 1] if idx + 1 < len(flow) else None


def check_transition(kind: str, current: str, target: str) -> None:
    """Allow exactly one step forward; raise InvalidTransitionError otherwise."""
    if target not in _FLOWS[kind] or next_status(kind, current) != target:
        raise InvalidTransitionError(kind, current, target)
