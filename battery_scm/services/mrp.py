# battery_scm/services/mrp.py
"""
Material requirements planning.

Demand comes from productions that are still going to draw material
(planned / in_progress). Each one is exploded through its order's
single-level BOM and summed per material, then compared to current stock.
"""

import logging
from typing import Dict, List

from ..errors import InvalidInputError, NotFoundError
from ..models.supply import PurchaseOrder
from ..store import ScmStore
from ..utils.helpers import days_from_today, today
from .event_logger import log_event

logger = logging.getLogger(__name__)

ACTIVE_PRODUCTION_STATUSES = ("planned", "in_progress")


class MRPEngine:
    def __init__(self, store: ScmStore):
        self.store = store

    def _demand_by_material(self):
        """
        Sum qty_per_unit x planned_quantity per material over active productions.

        Returns (required_by_material, unresolved_production_ids).
        """
        required: Dict[str, int] = {}
        unresolved: List[str] = []

        for p in self.store.get_all_productions(ACTIVE_PRODUCTION_STATUSES):
            order = self.store.get_order_by_id(p.order_id)
            if order is None:
                logger.warning("Production %s references missing order %s", p.id, p.order_id)
                unresolved.append(p.id)
                continue

            bom = self.store.get_bom_by_product_code(order.product_code)
            if bom is None:
                logger.warning("No BOM for product %s (production %s)", order.product_code, p.id)
                unresolved.append(p.id)
                continue

            for line in bom:
                required[line.material_code] = (
                    required.get(line.material_code, 0)
                    + line.quantity_per_unit * p.planned_quantity
                )

        return required, unresolved

    def calculate_requirements(self) -> List[dict]:
        """
        One requirement record per material, in store order.

        Missing orders / BOMs contribute nothing, but every record is then
        marked data_incomplete so a zero requirement can't be mistaken for
        a clean result.
        """
        required_by_material, unresolved = self._demand_by_material()
        data_incomplete = bool(unresolved)

        out = []
        seen = set()
        for m in self.store.get_all_materials():
            seen.add(m.code)
            required = required_by_material.get(m.code, 0)
            available = m.current_stock
            shortage = max(0, required - available)
            out.append(
                {
                    "material": m.code,
                    "material_name": m.name,
                    "unit": m.unit,
                    "required": required,
                    "available": available,
                    "shortage": shortage,
                    "order_needed": shortage > 0,
                    "data_incomplete": data_incomplete,
                }
            )

        for code in required_by_material:
            if code not in seen:
                logger.warning("BOM references unknown material %s", code)

        return out

    def calculate_requirements_for_production(self, production_id: str) -> dict:
        production = self.store.get_production_by_id(production_id)
        if production is None:
            raise NotFoundError("Production", production_id)

        order = self.store.get_order_by_id(production.order_id)
        if order is None:
            raise NotFoundError("Order", production.order_id)

        bom = self.store.get_bom_by_product_code(order.product_code)
        if bom is None:
            raise NotFoundError("BOM", order.product_code)

        requirements = []
        for line in bom:
            material = self.store.get_material_by_code(line.material_code)
            total_required = line.quantity_per_unit * production.planned_quantity
            current_stock = material.current_stock if material else 0
            unit_price = material.unit_price if material else 0
            shortage = max(0, total_required - current_stock)
            requirements.append(
                {
                    "material_code": line.material_code,
                    "material_name": material.name if material else "",
                    "unit": material.unit if material else "",
                    "required_per_unit": line.quantity_per_unit,
                    "total_required": total_required,
                    "current_stock": current_stock,
                    "shortage": shortage,
                    "is_shortage": shortage > 0,
                    "supplier": material.supplier if material else "",
                    "lead_time_days": material.lead_time_days if material else 0,
                    "unit_price": unit_price,
                    "total_cost": shortage * unit_price,
                }
            )

        has_shortage = any(r["is_shortage"] for r in requirements)
        max_lead_time = max(
            (r["lead_time_days"] for r in requirements if r["is_shortage"]), default=0
        )
        if has_shortage:
            estimated_start = days_from_today(max_lead_time)
        else:
            estimated_start = production.estimated_start_date

        self.store.update_production(production.id, material_shortage=has_shortage)
        if has_shortage:
            short = ", ".join(r["material_code"] for r in requirements if r["is_shortage"])
            log_event(
                self.store.session,
                "MATERIAL_SHORTAGE",
                f"{production.id} short of {short}; earliest start {estimated_start.isoformat()}",
                metadata={
                    "production_id": production.id,
                    "materials": [r["material_code"] for r in requirements if r["is_shortage"]],
                    "estimated_production_start": estimated_start.isoformat(),
                },
            )
            self.store.session.commit()

        return {
            "production_id": production.id,
            "product": order.product_code,
            "planned_quantity": production.planned_quantity,
            "requirements": requirements,
            "has_shortage": has_shortage,
            "max_lead_time": max_lead_time,
            "estimated_production_start": estimated_start,
        }

    def confirm_material_orders(self, lines: List[dict]) -> dict:
        """
        Book ordered quantities straight into stock.

        Each line is {"material_code", "order_quantity"}. Unknown materials
        and non-positive quantities are returned under "rejected" instead of
        being applied.
        """
        if not lines:
            raise InvalidInputError("At least one material order line is required")

        results = []
        rejected = []
        order_date = today()

        for item in lines:
            code = item.get("material_code")
            qty = item.get("order_quantity")

            if not isinstance(qty, int) or isinstance(qty, bool) or qty <= 0:
                rejected.append(
                    {"material_code": code, "order_quantity": qty, "reason": "invalid_quantity"}
                )
                continue

            placed = []
            adjusted = None
            if code:
                adjusted = self.store.adjust_material_stock(
                    code,
                    qty,
                    on_adjust=lambda material, previous: placed.append(
                        self._record_purchase_order(material, previous, qty, order_date)
                    ),
                )
            if adjusted is None:
                rejected.append(
                    {"material_code": code, "order_quantity": qty, "reason": "unknown_material"}
                )
                continue

            material, previous = adjusted
            results.append(
                {
                    "material_code": material.code,
                    "previous_stock": previous,
                    "ordered_quantity": qty,
                    "new_stock": material.current_stock,
                    "lead_time_days": material.lead_time_days,
                    "expected_arrival": placed[0].eta_date,
                }
            )

        if rejected:
            logger.info("Rejected %d material order line(s)", len(rejected))
        return {"results": results, "rejected": rejected}

    def _record_purchase_order(self, material, previous: int, qty: int, order_date) -> PurchaseOrder:
        """PO row plus event for one confirmed line; committed with the stock change."""
        po = PurchaseOrder(
            po_id=self._next_po_id(material.code, order_date),
            material_code=material.code,
            supplier=material.supplier,
            quantity=qty,
            order_date=order_date,
            eta_date=days_from_today(material.lead_time_days),
            status="CONFIRMED",
        )
        self.store.session.add(po)
        log_event(
            self.store.session,
            "MATERIAL_ORDER_CONFIRMED",
            f"{po.po_id}: {qty} of {material.code} from {material.supplier}, "
            f"stock {previous} -> {material.current_stock}",
            metadata={
                "po_id": po.po_id,
                "material_code": material.code,
                "quantity": qty,
                "previous_stock": previous,
                "new_stock": material.current_stock,
                "eta_date": po.eta_date.isoformat(),
            },
        )
        return po

    def _next_po_id(self, material_code: str, order_date) -> str:
        base = f"PO-{material_code}-{order_date.strftime('%Y%m%d')}"
        po_id = base
        n = 1
        while self.store.session.get(PurchaseOrder, po_id) is not None:
            n += 1
            po_id = f"{base}-{n}"
        return po_id
