# battery_scm/store.py
"""
Store object handed to the MRP engine and the other services.

Wraps one SQLModel Session and exposes the small read/write surface the
services depend on. Lookups that miss return None; callers decide whether
a miss is an error.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from fastapi import Depends
from sqlmodel import Session, select

from .database import get_session
from .models.master import BOMItem, Order, Product
from .models.production import Production
from .models.supply import Material


# One lock per material code, shared by every store in the process.
_stock_locks: Dict[str, threading.Lock] = {}
_stock_locks_guard = threading.Lock()


@contextmanager
def stock_lock(material_code: str):
    with _stock_locks_guard:
        lock = _stock_locks.setdefault(material_code, threading.Lock())
    with lock:
        yield


class ScmStore:
    def __init__(self, session: Session):
        self.session = session

    # ---------- materials ----------

    def get_all_materials(self) -> List[Material]:
        return list(self.session.exec(select(Material)).all())

    def get_material_by_code(self, code: str) -> Optional[Material]:
        return self.session.get(Material, code)

    def update_material(self, code: str, **changes) -> Optional[Material]:
        material = self.session.get(Material, code)
        if material is None:
            return None
        for key, value in changes.items():
            setattr(material, key, value)
        self.session.add(material)
        self.session.commit()
        self.session.refresh(material)
        return material

    def adjust_material_stock(
        self,
        code: str,
        delta: int,
        on_adjust: Optional[Callable[[Material, int], None]] = None,
    ) -> Optional[Tuple[Material, int]]:
        """
        Add delta to a material's current stock under the material's lock.

        on_adjust(material, previous_stock) runs after the increment and
        before the commit, so rows it adds (purchase orders, events) land
        in the same transaction. If it raises, nothing is committed.

        Returns (material, previous_stock), or None when the code is unknown.
        """
        with stock_lock(code):
            material = self.session.get(Material, code, populate_existing=True)
            if material is None:
                return None
            previous = material.current_stock
            material.current_stock = previous + delta
            self.session.add(material)
            try:
                if on_adjust is not None:
                    on_adjust(material, previous)
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
            self.session.refresh(material)
            return material, previous

    # ---------- productions ----------

    def get_all_productions(
        self, status_filter: Union[str, Iterable[str], None] = None
    ) -> List[Production]:
        query = select(Production)
        if isinstance(status_filter, str):
            query = query.where(Production.status == status_filter)
        elif status_filter is not None:
            query = query.where(Production.status.in_(list(status_filter)))
        return list(self.session.exec(query.order_by(Production.id)).all())

    def get_production_by_id(self, production_id: str) -> Optional[Production]:
        return self.session.get(Production, production_id)

    def update_production(self, production_id: str, **changes) -> Optional[Production]:
        production = self.session.get(Production, production_id)
        if production is None:
            return None
        for key, value in changes.items():
            setattr(production, key, value)
        self.session.add(production)
        self.session.commit()
        self.session.refresh(production)
        return production

    # ---------- orders / products / BOM ----------

    def get_order_by_id(self, order_id: str) -> Optional[Order]:
        return self.session.get(Order, order_id)

    def update_order(self, order_id: str, **changes) -> Optional[Order]:
        order = self.session.get(Order, order_id)
        if order is None:
            return None
        for key, value in changes.items():
            setattr(order, key, value)
        order.updated_at = datetime.utcnow()
        self.session.add(order)
        self.session.commit()
        self.session.refresh(order)
        return order

    def get_product_by_code(self, code: str) -> Optional[Product]:
        return self.session.get(Product, code)

    def get_bom_by_product_code(self, product_code: str) -> Optional[List[BOMItem]]:
        rows = self.session.exec(
            select(BOMItem)
            .where(BOMItem.product_code == product_code)
            .order_by(BOMItem.id)
        ).all()
        return list(rows) or None


def get_store(session: Session = Depends(get_session)) -> ScmStore:
    return ScmStore(session)
