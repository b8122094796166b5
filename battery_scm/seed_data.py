from datetime import date, timedelta
from sqlmodel import Session, select
from .models.master import Product, BOMItem, Order
from .models.supply import Material
from .models.production import Production, FinishedGoods


LEAD_TIMES = {"ESS": 45, "EV": 30, "SV": 21, "PLBM": 25}
UNIT_PRICES = {"ESS": 15_000_000, "EV": 8_000_000, "SV": 5_000_000, "PLBM": 3_000_000}


def seed_master_data(session: Session) -> None:
    """
    Seeds products, materials, BOMs and a small set of orders / productions.
    Skips seeding if Product table is non-empty.
    """
    if session.exec(select(Product)).first():
        return

    today = date.today()
    this_month = today.strftime("%Y-%m")
    last_month = (today.replace(day=1) - timedelta(days=1)).strftime("%Y-%m")

    # === Products ===
    products = [
        Product(code="ESS-001", name="ESS Module A", category="ESS", destination="Japan"),
        Product(code="ESS-002", name="ESS Module B", category="ESS", destination="Japan"),
        Product(code="EV-100", name="EV Battery Module", category="EV", destination="Europe"),
        Product(code="EV-100K", name="EV Battery Module", category="EV", destination="Changwon"),
        Product(code="EV-200", name="EV Pack Assembly", category="EV", destination="Europe"),
        Product(code="SV-001", name="Service Module A", category="SV", destination="Ulsan"),
        Product(code="SV-002", name="Service Module B", category="SV", destination="Gyeongju"),
        Product(code="PLBM-A01", name="PLBM Spec A1", category="PLBM", destination="Ulsan Glovis"),
        Product(code="PLBM-A02", name="PLBM Spec A2", category="PLBM", destination="Ulsan Glovis"),
        Product(code="PLBM-B01", name="PLBM Spec B1", category="PLBM", destination="Gyeongju"),
        Product(code="PLBM-B02", name="PLBM Spec B2", category="PLBM", destination="Ulsan Offsite Warehouse"),
    ]
    session.add_all(products)

    # === Materials ===
    materials = [
        Material(code="CELL-001", name="Li-ion cell", category="Battery cell", unit="EA",
                 unit_price=50_000, current_stock=15_000, min_stock=10_000,
                 supplier="LG Energy Solution", lead_time_days=14),
        Material(code="BMS-001", name="BMS module", category="Electronics", unit="EA",
                 unit_price=200_000, current_stock=500, min_stock=200,
                 supplier="Samsung SDI", lead_time_days=10),
        Material(code="FRAME-001", name="Aluminium frame", category="Structure", unit="EA",
                 unit_price=150_000, current_stock=300, min_stock=150,
                 supplier="POSCO", lead_time_days=7),
        Material(code="CABLE-001", name="High-voltage cable", category="Wiring", unit="M",
                 unit_price=30_000, current_stock=2_000, min_stock=1_000,
                 supplier="LS Cable", lead_time_days=5),
        Material(code="COOL-001", name="Cooling system", category="Thermal", unit="EA",
                 unit_price=300_000, current_stock=150, min_stock=100,
                 supplier="Hanon Systems", lead_time_days=12),
    ]
    session.add_all(materials)

    # === BOM (finished product -> materials, single level) ===
    bom_rows = {
        "ESS-001": [("CELL-001", 200), ("BMS-001", 2), ("FRAME-001", 2), ("CABLE-001", 6), ("COOL-001", 2)],
        "ESS-002": [("CELL-001", 180), ("BMS-001", 2), ("FRAME-001", 2), ("CABLE-001", 6), ("COOL-001", 1)],
        "EV-100": [("CELL-001", 150), ("BMS-001", 1), ("FRAME-001", 1), ("CABLE-001", 4), ("COOL-001", 1)],
        "EV-100K": [("CELL-001", 150), ("BMS-001", 1), ("FRAME-001", 1), ("CABLE-001", 4), ("COOL-001", 1)],
        "EV-200": [("CELL-001", 300), ("BMS-001", 2), ("FRAME-001", 2), ("CABLE-001", 8), ("COOL-001", 2)],
        "SV-001": [("CELL-001", 60), ("BMS-001", 1), ("FRAME-001", 1), ("CABLE-001", 2)],
        "SV-002": [("CELL-001", 60), ("BMS-001", 1), ("FRAME-001", 1), ("CABLE-001", 2)],
        "PLBM-A01": [("CELL-001", 24), ("BMS-001", 1), ("CABLE-001", 2)],
        "PLBM-A02": [("CELL-001", 24), ("BMS-001", 1), ("CABLE-001", 2)],
        "PLBM-B01": [("CELL-001", 24), ("BMS-001", 1), ("CABLE-001", 3)],
        "PLBM-B02": [("CELL-001", 24), ("BMS-001", 1), ("CABLE-001", 3)],
    }
    for product_code, lines in bom_rows.items():
        for material_code, qty in lines:
            session.add(BOMItem(product_code=product_code, material_code=material_code, quantity_per_unit=qty))

    # === Orders ===
    # (id, month, customer, product, qty, status)
    order_rows = [
        ("ORD-000001", last_month, "Hyundai Motor", "EV-100", 480, "delivered"),
        ("ORD-000002", last_month, "Samsung SDI", "EV-200", 350, "delivered"),
        ("ORD-000003", last_month, "Japan Trading", "ESS-001", 60, "delivered"),
        ("ORD-000004", last_month, "Hyundai Motor", "SV-001", 35, "delivered"),
        ("ORD-000005", this_month, "Hyundai Motor", "EV-100", 120, "in_production"),
        ("ORD-000006", this_month, "Samsung SDI", "EV-100K", 50, "approved"),
        ("ORD-000007", this_month, "Hyundai Motor", "PLBM-A01", 18, "approved"),
        ("ORD-000008", this_month, "Europe Trading", "EV-200", 400, "confirmed"),
        ("ORD-000009", this_month, "Japan Trading", "ESS-002", 55, "predicted"),
    ]
    category_of = {p.code: p.category for p in products}
    dest_of = {p.code: p.destination for p in products}
    for oid, month, customer, product_code, qty, status in order_rows:
        category = category_of[product_code]
        confirmed = qty if status != "predicted" else 0
        session.add(
            Order(
                id=oid,
                order_date=month,
                customer=customer,
                product_code=product_code,
                category=category,
                destination=dest_of[product_code],
                predicted_quantity=qty,
                confirmed_quantity=confirmed,
                unit_price=UNIT_PRICES[category],
                total_amount=qty * UNIT_PRICES[category],
                status=status,
                lead_time_days=LEAD_TIMES[category],
            )
        )

    # === Productions ===
    # delivered orders were built and inspected last month; approved ones are queued
    production_rows = [
        ("PROD-000001", "ORD-000001", 480, 475, last_month, "inspected"),
        ("PROD-000002", "ORD-000002", 350, 346, last_month, "inspected"),
        ("PROD-000003", "ORD-000003", 60, 60, last_month, "inspected"),
        ("PROD-000004", "ORD-000004", 35, 34, last_month, "inspected"),
        ("PROD-000005", "ORD-000005", 120, 0, this_month, "in_progress"),
        ("PROD-000006", "ORD-000006", 50, 0, this_month, "planned"),
        ("PROD-000007", "ORD-000007", 18, 0, this_month, "planned"),
    ]
    product_of = {r[0]: r[3] for r in order_rows}
    for pid, oid, planned, inspected, month, status in production_rows:
        product_code = product_of[oid]
        session.add(
            Production(
                id=pid,
                order_id=oid,
                production_line="Gwangju Plant 1" if category_of[product_code] == "EV" else "Gwangju Plant 2",
                planned_quantity=planned,
                inspected_quantity=inspected,
                production_date=month,
                estimated_start_date=today + timedelta(days=3) if status == "planned" else None,
                status=status,
            )
        )

    # === Finished goods (inspected output, some already shipped) ===
    on_hand = {"EV-100": 40, "EV-200": 26, "ESS-001": 12, "SV-001": 9}
    for product_code, qty in on_hand.items():
        session.add(FinishedGoods(product_code=product_code, category=category_of[product_code], quantity=qty))

    session.commit()
