# battery_scm/main.py

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import func
from sqlmodel import Session, select

from .config import settings
from .database import create_db_and_tables, engine, get_session
from .errors import InsufficientStockError, InvalidInputError, InvalidTransitionError, NotFoundError
from .models import Dispatch, FinishedGoods, Material, Order, Production
from .seed_data import seed_master_data

from .api import data as data_api
from .api import dispatch as dispatch_api
from .api import inventory as inventory_api
from .api import materials as materials_api
from .api import mrp as mrp_api
from .api import orders as orders_api
from .api import productions as productions_api
from .api import sales_plans as sales_plans_api
from .api import shipments as shipments_api


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Battery SCM")

# Include API routers
app.include_router(mrp_api.router)
app.include_router(materials_api.router)
app.include_router(orders_api.router)
app.include_router(productions_api.router)
app.include_router(inventory_api.router)
app.include_router(dispatch_api.router)
app.include_router(sales_plans_api.router)
app.include_router(shipments_api.router)
app.include_router(data_api.router)


# ---------- domain errors -> HTTP ----------

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InsufficientStockError)
async def insufficient_stock_handler(request: Request, exc: InsufficientStockError):
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "product_code": exc.product_code,
            "requested": exc.requested,
            "available": exc.available,
        },
    )


@app.on_event("startup")
def startup_event():
    create_db_and_tables()
    if settings.seed_on_startup:
        with Session(engine) as session:
            seed_master_data(session)
    logger.info("Battery SCM ready (database=%s)", settings.database_url)


@app.get("/api/init")
def init_stats(session: Session = Depends(get_session)):
    """Row counts of the main tables."""
    def count(model):
        return session.exec(select(func.count()).select_from(model)).one()

    return {
        "orders": count(Order),
        "productions": count(Production),
        "materials": count(Material),
        "inventory": count(FinishedGoods),
        "dispatch": count(Dispatch),
    }
