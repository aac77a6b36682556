# bakery/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from bakery.core.config import get_settings
from bakery.database import create_db_and_tables

# Table models must be imported before create_all() runs
from bakery.models import user as _user_models  # noqa: F401
from bakery.models import product as _product_models  # noqa: F401
from bakery.models import cart as _cart_models  # noqa: F401
from bakery.models import order as _order_models  # noqa: F401


# Routers
from bakery.routers.users import router as users_router
from bakery.routers.products import router as products_router
from bakery.routers.cart import router as cart_router
from bakery.routers.orders import router as orders_router
from bakery.routers.admin_orders import router as admin_orders_router
from bakery.routers.admin_reports import router as admin_reports_router

settings = get_settings()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create missing tables on startup; fail fast if the database is unreachable.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error("Startup: DB connection FAILED: %s", e)
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Everything except the health check lives under /api/v1
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(admin_orders_router, prefix=settings.API_V1_STR)
app.include_router(admin_reports_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "bakery-backend"}
