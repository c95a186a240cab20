# orderdesk/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from orderdesk.core.config import get_settings
from orderdesk.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from orderdesk.models import user as _user_models  # noqa: F401
from orderdesk.models import customer as _customer_models  # noqa: F401
from orderdesk.models import product as _product_models  # noqa: F401
from orderdesk.models import order as _order_models  # noqa: F401


# Routers
from orderdesk.routers.users import router as users_router
from orderdesk.routers.customers import router as customers_router
from orderdesk.routers.products import router as products_router
from orderdesk.routers.orders import router as orders_router
from orderdesk.routers.dashboard import router as dashboard_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "OrderDesk API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(customers_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(dashboard_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "orderdesk-backend"}


@app.get("/health")
def health():
    return {"status": "ok"}
