"""
DineFlow - Application Entry Point
===================================
FastAPI app initialization, error handling, and router registration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import settings
from config.database import Base, engine
from common.exceptions import DineFlowError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("dineflow.app")


# ==========================================
# Import ALL models so Alembic/Base can see them
# ==========================================
from modules.user.models import User  # noqa: F401, E402
from modules.catalog.models import MenuCategory, FoodItem  # noqa: F401, E402
from modules.cart.models import Cart, CartItem  # noqa: F401, E402
from modules.order.models import Order, OrderItem, OrderStatusLog  # noqa: F401, E402

# ==========================================
# Import routers
# ==========================================
from modules.catalog.routes import router as catalog_router  # noqa: E402
from modules.catalog.admin_routes import router as catalog_admin_router  # noqa: E402
from modules.cart.routes import router as cart_router  # noqa: E402
from modules.order.routes import router as order_router  # noqa: E402
from modules.order.admin_routes import router as order_admin_router  # noqa: E402
from modules.customer.admin_routes import router as customer_admin_router  # noqa: E402


@asynccontextmanager
async def lifespan(app):
    # Auto-create any missing tables (safe for existing tables)
    Base.metadata.create_all(bind=engine)
    logger.info("DineFlow API started")
    yield
    logger.info("DineFlow API stopped")


# ==========================================
# Create App
# ==========================================
app = FastAPI(
    title="DineFlow",
    description="Restaurant ordering API",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)


# ==========================================
# Exception handler: business errors → JSON
# ==========================================
@app.exception_handler(DineFlowError)
async def business_exception_handler(request: Request, exc: DineFlowError):
    """ValidationError 422, IllegalTransition 409, NotFound 404, auth 401/403."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(exc.to_dict(), status_code=exc.status_code, headers=headers)


# ==========================================
# Register Routers
# ==========================================
app.include_router(catalog_router)
app.include_router(catalog_admin_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(order_admin_router)
app.include_router(customer_admin_router)


# ==========================================
# Health check
# ==========================================
@app.get("/health")
async def health():
    return {"status": "ok", "version": "1.0.0"}
