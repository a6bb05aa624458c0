"""
Storefront service

Catalog, checkout with Razorpay, and fulfilment through Shiprocket.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from shared.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from storefront.core_settings import get_settings
from storefront.infrastructure.db import engine, init_models
from storefront.api.errors import register_exception_handlers
from storefront.api.catalog import router as catalog_router
from storefront.api.admin_catalog import router as admin_catalog_router
from storefront.api.admin_orders import router as admin_orders_router
from storefront.api.checkout import router as checkout_router
from storefront.api.orders import router as account_router
from storefront.api.shipping import router as shipping_router
from storefront.api.webhooks import router as webhooks_router

SERVICE_NAME = "storefront-service"
SERVICE_DESCRIPTION = "Storefront: catalog, Razorpay checkout and Shiprocket fulfilment"

settings = get_settings()

setup_logging(
    service_name=SERVICE_NAME,
    level=settings.LOG_LEVEL,
    environment=settings.ENVIRONMENT,
    version=settings.SERVICE_VERSION,
)

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {SERVICE_NAME} version {settings.SERVICE_VERSION}")

    # Schema is owned by alembic in deployed environments; create_all only fills gaps
    try:
        init_models()
        logger.info("Database models initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database models: {e}")
        raise

    missing = settings.missing_required()
    if missing:
        logger.warning(
            "Required configuration missing",
            extra={"extra_fields": {"missing": missing}},
        )

    logger.info(f"{SERVICE_NAME} started successfully")
    yield
    logger.info(f"Shutting down {SERVICE_NAME}")

app = FastAPI(
    title=SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

health_service = ServiceHealth(
    SERVICE_NAME,
    settings.SERVICE_VERSION,
    engine=engine,
    redis_url=settings.REDIS_URL,
    config_check=settings.missing_required,
)
app.include_router(health_service.create_health_router())

app.include_router(catalog_router)
app.include_router(checkout_router)
app.include_router(webhooks_router)
app.include_router(shipping_router)
app.include_router(account_router)
app.include_router(admin_catalog_router)
app.include_router(admin_orders_router)

@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "status": "running",
        "docs": "/api/docs",
    }

@app.get("/info")
async def info():
    """Service information endpoint"""
    return {
        "service": SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "description": SERVICE_DESCRIPTION,
        "environment": settings.ENVIRONMENT,
        "endpoints": {
            "health": "/health",
            "ready": "/health/ready",
            "live": "/health/live",
            "startup": "/health/startup",
            "metrics": "/metrics",
            "docs": "/api/docs",
        },
    }
