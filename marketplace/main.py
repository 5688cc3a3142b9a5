"""
marketplace/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
import time

from marketplace.core.config import settings, validate_settings
from marketplace.core.errors import add_exception_handlers
from marketplace.core.logging import setup_logging, get_logger
from marketplace.db.mongo import connect_to_mongo, close_mongo_connection, check_database_health
from marketplace.db.indexes import create_indexes
from marketplace.services.upload_service import close_upload_service
from marketplace.api import (
    admin,
    auth,
    banners,
    cart,
    homepage_sections,
    orders,
    payments,
    products,
    seller_products,
    sellers,
    users,
    vendor,
    wishlist,
)

# Initialize logging first
setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "X-XSS-Protection": "0",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("Starting marketplace API...")

    try:
        validate_settings()
        logger.info("Configuration validated")

        await connect_to_mongo()
        await create_indexes()

        if not await check_database_health():
            logger.warning("Database health check failed during startup")

        logger.info(f"Marketplace API started (environment: {settings.ENVIRONMENT})")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield

    logger.info("Shutting down marketplace API...")

    try:
        await close_upload_service()
        await close_mongo_connection()
        logger.info("Marketplace API shut down")

    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title=f"{settings.SITE_NAME} API",
    description="Multi-role e-commerce backend (customers, vendors, sellers, admins)",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/api-docs",
    openapi_url="/api-docs.json",
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    if settings.is_production:
        response.headers.setdefault("Strict-Transport-Security", "max-age=15552000; includeSubDomains")
    return response


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log slow requests
    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"process_time": process_time}
        )

    return response


add_exception_handlers(app)


# Register API routes
prefix = settings.API_PREFIX

app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Auth"])
app.include_router(users.router, prefix=f"{prefix}/users", tags=["Users"])
app.include_router(sellers.router, prefix=f"{prefix}/sellers", tags=["Sellers"])
app.include_router(seller_products.router, prefix=f"{prefix}/seller/products", tags=["Seller Products"])
app.include_router(products.router, prefix=f"{prefix}/products", tags=["Products"])
app.include_router(cart.router, prefix=f"{prefix}/cart", tags=["Cart"])
app.include_router(wishlist.router, prefix=f"{prefix}/wishlist", tags=["Wishlist"])
app.include_router(orders.router, prefix=f"{prefix}/orders", tags=["Orders"])
app.include_router(payments.router, prefix=f"{prefix}/payments", tags=["Payments"])
app.include_router(banners.router, prefix=f"{prefix}/banners", tags=["Banners"])
app.include_router(banners.admin_router, prefix=f"{prefix}/admin/banners", tags=["Admin Banners"])
app.include_router(homepage_sections.router, prefix=f"{prefix}/homepage-sections", tags=["Homepage Sections"])
app.include_router(
    homepage_sections.admin_router, prefix=f"{prefix}/admin/homepage-sections", tags=["Admin Homepage Sections"]
)
app.include_router(vendor.router, prefix=f"{prefix}/vendor", tags=["Vendor"])
app.include_router(admin.router, prefix=f"{prefix}/admin", tags=["Admin"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": f"{settings.SITE_NAME} API",
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT,
        "docs": "/api-docs",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "success",
        "message": "Server is running",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
    }


# Readiness probe (for Kubernetes/orchestration)
@app.get("/ready", tags=["Health"])
async def readiness_check():
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    try:
        db_healthy = await check_database_health()
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": str(e)}
        )
    if db_healthy:
        return {"status": "ready"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": "database_unavailable"}
    )


@app.get("/live", tags=["Health"])
async def liveness_check():
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "marketplace.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
