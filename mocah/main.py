from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from mocah.apps.templates.routers import brand_guide_router, cache_router
from mocah.core.config import app_logger, settings
from mocah.core.db import dispose_db
from mocah.core.dependencies import SessionDep
from mocah.core.exceptions.handlers import EXCEPTION_HANDLERS, exception_schema
from mocah.core.services import RedisService


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info("Starting application...")

    # Initialize Redis service (never raises; caching is off if unavailable)
    app_logger.info("Initializing Redis service...")
    if await RedisService.init():
        app_logger.info("Redis service initialized successfully.")
    else:
        app_logger.warning("Redis service unavailable; running without cache.")

    # Yield control back to the application
    yield

    # Cleanup on shutdown
    app_logger.info("Shutting down application...")

    app_logger.info("Closing Redis service...")
    await RedisService.aclose()
    app_logger.info("Redis service closed successfully.")

    app_logger.info("Disposing database engine...")
    await dispose_db()
    app_logger.info("Database engine disposed successfully.")


app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=settings.APP_DESCRIPTION,
    debug=settings.DEBUG,
    openapi_url="/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    responses=exception_schema,
)

# Register exception handlers (resolved by exception MRO, most specific wins)
for exception_class, handler in EXCEPTION_HANDLERS:
    app.add_exception_handler(exception_class, handler)

# Include routers
app.include_router(cache_router)
app.include_router(brand_guide_router)


@app.head("/health", include_in_schema=False)
@app.get("/health")
async def health_check(session: SessionDep):
    """
    Health check endpoint to verify if the API is running.

    Checks:
        - Database connectivity (503 when unhealthy)
        - Redis connectivity (reported only; the service runs without cache)
    """
    health_status = {
        "status": "ok",
        "message": f"{settings.APP_NAME} API is running.",
        "checks": {
            "database": "ok",
            "redis": "ok",
        },
    }

    # Check database connectivity
    try:
        result = await session.execute(text("SELECT 1"))
        if result.scalar() != 1:
            health_status["checks"]["database"] = "unhealthy"
    except Exception as e:
        app_logger.error(f"Database health check failed: {e}")
        health_status["checks"]["database"] = "unhealthy"

    # Check Redis connectivity
    if not RedisService.is_available():
        health_status["checks"]["redis"] = "disabled"
        health_status["status"] = "degraded"
    elif not await RedisService.ping():
        health_status["checks"]["redis"] = "unhealthy"
        health_status["status"] = "degraded"

    if health_status["checks"]["database"] != "ok":
        health_status["status"] = "unhealthy"
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health_status
        )

    return health_status
