"""
Tablebook Reservation API - Main Application Entry Point

Restaurant table reservations with:
- Per-date capacity and time-slot settings owned by each venue
- Confirmed-seat capacity checks before any reservation is written
- Pending -> confirmed/rejected/cancelled lifecycle
- Memory or SQL storage selected at startup, Redis cache for the directory
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tablebook.api.middleware import RequestLoggingMiddleware
from tablebook.api.router import api_router
from tablebook.core.clock import get_clock
from tablebook.core.config import get_settings
from tablebook.core.errors import TablebookError
from tablebook.core.logging import get_logger, setup_logging
from tablebook.core.metrics import metrics_endpoint
from tablebook.db.session import dispose_engine
from tablebook.services.cache_service import close_redis, get_cache_stats, get_redis
from tablebook.services.venue_service import seed_sample_venues
from tablebook.storage.factory import get_backend_name, get_memory_storage

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    backend = get_backend_name()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        storage=backend,
        timezone=settings.TIMEZONE,
    )

    if backend == "memory" and settings.SEED_SAMPLE_VENUES:
        await seed_sample_venues(get_memory_storage(), get_clock())

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    yield

    await close_redis()
    if backend == "sql":
        await dispose_engine()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Restaurant table reservations with per-date capacity and owner confirmation",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(TablebookError)
async def tablebook_error_handler(request: Request, exc: TablebookError):
    """Render domain errors as {"detail": ..., "error": ...} with their HTTP status."""
    if exc.status_code >= 500:
        logger.error("request_error", error=exc.code, detail=exc.message)
    else:
        logger.info("request_rejected", error=exc.code, detail=exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
        headers=headers,
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "storage": get_backend_name(),
        "cache": cache_stats,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
