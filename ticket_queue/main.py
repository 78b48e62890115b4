"""
Ticket Queue API - Main Application Entry Point

Purchase request intake and fair queue allocation for ticket sales rounds:
- Intake rules (open window, known references, 4 ticket cap) on every write
- One-shot, uniformly random queue allocation per sales round
- Redis read-through cache for catalog lookups
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI

from ticket_queue.core.config import get_settings
from ticket_queue.core.logging import setup_logging, get_logger
from ticket_queue.core.metrics import metrics_endpoint
from ticket_queue.api.errors import register_error_handlers
from ticket_queue.api.router import api_router
from ticket_queue.api.middleware import RequestLoggingMiddleware
from ticket_queue.db.session import close_engine
from ticket_queue.infrastructure.redis_client import get_redis, close_redis
from ticket_queue.services.cache_service import get_cache_stats

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if await get_redis():
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Catalog lookups go straight to the database")

    yield

    await close_redis()
    await close_engine()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Purchase request intake and fair queue allocation for ticket sales rounds",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)
register_error_handlers(app)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": await get_cache_stats(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()
