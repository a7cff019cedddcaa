import logging
from contextlib import asynccontextmanager

import httpx
import sentry_sdk
from fastapi import FastAPI

from imagegrid.api.health import router as health_router
from imagegrid.api.router import api_router
from imagegrid.config import settings
from imagegrid.core.exceptions import register_exception_handlers
from imagegrid.core.logging_config import configure_logging
from imagegrid.middleware.request_id import RequestIDMiddleware
from imagegrid.services.image_proxy import ImageProxy

# Configure structured logging (must happen before any logger is created)
configure_logging(log_format=settings.LOG_FORMAT, log_level=settings.LOG_LEVEL)

# Initialize Sentry error tracking
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        environment=settings.SENTRY_ENVIRONMENT,
        release=f"imagegrid@{settings.APP_VERSION}",
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(
        "Starting %s v%s (search configured: %s)",
        settings.APP_NAME, settings.APP_VERSION, settings.search_configured,
    )
    # Search calls carry the upstream's own latency; the proxy bounds its
    # wait separately with PROXY_TIMEOUT_SECONDS.
    app.state.search_client = httpx.AsyncClient(timeout=15)
    proxy_client = httpx.AsyncClient(timeout=None, follow_redirects=True)
    app.state.image_proxy = ImageProxy(proxy_client)

    yield

    logger.info("Shutting down...")
    await app.state.search_client.aclose()
    await proxy_client.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Image search with infinite-scroll pagination and a "
    "streaming image proxy for hosts that block cross-origin loading.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Request ID middleware (must be added before other middleware)
app.add_middleware(RequestIDMiddleware)

register_exception_handlers(app)

app.include_router(api_router)

# Health & metrics routes (no /api prefix)
app.include_router(health_router)


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "status": "running",
    }
