"""
FastAPI application for the Gmail connect backend.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.infrastructure.observability.logging import get_logger, log_request, setup_logging
from app.routes import gmail_auth, health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration; clients are created per request."""
    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        supabase_configured=settings.supabase_configured(),
        google_oauth_configured=settings.google_oauth_configured(),
    )

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title="Found Money Gmail Connect",
    description="OAuth callback and Supabase helpers for connecting Gmail",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(gmail_auth.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
