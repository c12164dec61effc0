"""
HealthBridge - Main FastAPI Application
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings
from .api import health_router
from .core.logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    setup_logging(settings)

    source_config = settings.source_config()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Live sync file: {source_config.live_sync_path}")
    logger.info(f"Export directory: {source_config.health_export_dir}")
    logger.info(
        f"Export limits: {source_config.max_export_bytes} bytes, "
        f"{source_config.parse_timeout_seconds:.1f}s parse timeout"
    )
    yield
    logger.info(f"Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Apple Watch health summaries from live sync, XML export or synthetic data",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

app.include_router(health_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/status")
async def status_check():
    """Liveness endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "healthbridge.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.debug
    )
