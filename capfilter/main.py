"""
capfilter - FastAPI Application Entry Point

Main application module with logging infrastructure,
middleware configuration, and route mounting.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from capfilter import __version__
from capfilter.config import settings
from capfilter.logs import configure_logging

# Configure logging on module load
configure_logging()

# Get logger for this module
logger = structlog.get_logger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info(
        "capfilter_starting",
        version=__version__,
        host=settings.host,
        port=settings.port,
        debug=settings.debug,
    )
    logger.info(
        "protocol_database",
        path=str(settings.protocols_file),
        available=settings.has_protocols_file,
    )

    yield

    # Shutdown
    logger.info("capfilter_shutdown")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="capfilter",
    description="Compiles structured capture criteria into pcap-filter expressions",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns service status and configuration info.
    """
    return {
        "status": "healthy",
        "service": "capfilter",
        "version": __version__,
        "protocols_file": settings.has_protocols_file,
    }


# =============================================================================
# API Routes
# =============================================================================

# Import and include API routes
from capfilter.api.routes import router as api_router

app.include_router(api_router, prefix="/api")


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "capfilter.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
