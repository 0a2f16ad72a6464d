# ============================================================================
# SLD STORE - MAIN APPLICATION
# ============================================================================
# STATUS: Core - FastAPI application entry point
# PURPOSE: HTTP front for template ingestion and config values
# CREATED: 18 OCT 2026
# ============================================================================
"""
SLD Store Main Application

FastAPI application that:
1. Opens the database pool on startup
2. Serves the SLD routes under /api/v1
3. Exposes liveness and readiness probes

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from __version__ import __version__, BUILD_DATE, CODENAME
from core.errors import RepositoryError
from repositories import UnitOfWork, init_pool, close_pool
from repositories.postgres_auth import get_postgres_token_status
from services import SldService
from api import router, set_sld_services

# Configure logging using our structured logging system
from core.logging import configure_logging, get_logger

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)

_pool = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Initializes services on startup, cleans up on shutdown.
    """
    global _pool

    logger.info(f"Starting {CODENAME} v{__version__} (Build {BUILD_DATE})")

    # Optional: deploy schema on startup (for development)
    if os.environ.get("AUTO_BOOTSTRAP_SCHEMA", "").lower() == "true":
        from repositories.schema import deploy_schema
        try:
            count = deploy_schema()
            logger.info(f"Schema bootstrap executed {count} statements")
        except RepositoryError as e:
            logger.warning(f"Schema bootstrap failed: {e}")

    _pool = await init_pool()
    logger.info("Database pool initialized")

    set_sld_services(SldService(_pool))
    logger.info("SLD service initialized")

    yield

    logger.info(f"Shutting down {CODENAME}...")
    set_sld_services(None)
    await close_pool()
    _pool = None
    logger.info(f"{CODENAME} stopped")


# Create FastAPI app
app = FastAPI(
    title=CODENAME,
    description="Transactional storage for SLD templates and their configurations",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api/v1")


@app.get("/livez")
async def livez():
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/readyz")
async def readyz():
    """Readiness probe: a round trip through the pool."""
    if _pool is None:
        return JSONResponse({"status": "starting"}, status_code=503)
    try:
        async with UnitOfWork(pool=_pool) as uow:
            await uow.query_one("SELECT 1 AS ok")
    except RepositoryError as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse({"status": "unavailable", "error": str(e)}, status_code=503)
    return {"status": "ready", "database_auth": get_postgres_token_status()}


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": CODENAME,
        "version": __version__,
        "build_date": BUILD_DATE,
        "status": "running",
        "docs": "/docs",
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
