"""FastAPI application for the file store.

This module provides the main FastAPI application with health endpoints,
API routes, and lifecycle management.

Run with:
    uvicorn filestore.main:app --reload

Examples:
    >>> # Health check
    >>> curl http://localhost:8000/health

    >>> # Store and fetch a file
    >>> curl -X PUT --data-binary @report.pdf \\
    ...     "http://localhost:8000/api/v1/files?path=docs&name=report.pdf&type=application/pdf"
    >>> curl "http://localhost:8000/api/v1/files?id=1"

Tests:
    - tests/unit/test_main.py
    - tests/integration/test_api_files.py
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from filestore import __version__
from filestore.api.v1 import router as v1_router
from filestore.config import get_settings
from filestore.database import check_db_connection, close_db, init_db
from filestore.errors import FileStoreError
from filestore.handlers import FileService, get_file_service

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# Response models
class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: bool
    storage: bool


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str
    detail: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown tasks:
    - Create the files directory (startup fails if it cannot be created)
    - Create or verify the catalog table
    - Close connections on shutdown
    """
    # Startup
    logger.info(f"Starting filestore v{__version__}")

    await get_file_service().blob_store.ensure_root()

    try:
        await init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        # Continue anyway - requests will surface query errors

    yield

    # Shutdown
    logger.info("Shutting down filestore")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title="Filestore",
    description="Metadata-indexed blob store",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Include API v1 routes
app.include_router(v1_router)


# Exception handlers
@app.exception_handler(FileStoreError)
async def filestore_exception_handler(request, exc: FileStoreError):
    """Render domain errors with their status code."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions with consistent response format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")

    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = None

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error", detail=detail).model_dump(),
    )


# Health endpoints
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(
    service: FileService = Depends(get_file_service),
) -> HealthResponse:
    """Check application health.

    Returns status of:
    - Application
    - Database connection
    - Files directory

    Returns:
        HealthResponse with status information.
    """
    db_healthy = await check_db_connection()
    storage_healthy = service.blob_store.root.is_dir()

    return HealthResponse(
        status="healthy" if db_healthy and storage_healthy else "degraded",
        version=__version__,
        database=db_healthy,
        storage=storage_healthy,
    )


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint with basic info.

    Returns:
        Basic application information.
    """
    return {
        "name": "Filestore",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/api/v1/status", tags=["API"])
async def api_status(
    service: FileService = Depends(get_file_service),
) -> dict[str, Any]:
    """API status endpoint.

    Returns:
        API status, version and storage limits.
    """
    return {
        "api_version": "v1",
        "app_version": __version__,
        "environment": settings.ENVIRONMENT.value,
        "files_path": str(service.blob_store.root),
        "max_content_bytes": service.max_content_bytes,
        "max_param_length": service.max_param_length,
    }


# Entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "filestore.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
