"""
API module for the PaperFlow application.
"""
import os
import time
import shutil
import logging
import platform
from contextlib import asynccontextmanager

import pikepdf
import psutil
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from paperflow import config
from paperflow.api.deps import get_compression_service
from paperflow.api.v1 import router as v1_router
from paperflow.core.exceptions import (
    CompressionError,
    SourceNotFoundError,
    SourceUnreadableError
)

# Set up logging
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Probe Ghostscript once on startup."""
    os.makedirs(config.UPLOADS_DIR, exist_ok=True)
    get_compression_service().startup_check()
    yield
    logger.info("PaperFlow API shutting down")


# Create FastAPI app
app = FastAPI(
    title="PaperFlow PDF Compression API",
    description="""
    API for reducing PDF file size:
    - Ghostscript compression with level-specific presets
    - pikepdf re-serialization as a fallback

    Provides compression, compression analysis, and compression statistics.
    """,
    version=VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Compression-Id", "X-Compression-Ratio", "X-Compression-Stats-URL"],
)

# Include routers
app.include_router(v1_router, prefix="/api")


@app.exception_handler(SourceNotFoundError)
async def source_not_found_handler(request: Request, exc: SourceNotFoundError):
    logger.warning(f"Source not found: {exc}")
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(SourceUnreadableError)
async def source_unreadable_handler(request: Request, exc: SourceUnreadableError):
    logger.warning(f"Unreadable PDF: {exc}")
    return JSONResponse(status_code=400, content={"detail": f"Invalid PDF file: {exc}"})


@app.exception_handler(CompressionError)
async def compression_error_handler(request: Request, exc: CompressionError):
    logger.error(f"Compression failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unexpected errors."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred", "error": str(exc)}
    )


# Health check endpoints
@app.get("/health")
async def health_check():
    """Check if the API is running."""
    return {"status": "healthy", "version": VERSION}


@app.get("/health/detailed")
def detailed_health_check():
    """
    Provides detailed health information including system metrics and component status.
    """
    # System info
    system_info = {
        "cpu_usage": psutil.cpu_percent(interval=0.1),
        "memory_usage": psutil.virtual_memory().percent,
        "disk_usage": psutil.disk_usage('/').percent,
        "python_version": platform.python_version(),
        "platform": platform.platform()
    }

    # Check compression tools
    compression_status = {
        "pikepdf": {
            "status": "ok",
            "version": pikepdf.__version__,
            "qpdf_version": pikepdf.__libqpdf_version__
        }
    }

    service = get_compression_service()
    if service.ghostscript.is_available():
        compression_status["ghostscript"] = {"status": "ok", "version": service.ghostscript.version}
    else:
        compression_status["ghostscript"] = {"status": "unavailable", "fallback": "pikepdf"}

    # Check uploads directory
    uploads_status = {"path": config.UPLOADS_DIR, "exists": os.path.isdir(config.UPLOADS_DIR)}
    if uploads_status["exists"]:
        uploads_status["writable"] = os.access(config.UPLOADS_DIR, os.W_OK)
        try:
            uploads_status["free_space_mb"] = shutil.disk_usage(config.UPLOADS_DIR).free / (1024 * 1024)
        except OSError as e:
            uploads_status["space_error"] = str(e)

    return {
        "status": "healthy",
        "version": VERSION,
        "system": system_info,
        "compression": compression_status,
        "uploads_directory": uploads_status,
        "timestamp": time.time()
    }
